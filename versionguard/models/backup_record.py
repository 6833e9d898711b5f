"""Backup record models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class BackupRecord:
    """Snapshot of one version directory, as described by its sidecar JSON."""

    version_label: str
    original_path: str
    created_at: int  # Unix seconds
    size_bytes: int = 0
    reason: str = ""
    backup_id: str = ""  # Directory name under the backup root; not persisted

    def to_sidecar(self) -> dict[str, object]:
        return {
            "version_label": self.version_label,
            "original_path": self.original_path,
            "created_at": self.created_at,
            "size_bytes": self.size_bytes,
            "reason": self.reason,
        }


@dataclass
class BackupResult:
    """Result of create / delete / clear."""

    success: bool = True
    backup_id: str | None = None
    error: str | None = None


@dataclass
class RestoreResult:
    """Result of a restore operation."""

    success: bool = True
    restored_path: str | None = None
    error: str | None = None
