"""Backup store — full directory snapshots with sidecar JSON metadata."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from loguru import logger

from versionguard.models.backup_record import BackupRecord, BackupResult, RestoreResult
from versionguard.utils import copy_tree, dir_size, force_remove

if TYPE_CHECKING:
    from versionguard.config import Config

SIDECAR_NAME = "_backup_metadata.json"


class BackupStore:
    """
    Snapshot store for version directories.

    Layout::

      {backup_root}/
        └── {version_label}_{created_at}/
            ├── ... full copy of the version directory ...
            └── _backup_metadata.json

    The directory plus its sidecar is the durable record; nothing is
    cached in memory between calls.
    """

    def __init__(self, config: Config, clock: Callable[[], float] = time.time) -> None:
        self._config = config
        self._clock = clock

    @property
    def backup_root(self) -> Path:
        return self._config.backup_root

    def _backup_dir(self, backup_id: str) -> Path | None:
        """Directory for *backup_id*; None for ids that are not a plain name."""
        if not backup_id or Path(backup_id).name != backup_id or backup_id in (".", ".."):
            return None
        return self.backup_root / backup_id

    @staticmethod
    def _unique_id(root: Path, key: str) -> str:
        # Same label within the same second: add a sequence suffix
        candidate = key
        n = 1
        while (root / candidate).exists():
            n += 1
            candidate = f"{key}-{n}"
        return candidate

    # ── Create ──

    def create(self, source_path: str | Path, reason: str) -> BackupResult:
        """Copy *source_path* into a new snapshot directory."""
        source = Path(source_path)
        root = self.backup_root
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create backup directory {root}: {e}")
            return BackupResult(success=False, error=f"Failed to create backup directory: {e}")

        created_at = int(self._clock())
        version_label = source.name
        backup_id = self._unique_id(root, f"{version_label}_{created_at}")
        backup_dir = root / backup_id

        try:
            copy_tree(source, backup_dir)
        except OSError as e:
            logger.error(f"Backup copy failed for {source}: {e}")
            return BackupResult(success=False, error=f"Failed to copy directory: {e}")

        record = BackupRecord(
            version_label=version_label,
            original_path=str(source),
            created_at=created_at,
            size_bytes=dir_size(backup_dir),
            reason=reason,
            backup_id=backup_id,
        )
        self._write_sidecar(backup_dir, record)

        logger.info(f"Created backup: {backup_id} ({record.size_bytes} bytes)")
        return BackupResult(success=True, backup_id=backup_id)

    def _write_sidecar(self, backup_dir: Path, record: BackupRecord) -> None:
        """Write sidecar JSON. Failure is logged only; the copy is already restorable."""
        try:
            with open(backup_dir / SIDECAR_NAME, "w", encoding="utf-8") as f:
                json.dump(record.to_sidecar(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.warning(f"Could not save backup metadata for {backup_dir.name}: {e}")

    # ── Query ──

    def _read_sidecar(self, backup_dir: Path) -> BackupRecord:
        """Parse a sidecar file. Raises OSError / ValueError / KeyError / TypeError."""
        with open(backup_dir / SIDECAR_NAME, encoding="utf-8") as f:
            meta = json.load(f)
        return BackupRecord(
            version_label=str(meta["version_label"]),
            original_path=str(meta["original_path"]),
            created_at=int(meta["created_at"]),
            size_bytes=int(meta.get("size_bytes", 0)),
            reason=str(meta.get("reason", "")),
            backup_id=backup_dir.name,
        )

    def get(self, backup_id: str) -> BackupRecord | None:
        backup_dir = self._backup_dir(backup_id)
        if backup_dir is None or not backup_dir.is_dir():
            return None
        try:
            return self._read_sidecar(backup_dir)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Unreadable backup metadata: {backup_id}: {e}")
            return None

    def list_backups(self) -> list[BackupRecord]:
        """All readable backups, newest first."""
        root = self.backup_root
        if not root.is_dir():
            return []

        records: list[BackupRecord] = []
        for entry in root.iterdir():
            if not entry.is_dir() or not (entry / SIDECAR_NAME).is_file():
                continue
            try:
                records.append(self._read_sidecar(entry))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(f"Skipping malformed backup metadata: {entry.name}: {e}")

        records.sort(key=lambda r: (r.created_at, r.backup_id), reverse=True)
        return records

    def total_size(self) -> int:
        return dir_size(self.backup_root)

    # ── Restore ──

    def restore(self, backup_id: str) -> RestoreResult:
        """
        Put a snapshot back at its original path.

        Whatever currently occupies the original path is removed first
        (read-only flags cleared).  The copy is not rolled back on failure.
        """
        backup_dir = self._backup_dir(backup_id)
        if backup_dir is None or not backup_dir.is_dir():
            return RestoreResult(success=False, error=f"Backup not found: {backup_id}")

        try:
            record = self._read_sidecar(backup_dir)
        except OSError as e:
            return RestoreResult(success=False, error=f"Could not read metadata: {e}")
        except (ValueError, KeyError, TypeError) as e:
            return RestoreResult(success=False, error=f"Invalid metadata: {e}")

        original = Path(record.original_path)
        try:
            original.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return RestoreResult(success=False, error=f"Could not create parent directory: {e}")

        try:
            force_remove(original)
        except OSError as e:
            logger.error(f"Restore could not clear {original}: {e}")
            return RestoreResult(success=False, error=f"Could not remove existing directory: {e}")

        try:
            copy_tree(backup_dir, original, exclude=SIDECAR_NAME)
        except OSError as e:
            logger.error(f"Restore copy failed for {backup_id}: {e}")
            return RestoreResult(success=False, error=f"Failed to restore: {e}")

        logger.info(f"Restored backup {backup_id} to {original}")
        return RestoreResult(success=True, restored_path=record.original_path)

    # ── Delete ──

    def delete(self, backup_id: str) -> BackupResult:
        backup_dir = self._backup_dir(backup_id)
        if backup_dir is None or not backup_dir.exists():
            return BackupResult(success=False, error=f"Backup not found: {backup_id}")
        try:
            force_remove(backup_dir)
        except OSError as e:
            logger.error(f"Failed to delete backup {backup_id}: {e}")
            return BackupResult(success=False, error=f"Failed to delete backup: {e}")
        logger.info(f"Deleted backup: {backup_id}")
        return BackupResult(success=True, backup_id=backup_id)

    def clear_all(self) -> BackupResult:
        root = self.backup_root
        if not root.exists():
            return BackupResult(success=True)
        try:
            force_remove(root)
        except OSError as e:
            logger.error(f"Failed to clear backups at {root}: {e}")
            return BackupResult(success=False, error=f"Failed to clear backups: {e}")
        logger.info(f"Cleared all backups at {root}")
        return BackupResult(success=True)
