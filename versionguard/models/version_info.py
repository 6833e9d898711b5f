"""Installed version / cache models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class VersionInfo:
    """One installed version directory under the payload folder."""

    name: str
    path: str
    size_bytes: int = 0


@dataclass
class CacheCleanResult:
    success: bool = True
    cleaned_bytes: int = 0
    logs: list[str] = field(default_factory=list)
