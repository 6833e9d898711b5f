"""Version scanner — list installed version directories."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from versionguard.models.version_info import VersionInfo
from versionguard.utils import dir_size

if TYPE_CHECKING:
    from versionguard.core.locator import LocationResolver


class VersionScanner:
    """
    Enumerate per-version directories below the payload folder.

    Sizing walks every file, so callers with an event loop should run
    this through :class:`~versionguard.core.scan_worker.ScanWorker`.
    """

    def __init__(self, resolver: LocationResolver) -> None:
        self._resolver = resolver

    def scan(self) -> list[VersionInfo]:
        location = self._resolver.resolve()
        if location is None or not location.payload_path.is_dir():
            return []

        versions = [
            VersionInfo(name=entry.name, path=str(entry), size_bytes=dir_size(entry))
            for entry in location.payload_path.iterdir()
            if entry.is_dir()
        ]
        versions.sort(key=lambda v: v.name)

        logger.info(f"Found {len(versions)} installed version(s) in {location.payload_path}")
        return versions
