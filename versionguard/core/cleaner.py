"""Cache cleaner — purge the target application's cache directories."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from versionguard.core import layout
from versionguard.models.version_info import CacheCleanResult
from versionguard.utils import dir_size, force_remove, format_size

if TYPE_CHECKING:
    from versionguard.core.locator import LocationResolver


class CacheCleaner:
    """Plain delete of cache folders; no backup, no recovery."""

    def __init__(self, resolver: LocationResolver) -> None:
        self._resolver = resolver

    def cache_dirs(self) -> list[Path]:
        location = self._resolver.resolve()
        if location is None:
            return []
        return layout.cache_dirs(location)

    def cache_size(self) -> int:
        return sum(dir_size(d) for d in self.cache_dirs() if d.exists())

    def clean(self) -> CacheCleanResult:
        location = self._resolver.resolve()
        if location is None:
            return CacheCleanResult(success=False, logs=["[!] CapCut installation not found"])

        result = CacheCleanResult()
        for cache_dir in layout.cache_dirs(location):
            if not cache_dir.exists():
                continue
            size = dir_size(cache_dir)
            result.logs.append(f"Cleaning: {cache_dir.name} ({format_size(size)})")
            try:
                force_remove(cache_dir)
            except OSError as e:
                result.logs.append(f"[!] Failed to clean {cache_dir.name}: {e}")
                logger.warning(f"Failed to clean cache {cache_dir}: {e}")
                continue
            result.cleaned_bytes += size

        result.logs.append(f"[OK] Cleaned {format_size(result.cleaned_bytes)} of cache")
        logger.info(f"Cache cleaned: {result.cleaned_bytes} bytes")
        return result
