"""Installation location model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class LocationSource(StrEnum):
    """Which lookup strategy produced a location."""

    REGISTRY = "registry"
    DEFAULT = "default"
    CUSTOM = "custom"


@dataclass(frozen=True)
class InstallationLocation:
    """Resolved install tree of the target application."""

    root_path: Path
    payload_path: Path  # Directory holding per-version installs
    source: LocationSource
