"""Environment capability — the external state every lookup reads.

Components never read ``os.environ`` or the registry directly; they are
handed an :class:`Environment` so tests can substitute both.
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from loguru import logger

HKLM = "HKLM"
HKCU = "HKCU"


class RegistryReader(Protocol):
    """Read-only registry access."""

    def read_value(self, hive: str, subkey: str, value_name: str) -> str | None: ...


class WindowsRegistry:
    """RegistryReader backed by ``winreg``. Returns None off Windows."""

    def read_value(self, hive: str, subkey: str, value_name: str) -> str | None:
        if platform.system() != "Windows":
            return None

        import winreg

        root = {
            HKLM: winreg.HKEY_LOCAL_MACHINE,
            HKCU: winreg.HKEY_CURRENT_USER,
        }.get(hive)
        if root is None:
            return None

        try:
            with winreg.OpenKey(root, subkey) as key:
                value, _kind = winreg.QueryValueEx(key, value_name)
        except OSError:
            return None
        if not isinstance(value, str) or not value:
            return None
        logger.debug(f"Registry hit: {hive}\\{subkey}[{value_name}] = {value}")
        return value


def _default_local_app_data() -> Path:
    return Path(os.environ.get("LOCALAPPDATA", str(Path.home() / "AppData" / "Local")))


@dataclass
class Environment:
    """Per-user application-data root plus a registry reader."""

    local_app_data: Path = field(default_factory=_default_local_app_data)
    registry: RegistryReader = field(default_factory=WindowsRegistry)

    @classmethod
    def from_system(cls) -> Environment:
        return cls()
