"""Directory layout of the guarded application (CapCut for Windows)."""

from __future__ import annotations

from pathlib import Path

from versionguard.models.installation import InstallationLocation

PRODUCT_DIR_NAME = "CapCut"
PAYLOAD_DIR_NAME = "Apps"
PROCESS_NAMES = ("CapCut", "CapCut.exe")

CONFIG_FILE_NAME = "configure.ini"
VERSION_PIN_KEY = "last_version"
SENTINEL_VERSION = "1.0.0.0"
PRODUCT_INFO_NAME = "ProductInfo.xml"

USER_DATA_DIR_NAME = "User Data"
DOWNLOAD_DIR_NAME = "Download"
UPDATER_EXE_NAME = "update.exe"
CACHE_DIR_NAMES = ("Cache", "Shadow_Cache", "Smart_Crop")

# Our own per-user data directory, under local app-data
GUARD_DIR_NAME = "CCVersionGuard"
BACKUPS_DIR_NAME = "Backups"


def config_file(location: InstallationLocation) -> Path:
    return location.payload_path / CONFIG_FILE_NAME


def product_info_file(location: InstallationLocation) -> Path:
    return location.payload_path / PRODUCT_INFO_NAME


def download_dir(location: InstallationLocation) -> Path:
    return location.root_path / USER_DATA_DIR_NAME / DOWNLOAD_DIR_NAME


def updater_file(location: InstallationLocation) -> Path:
    return download_dir(location) / UPDATER_EXE_NAME


def cache_dirs(location: InstallationLocation) -> list[Path]:
    user_data = location.root_path / USER_DATA_DIR_NAME
    return [user_data / name for name in CACHE_DIR_NAMES]


def pin_line() -> str:
    return f"{VERSION_PIN_KEY}={SENTINEL_VERSION}"


def line_key(line: str) -> str | None:
    """Key of a ``key=value`` line, or None for lines without ``=``."""
    key, sep, _value = line.partition("=")
    if not sep:
        return None
    return key.strip()


def is_pin_line(line: str) -> bool:
    return line_key(line) == VERSION_PIN_KEY


def is_sentinel_pin(line: str) -> bool:
    if not is_pin_line(line):
        return False
    return line.partition("=")[2].strip() == SENTINEL_VERSION
