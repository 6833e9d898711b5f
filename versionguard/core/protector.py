"""Protection controller — lock the updater config and place blocker files.

Status is never stored.  :func:`compute_status` re-reads the three signals
(pinned config line, ProductInfo blocker, update.exe blocker) on each call,
so out-of-band edits show up on the next read.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from versionguard.core import layout
from versionguard.models.protection import ProtectionResult, ProtectionStatus, StepOutcome
from versionguard.utils import clear_readonly, force_remove, is_readonly, set_readonly

if TYPE_CHECKING:
    from versionguard.core.locator import LocationResolver
    from versionguard.models.installation import InstallationLocation

NOT_FOUND_ERROR = "Could not find CapCut installation"


# ── Signals ──

def is_blocker(path: Path) -> bool:
    """A zero-length, read-only regular file."""
    try:
        if not path.is_file():
            return False
        return path.stat().st_size == 0 and is_readonly(path)
    except OSError:
        return False


def is_config_locked(config_path: Path) -> bool:
    try:
        lines = _read_lines(config_path)
    except OSError:
        return False
    return any(layout.is_sentinel_pin(_strip_ending(line)) for line in lines)


def compute_status(location: InstallationLocation | None) -> ProtectionStatus:
    """Derive protection status from what is on disk right now."""
    if location is None:
        return ProtectionStatus()

    config_locked = is_config_locked(layout.config_file(location))
    product_blocked = is_blocker(layout.product_info_file(location))
    update_blocked = is_blocker(layout.updater_file(location))

    return ProtectionStatus(
        is_protected=config_locked or product_blocked or update_blocked,
        config_locked=config_locked,
        blockers_exist=product_blocked or update_blocked,
    )


# ── Mutations ──

def _read_lines(path: Path) -> list[str]:
    """Lines with their own endings; undecodable bytes survive a rewrite."""
    if not path.exists():
        return []
    content = path.read_bytes().decode("utf-8", errors="surrogateescape")
    parts = content.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _write_lines(path: Path, lines: list[str]) -> None:
    path.write_bytes("".join(lines).encode("utf-8", errors="surrogateescape"))


def _strip_ending(line: str) -> str:
    return line.rstrip("\r\n")


def lock_configuration(config_path: Path) -> None:
    """Pin the version key to the sentinel, appending it when absent."""
    lines = _read_lines(config_path)
    newline = "\r\n" if any(line.endswith("\r\n") for line in lines) else "\n"

    new_lines: list[str] = []
    found = False
    for line in lines:
        text = _strip_ending(line)
        if layout.is_pin_line(text):
            new_lines.append(layout.pin_line() + line[len(text):])
            found = True
        else:
            new_lines.append(line)
    if not found:
        if new_lines and not new_lines[-1].endswith("\n"):
            new_lines[-1] += newline
        new_lines.append(layout.pin_line() + newline)
    _write_lines(config_path, new_lines)


def unlock_configuration(config_path: Path) -> None:
    lines = _read_lines(config_path)
    _write_lines(config_path, [line for line in lines if not layout.is_pin_line(_strip_ending(line))])


def create_blocker(path: Path) -> None:
    """Replace whatever is at *path* with an empty read-only file."""
    force_remove(path)
    path.write_bytes(b"")
    set_readonly(path)


class ProtectionController:
    """Apply, remove and report the update lockdown."""

    def __init__(self, resolver: LocationResolver) -> None:
        self._resolver = resolver

    def status(self) -> ProtectionStatus:
        return compute_status(self._resolver.resolve())

    def apply(self, lock_config: bool = True, create_blockers: bool = True) -> ProtectionResult:
        """Lock config and/or create blockers. Stops at the first failing step."""
        location = self._resolver.resolve()
        if location is None:
            logger.error("Apply protection: installation not found")
            return ProtectionResult(success=False, error=NOT_FOUND_ERROR)

        result = ProtectionResult()

        if lock_config:
            result.logs.append("Modifying config...")
            try:
                lock_configuration(layout.config_file(location))
            except OSError as e:
                logger.error(f"Config lock failed: {e}")
                result.success = False
                result.error = f"Failed to lock configuration: {e}"
                return result
            result.logs.append("[OK] Configuration locked")
        else:
            result.logs.append("Skipping config lock (disabled)")

        if create_blockers:
            result.logs.append("Creating blockers...")
            try:
                create_blocker(layout.product_info_file(location))
                layout.download_dir(location).mkdir(parents=True, exist_ok=True)
                create_blocker(layout.updater_file(location))
            except OSError as e:
                logger.error(f"Blocker creation failed: {e}")
                result.success = False
                result.error = f"Failed to create blockers: {e}"
                return result
            result.logs.append("[OK] Update blockers created")
        else:
            result.logs.append("Skipping blocker creation (disabled)")

        logger.info(f"Protection applied at {location.root_path}")
        return result

    def remove(self) -> ProtectionResult:
        """
        Undo every signal independently.

        Each step runs even when an earlier one failed; failures are
        reported as warning lines and the overall result stays successful.
        """
        location = self._resolver.resolve()
        if location is None:
            logger.error("Remove protection: installation not found")
            return ProtectionResult(success=False, error=NOT_FOUND_ERROR)

        steps = [
            self._remove_blocker(layout.product_info_file(location)),
            self._remove_blocker(layout.updater_file(location)),
            self._reset_config(layout.config_file(location)),
        ]

        result = ProtectionResult()
        for step in steps:
            if step is None:
                continue
            result.logs.append(f"Removing {step.name}...")
            if step.ok:
                result.logs.append(f"[OK] {step.message}")
            else:
                result.logs.append(f"[!] {step.message}")
                logger.warning(f"Unlock step '{step.name}' failed: {step.message}")
        result.logs.append("[OK] Protection removed - CapCut can now auto-update")
        logger.info(f"Protection removed at {location.root_path}")
        return result

    @staticmethod
    def _remove_blocker(path: Path) -> StepOutcome | None:
        if not path.exists() and not path.is_symlink():
            return None
        name = f"{path.name} blocker"
        try:
            if path.is_file() and path.stat().st_size > 0:
                # Real app data, not something apply() wrote
                return StepOutcome(name, True, f"{path.name} left in place (not a blocker)")
            clear_readonly(path)
            if path.is_dir():
                force_remove(path)
            else:
                path.unlink()
        except OSError as e:
            return StepOutcome(name, False, f"Could not remove {path.name}: {e}")
        return StepOutcome(name, True, f"{path.name} blocker removed")

    @staticmethod
    def _reset_config(path: Path) -> StepOutcome | None:
        if not path.exists():
            return None
        name = f"{path.name} version lock"
        try:
            unlock_configuration(path)
        except OSError as e:
            return StepOutcome(name, False, f"Could not reset {path.name}: {e}")
        return StepOutcome(name, True, f"{path.name} reset")
