"""Install location resolver — registry lookup with default-location fallback."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from versionguard.core.environment import HKCU, HKLM, Environment
from versionguard.core.layout import PAYLOAD_DIR_NAME, PRODUCT_DIR_NAME
from versionguard.models.installation import InstallationLocation, LocationSource

# (subkey, value name), probed in order; each in HKLM then HKCU
REGISTRY_PATHS: tuple[tuple[str, str], ...] = (
    (r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall\CapCut", "InstallLocation"),
    (
        r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall\CapCut",
        "InstallLocation",
    ),
    (r"SOFTWARE\Microsoft\Windows\CurrentVersion\App Paths\CapCut.exe", "Path"),
)

_HIVES = (HKLM, HKCU)


class LocationResolver:
    """
    Find the target application's install tree.

    Stateless: every call re-reads the registry and the filesystem, so a
    location is never cached between calls.
    """

    def __init__(self, env: Environment, custom_path: str = "") -> None:
        self._env = env
        self._custom_path = custom_path

    @property
    def default_root(self) -> Path:
        return self._env.local_app_data / PRODUCT_DIR_NAME

    # ── Strategies ──

    def _find_from_registry(self) -> Path | None:
        for subkey, value_name in REGISTRY_PATHS:
            for hive in _HIVES:
                value = self._env.registry.read_value(hive, subkey, value_name)
                if not value:
                    continue
                candidate = Path(value)
                if candidate.exists():
                    return candidate
                logger.debug(f"Registry path does not exist: {candidate}")
        return None

    def resolve(self) -> InstallationLocation | None:
        """
        Resolve the install location.

        1. Registry entries, in ``REGISTRY_PATHS`` order
        2. ``<local app-data>/CapCut``
        3. The saved custom path, if it still validates
        4. None: not installed
        """
        root = self._find_from_registry()
        if root is not None:
            payload = root / PAYLOAD_DIR_NAME
            if not payload.exists():
                # Flattened installs keep versions directly in the root
                payload = root
            return InstallationLocation(root, payload, LocationSource.REGISTRY)

        root = self.default_root
        payload = root / PAYLOAD_DIR_NAME
        if root.exists() or payload.exists():
            return InstallationLocation(root, payload, LocationSource.DEFAULT)

        if self._custom_path:
            location = self.validate_custom_path(self._custom_path)
            if location is not None:
                return location
            logger.warning(f"Saved install path is no longer valid: {self._custom_path}")

        logger.debug("No installation found in registry, default or saved location")
        return None

    @staticmethod
    def validate_custom_path(custom_path: str) -> InstallationLocation | None:
        """Validate a user-supplied install path (root, or the Apps folder itself)."""
        path = Path(custom_path)
        if not custom_path or not path.exists():
            return None

        if (path / PAYLOAD_DIR_NAME).exists():
            return InstallationLocation(path, path / PAYLOAD_DIR_NAME, LocationSource.CUSTOM)
        if path.name == PAYLOAD_DIR_NAME:
            return InstallationLocation(path.parent, path, LocationSource.CUSTOM)
        return None
