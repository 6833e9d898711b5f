"""Application configuration — JSON-based, with file locking."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from loguru import logger

from versionguard.core.environment import Environment
from versionguard.core.layout import BACKUPS_DIR_NAME, GUARD_DIR_NAME

_instance: "Config | None" = None


def get_config() -> Config:
    """Module-level factory — single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config()
    return _instance


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


class Config:
    """JSON-based application configuration with file locking."""

    _DEFAULTS: dict[str, Any] = {
        "backup_path": "",
        "custom_install_path": "",
        "log_level": "INFO",
        # Default flags for a full protection run
        "protection": {
            "lock_config": True,
            "create_blockers": True,
            "clean_cache": True,
        },
    }

    def __init__(self, config_dir: Path | None = None, env: Environment | None = None) -> None:
        self._data: dict[str, Any] = {}
        self._env = env or Environment.from_system()
        self._dir = config_dir or self._env.local_app_data / GUARD_DIR_NAME
        self._path = self._dir / "config.json"
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        """Load config from disk, merging with defaults."""
        self._data = json.loads(json.dumps(self._DEFAULTS))  # deep copy defaults
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as f:
                    user_data = json.load(f)
                self._deep_merge(self._data, user_data)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to load config, using defaults: {e}")

    def _deep_merge(self, base: dict, override: dict) -> None:
        """Recursively merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save(self) -> None:
        """Persist config to disk with file locking."""
        with self._lock:
            tmp_path = self._path.with_suffix(".tmp")
            try:
                self._dir.mkdir(parents=True, exist_ok=True)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, ensure_ascii=False, indent=2)
                tmp_path.replace(self._path)
            except OSError as e:
                logger.error(f"Failed to save config: {e}")
                tmp_path.unlink(missing_ok=True)

    # ── Generic access ──

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key path."""
        parts = key.split(".")
        node = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a config value by dot-separated key path."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    # ── Typed properties ──

    @property
    def env(self) -> Environment:
        return self._env

    @property
    def data_dir(self) -> Path:
        return self._dir

    @property
    def backup_path(self) -> Path | None:
        raw = self._data.get("backup_path", "")
        return Path(raw) if raw else None

    @property
    def backup_root(self) -> Path:
        return self.backup_path or self._dir / BACKUPS_DIR_NAME

    @property
    def custom_install_path(self) -> str:
        return self._data.get("custom_install_path", "")

    @custom_install_path.setter
    def custom_install_path(self, value: str) -> None:
        self.set("custom_install_path", value)

    @property
    def log_level(self) -> str:
        return str(self._data.get("log_level", "INFO")).upper()
