"""Shared fixtures: a fake registry and a throwaway CapCut install tree."""

from __future__ import annotations

from pathlib import Path

import pytest

from versionguard.core.environment import Environment
from versionguard.core.locator import LocationResolver


class FakeRegistry:
    """In-memory RegistryReader keyed by (hive, subkey, value_name)."""

    def __init__(self, values: dict[tuple[str, str, str], str] | None = None) -> None:
        self.values = dict(values or {})
        self.reads: list[tuple[str, str, str]] = []

    def read_value(self, hive: str, subkey: str, value_name: str) -> str | None:
        self.reads.append((hive, subkey, value_name))
        return self.values.get((hive, subkey, value_name))


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def local_app_data(tmp_path: Path) -> Path:
    path = tmp_path / "LocalAppData"
    path.mkdir()
    return path


@pytest.fixture
def env(local_app_data: Path, registry: FakeRegistry) -> Environment:
    return Environment(local_app_data=local_app_data, registry=registry)


@pytest.fixture
def resolver(env: Environment) -> LocationResolver:
    return LocationResolver(env)


@pytest.fixture
def install_root(local_app_data: Path) -> Path:
    """Default-location install with two versions and a config file."""
    root = local_app_data / "CapCut"
    apps = root / "Apps"
    for version in ("4.5.0.1234", "5.3.0.1964"):
        vdir = apps / version
        (vdir / "resources").mkdir(parents=True)
        (vdir / "CapCut.exe").write_bytes(b"MZ" + b"\0" * 62)
        (vdir / "resources" / "app.pak").write_bytes(b"x" * 300)
    (apps / "configure.ini").write_text(
        "[General]\nlast_version=5.3.0.1964\nchannel=stable\n", encoding="utf-8"
    )
    (apps / "ProductInfo.xml").write_text("<ProductInfo/>", encoding="utf-8")
    return root
