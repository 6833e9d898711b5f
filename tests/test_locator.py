"""Tests for the install location resolver."""

from __future__ import annotations

from pathlib import Path

from conftest import FakeRegistry

from versionguard.core.environment import HKCU, HKLM, Environment
from versionguard.core.locator import REGISTRY_PATHS, LocationResolver
from versionguard.models.installation import LocationSource

UNINSTALL_KEY, UNINSTALL_VALUE = REGISTRY_PATHS[0]
WOW_KEY, WOW_VALUE = REGISTRY_PATHS[1]


class TestResolve:
    def test_nothing_installed(self, resolver: LocationResolver) -> None:
        assert resolver.resolve() is None

    def test_default_location(self, resolver: LocationResolver, install_root: Path) -> None:
        location = resolver.resolve()
        assert location is not None
        assert location.source == LocationSource.DEFAULT
        assert location.root_path == install_root
        assert location.payload_path == install_root / "Apps"

    def test_default_root_without_apps(self, resolver: LocationResolver, local_app_data: Path) -> None:
        (local_app_data / "CapCut").mkdir()
        location = resolver.resolve()
        assert location is not None
        assert location.source == LocationSource.DEFAULT

    def test_registry_beats_default(
        self, resolver: LocationResolver, registry: FakeRegistry, install_root: Path, tmp_path: Path
    ) -> None:
        custom = tmp_path / "D" / "CapCut"
        (custom / "Apps").mkdir(parents=True)
        registry.values[(HKLM, UNINSTALL_KEY, UNINSTALL_VALUE)] = str(custom)

        location = resolver.resolve()
        assert location is not None
        assert location.source == LocationSource.REGISTRY
        assert location.root_path == custom
        assert location.payload_path == custom / "Apps"

    def test_registry_flattened_layout(
        self, resolver: LocationResolver, registry: FakeRegistry, tmp_path: Path
    ) -> None:
        flat = tmp_path / "flat"
        flat.mkdir()
        registry.values[(HKCU, WOW_KEY, WOW_VALUE)] = str(flat)

        location = resolver.resolve()
        assert location is not None
        assert location.payload_path == flat
        assert location.root_path == flat

    def test_registry_missing_path_falls_through(
        self, resolver: LocationResolver, registry: FakeRegistry, install_root: Path, tmp_path: Path
    ) -> None:
        registry.values[(HKLM, UNINSTALL_KEY, UNINSTALL_VALUE)] = str(tmp_path / "gone")
        location = resolver.resolve()
        assert location is not None
        assert location.source == LocationSource.DEFAULT

    def test_hklm_probed_before_hkcu(
        self, resolver: LocationResolver, registry: FakeRegistry, tmp_path: Path
    ) -> None:
        machine = tmp_path / "machine"
        user = tmp_path / "user"
        machine.mkdir()
        user.mkdir()
        registry.values[(HKLM, UNINSTALL_KEY, UNINSTALL_VALUE)] = str(machine)
        registry.values[(HKCU, UNINSTALL_KEY, UNINSTALL_VALUE)] = str(user)

        location = resolver.resolve()
        assert location is not None
        assert location.root_path == machine
        assert registry.reads[0][0] == HKLM

    def test_earlier_key_wins_over_later_key(
        self, resolver: LocationResolver, registry: FakeRegistry, tmp_path: Path
    ) -> None:
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        registry.values[(HKCU, UNINSTALL_KEY, UNINSTALL_VALUE)] = str(first)
        registry.values[(HKLM, WOW_KEY, WOW_VALUE)] = str(second)

        location = resolver.resolve()
        assert location is not None
        assert location.root_path == first

    def test_resolution_is_not_cached(self, resolver: LocationResolver, install_root: Path) -> None:
        assert resolver.resolve() is not None
        import shutil

        shutil.rmtree(install_root)
        assert resolver.resolve() is None


class TestCustomPath:
    def test_root_with_apps(self, install_root: Path) -> None:
        location = LocationResolver.validate_custom_path(str(install_root))
        assert location is not None
        assert location.source == LocationSource.CUSTOM
        assert location.payload_path == install_root / "Apps"

    def test_apps_folder_itself(self, install_root: Path) -> None:
        location = LocationResolver.validate_custom_path(str(install_root / "Apps"))
        assert location is not None
        assert location.root_path == install_root
        assert location.payload_path == install_root / "Apps"

    def test_missing_path(self, tmp_path: Path) -> None:
        assert LocationResolver.validate_custom_path(str(tmp_path / "nope")) is None

    def test_wrong_shape(self, tmp_path: Path) -> None:
        other = tmp_path / "Programs"
        other.mkdir()
        assert LocationResolver.validate_custom_path(str(other)) is None

    def test_empty_string(self) -> None:
        assert LocationResolver.validate_custom_path("") is None


class TestSavedCustomPath:
    def test_used_when_nothing_else_found(self, env: Environment, tmp_path: Path) -> None:
        custom = tmp_path / "D" / "CapCut"
        (custom / "Apps").mkdir(parents=True)

        location = LocationResolver(env, str(custom)).resolve()
        assert location is not None
        assert location.source == LocationSource.CUSTOM
        assert location.payload_path == custom / "Apps"

    def test_default_location_still_wins(self, env: Environment, install_root: Path, tmp_path: Path) -> None:
        custom = tmp_path / "D" / "CapCut"
        (custom / "Apps").mkdir(parents=True)

        location = LocationResolver(env, str(custom)).resolve()
        assert location is not None
        assert location.source == LocationSource.DEFAULT
        assert location.root_path == install_root

    def test_stale_saved_path(self, env: Environment, tmp_path: Path) -> None:
        assert LocationResolver(env, str(tmp_path / "removed")).resolve() is None


class TestEnvironment:
    def test_default_environment_reads_localappdata(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
        env = Environment.from_system()
        assert env.local_app_data == tmp_path
