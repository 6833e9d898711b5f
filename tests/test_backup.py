"""Tests for the BackupStore."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from versionguard.core.backup import SIDECAR_NAME, BackupStore
from versionguard.utils import set_readonly


class FakeClock:
    def __init__(self, start: int = 1_700_000_000) -> None:
        self.now = start

    def __call__(self) -> float:
        return float(self.now)


@pytest.fixture
def tmp_config(tmp_path: Path):
    """Create a mock Config pointing to a temp directory."""
    config = MagicMock()
    config.backup_root = tmp_path / "guard" / "Backups"
    config.data_dir = tmp_path / "guard"
    return config


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_config, clock: FakeClock) -> BackupStore:
    return BackupStore(tmp_config, clock=clock)


@pytest.fixture
def version_dir(tmp_path: Path) -> Path:
    vdir = tmp_path / "Apps" / "4.5.0.1234"
    (vdir / "bin" / "plugins").mkdir(parents=True)
    (vdir / "CapCut.exe").write_bytes(b"exe" * 100)
    (vdir / "bin" / "core.dll").write_bytes(b"d" * 50)
    (vdir / "bin" / "plugins" / "fx.dll").write_bytes(b"f" * 7)
    (vdir / "empty").mkdir()
    return vdir


def _tree(root: Path) -> dict[str, int]:
    return {
        str(p.relative_to(root)): p.stat().st_size
        for p in root.rglob("*")
        if p.is_file() and p.name != SIDECAR_NAME
    }


class TestBackupCreation:
    def test_creates_copy_and_sidecar(self, store: BackupStore, version_dir: Path) -> None:
        result = store.create(version_dir, "pre-delete snapshot")
        assert result.success
        assert result.backup_id == "4.5.0.1234_1700000000"

        backup_dir = store.backup_root / result.backup_id
        assert (backup_dir / "CapCut.exe").exists()
        assert (backup_dir / "empty").is_dir()
        assert _tree(backup_dir) == _tree(version_dir)

    def test_sidecar_has_correct_metadata(self, store: BackupStore, version_dir: Path) -> None:
        result = store.create(version_dir, "manual")
        with open(store.backup_root / result.backup_id / SIDECAR_NAME, encoding="utf-8") as f:
            meta = json.load(f)
        assert meta["version_label"] == "4.5.0.1234"
        assert meta["original_path"] == str(version_dir)
        assert meta["created_at"] == 1_700_000_000
        assert meta["size_bytes"] == 300 + 50 + 7
        assert meta["reason"] == "manual"

    def test_source_not_a_directory(self, store: BackupStore, tmp_path: Path) -> None:
        result = store.create(tmp_path / "missing", "x")
        assert not result.success
        assert "Failed to copy directory" in (result.error or "")

    def test_backup_root_uncreatable(self, tmp_config, version_dir: Path, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")
        tmp_config.backup_root = blocker / "Backups"
        result = BackupStore(tmp_config).create(version_dir, "x")
        assert not result.success
        assert "Failed to create backup directory" in (result.error or "")

    def test_same_second_does_not_overwrite(self, store: BackupStore, version_dir: Path) -> None:
        first = store.create(version_dir, "a")
        second = store.create(version_dir, "b")
        assert first.backup_id != second.backup_id
        assert second.backup_id == f"{first.backup_id}-2"
        reasons = {r.backup_id: r.reason for r in store.list_backups()}
        assert reasons == {first.backup_id: "a", second.backup_id: "b"}

    def test_sidecar_failure_is_not_fatal(
        self, store: BackupStore, version_dir: Path, monkeypatch
    ) -> None:
        import versionguard.core.backup as backup_module

        def broken_dump(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(backup_module.json, "dump", broken_dump)
        result = store.create(version_dir, "x")
        assert result.success
        assert (store.backup_root / result.backup_id / "CapCut.exe").exists()


class TestBackupListing:
    def test_list_empty(self, store: BackupStore) -> None:
        assert store.list_backups() == []

    def test_list_newest_first(self, store: BackupStore, version_dir: Path, clock: FakeClock) -> None:
        for ts in (100, 200, 150):
            clock.now = ts
            store.create(version_dir, "x")
        assert [r.created_at for r in store.list_backups()] == [200, 150, 100]

    def test_skips_dirs_without_sidecar(self, store: BackupStore, version_dir: Path) -> None:
        store.create(version_dir, "x")
        (store.backup_root / "stray").mkdir()
        (store.backup_root / "broken").mkdir()
        (store.backup_root / "broken" / SIDECAR_NAME).write_text("{not json")
        records = store.list_backups()
        assert [r.backup_id for r in records] == ["4.5.0.1234_1700000000"]

    def test_total_size(self, store: BackupStore, version_dir: Path) -> None:
        assert store.total_size() == 0
        store.create(version_dir, "x")
        assert store.total_size() > 357  # payload plus sidecar


class TestRestore:
    def test_round_trip(self, store: BackupStore, version_dir: Path) -> None:
        before = _tree(version_dir)
        backup_id = store.create(version_dir, "x").backup_id
        import shutil

        shutil.rmtree(version_dir)

        result = store.restore(backup_id)
        assert result.success
        assert result.restored_path == str(version_dir)
        assert _tree(version_dir) == before
        assert not (version_dir / SIDECAR_NAME).exists()

    def test_replaces_existing_readonly_tree(self, store: BackupStore, version_dir: Path) -> None:
        backup_id = store.create(version_dir, "x").backup_id
        junk = version_dir / "bin" / "junk.bin"
        junk.write_bytes(b"junk")
        set_readonly(junk)
        set_readonly(version_dir / "CapCut.exe")

        result = store.restore(backup_id)
        assert result.success
        assert not junk.exists()
        assert (version_dir / "CapCut.exe").stat().st_size == 300

    def test_recreates_missing_parent(self, store: BackupStore, version_dir: Path) -> None:
        backup_id = store.create(version_dir, "x").backup_id
        import shutil

        shutil.rmtree(version_dir.parent)
        assert store.restore(backup_id).success
        assert (version_dir / "bin" / "plugins" / "fx.dll").exists()

    def test_unknown_backup(self, store: BackupStore) -> None:
        result = store.restore("nope_1")
        assert not result.success
        assert "Backup not found" in (result.error or "")

    def test_path_like_id_rejected(self, store: BackupStore) -> None:
        assert not store.restore("../etc").success

    def test_missing_sidecar(self, store: BackupStore) -> None:
        (store.backup_root / "orphan_1").mkdir(parents=True)
        result = store.restore("orphan_1")
        assert not result.success
        assert "metadata" in (result.error or "")


class TestDelete:
    def test_delete_one(self, store: BackupStore, version_dir: Path) -> None:
        backup_id = store.create(version_dir, "x").backup_id
        result = store.delete(backup_id)
        assert result.success
        assert store.list_backups() == []

    def test_delete_unknown(self, store: BackupStore) -> None:
        assert not store.delete("missing_1").success

    def test_clear_all(self, store: BackupStore, version_dir: Path, clock: FakeClock) -> None:
        store.create(version_dir, "x")
        clock.now += 1
        store.create(version_dir, "y")
        assert store.clear_all().success
        assert not store.backup_root.exists()
        assert store.total_size() == 0

    def test_clear_all_without_root(self, store: BackupStore) -> None:
        assert store.clear_all().success
