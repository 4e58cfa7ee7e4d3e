"""Tests for the Config system."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mcbackup.config import Config, reset_config
from mcbackup.models.folder import Folder


@pytest.fixture(autouse=True)
def _clean_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(data_dir=tmp_path)


class TestConfig:
    def test_default_values(self, config: Config, tmp_path: Path) -> None:
        assert config.backup_path == tmp_path / "backups"
        assert config.default_folders == [Folder.SAVES]
        assert config.compress is True
        assert config.excluded_extensions == []

    def test_set_and_get(self, config: Config) -> None:
        with config.batch_update():
            config.set("backup_path", "/some/path")
        assert config.backup_path == Path("/some/path")

    def test_batch_update_writes_once(self, config: Config, tmp_path: Path) -> None:
        with config.batch_update():
            config.set("compress", False)
            config.set("excluded_extensions", ["log"])
            assert not (tmp_path / "config.json").exists()
        saved = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
        assert saved["compress"] is False
        assert saved["excluded_extensions"] == ["log"]

    def test_persists_between_instances(self, config: Config, tmp_path: Path) -> None:
        config.default_folders = [Folder.MODS, Folder.CONFIG]
        assert Config(data_dir=tmp_path).default_folders == [Folder.MODS, Folder.CONFIG]

    def test_unknown_folder_ignored(self, config: Config) -> None:
        config.set("folders", ["saves", "savez"])
        assert config.default_folders == [Folder.SAVES]

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "config.json").write_text("{ nope", encoding="utf-8")
        assert Config(data_dir=tmp_path).compress is True

    def test_minecraft_path_override(self, config: Config, tmp_path: Path) -> None:
        config.minecraft_path = tmp_path / "mc"
        assert config.minecraft_path == tmp_path / "mc"


class TestBuildOptions:
    def test_uses_stored_defaults(self, config: Config, tmp_path: Path) -> None:
        with config.batch_update():
            config.minecraft_path = tmp_path / "mc"
            config.excluded_extensions = ["log"]
        options = config.build_options()
        assert options.source_root == tmp_path / "mc"
        assert options.folders == [Folder.SAVES]
        assert options.compress is True
        assert options.destination == config.backup_path
        assert options.excluded_extensions == ["log"]

    def test_plain_copy_default_destination(self, config: Config) -> None:
        options = config.build_options(compress=False)
        assert options.destination == config.backup_path / "minecraft"

    def test_overrides(self, config: Config, tmp_path: Path) -> None:
        options = config.build_options(
            folders=["mods"],
            destination=tmp_path / "x.zip",
            excluded_extensions=[],
        )
        assert options.folders == [Folder.MODS]
        assert options.destination == tmp_path / "x.zip"
        assert options.excluded_extensions == []
