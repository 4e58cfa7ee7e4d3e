"""Tests for BackupRecord serialization."""

from __future__ import annotations

import json
from datetime import timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from mcbackup.errors import BackupIOError, SerializationError
from mcbackup.models.backup_options import BackupConfiguration
from mcbackup.models.backup_record import BackupRecord
from mcbackup.models.folder import Folder


@pytest.fixture
def options(tmp_path: Path) -> BackupConfiguration:
    return BackupConfiguration(
        source_root=tmp_path / ".minecraft",
        folders=[Folder.SAVES, Folder.MODS],
        destination=tmp_path / "backups" / "world",
        excluded_extensions=["log"],
    )


@pytest.fixture
def record(options: BackupConfiguration) -> BackupRecord:
    return BackupRecord.create(options, size_in_bytes=300, file_count=2)


class TestCreate:
    def test_snapshots_configuration(self, record: BackupRecord, options: BackupConfiguration) -> None:
        assert record.size_in_bytes == 300
        assert record.file_count == 2
        assert record.folders == ["saves", "mods"]
        assert record.compress is False
        assert record.excluded_extensions == ["log"]
        assert record.destination == str(options.destination)
        assert record.timestamp.tzinfo == timezone.utc

    def test_snapshot_does_not_follow_later_changes(
        self, record: BackupRecord, options: BackupConfiguration
    ) -> None:
        options.add_excluded_extension("tmp")
        assert record.excluded_extensions == ["log"]

    def test_source_path_resolves_for_this_machine(
        self, record: BackupRecord, options: BackupConfiguration
    ) -> None:
        assert record.source_path == options.absolute_source_root.resolve()


class TestJson:
    def test_fields(self, record: BackupRecord) -> None:
        data = json.loads(record.to_json())
        assert set(data) == {
            "timestamp",
            "size_in_bytes",
            "file_count",
            "folders",
            "compress",
            "excluded_extensions",
            "source_root",
            "destination",
        }
        assert data["size_in_bytes"] == 300
        assert data["excluded_extensions"] == ["log"]

    def test_round_trip(self, record: BackupRecord, tmp_path: Path) -> None:
        path = record.write_json(tmp_path / "record.json")
        loaded = BackupRecord.load_json(path)
        assert loaded.timestamp == record.timestamp
        assert loaded.size_in_bytes == record.size_in_bytes
        assert loaded.folders == record.folders
        assert loaded.file_count == record.file_count

    def test_write_records_own_size(self, record: BackupRecord, tmp_path: Path) -> None:
        assert record.json_size_in_bytes == 0
        path = record.write_json(tmp_path / "nested" / "record.json")
        assert record.json_size_in_bytes == path.stat().st_size
        assert record.json_size_in_bytes > 0

    def test_default_path_is_beside_destination(self, record: BackupRecord, tmp_path: Path) -> None:
        path = record.write_json()
        assert path == tmp_path / "backups" / f"world_{record.stamp}.json"
        assert path.exists()

    def test_default_path_never_overwrites_a_sidecar(self, record: BackupRecord) -> None:
        first = record.write_json()
        second = record.write_json()
        assert first != second
        assert second.name == f"world_{record.stamp}_1.json"
        assert first.exists() and second.exists()

    def test_relative_destination_is_snapshotted_absolute(
        self, options: BackupConfiguration, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        record = BackupRecord.create(options.clone(destination=Path(".")), size_in_bytes=0)
        assert Path(record.destination).is_absolute()
        assert record.default_json_path().name == f"{Path.cwd().name}_{record.stamp}.json"

    def test_load_reports_stat_failure_as_io_error(
        self, record: BackupRecord, tmp_path: Path
    ) -> None:
        path = record.write_json(tmp_path / "record.json")
        with patch.object(Path, "stat", side_effect=FileNotFoundError("gone")):
            with pytest.raises(BackupIOError):
                BackupRecord.load_json(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(BackupIOError):
            BackupRecord.load_json(tmp_path / "absent.json")

    def test_unwritable_destination(self, record: BackupRecord, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(BackupIOError):
            record.write_json(blocker / "record.json")

    def test_unserializable_value(self, record: BackupRecord) -> None:
        record.folders.append(object())
        with pytest.raises(SerializationError):
            record.to_json()

    @pytest.mark.parametrize(
        "text",
        ["not json", "[1, 2]", '{"size_in_bytes": 1}', '{"timestamp": "yesterday", "size_in_bytes": 1}'],
    )
    def test_malformed_input(self, text: str) -> None:
        with pytest.raises(SerializationError):
            BackupRecord.from_json(text)
