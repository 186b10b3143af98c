"""Tests for the JSON snapshot store."""

from __future__ import annotations

import json
import logging
import pathlib
from datetime import datetime, timezone

import pytest

from iptracker_server.devices.store import JsonSnapshotStore
from tests.conftest import make_record


@pytest.fixture
def data_file(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "devices.json"


class TestLoad:

    def test_missing_file_is_empty(self, data_file: pathlib.Path) -> None:
        assert JsonSnapshotStore(data_file).load() == {}

    def test_missing_directory_is_created(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "nested" / "dir" / "devices.json"
        assert JsonSnapshotStore(path).load() == {}
        assert path.parent.is_dir()

    def test_malformed_json_is_empty(self, data_file: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:
        data_file.write_text("{not json")
        with caplog.at_level(logging.WARNING):
            assert JsonSnapshotStore(data_file).load() == {}
        assert "Error reading data file" in caplog.text

    def test_non_object_top_level_is_empty(self, data_file: pathlib.Path) -> None:
        data_file.write_text("[1, 2, 3]")
        assert JsonSnapshotStore(data_file).load() == {}

    def test_invalid_record_discards_whole_file(self, data_file: pathlib.Path) -> None:
        good = make_record("good").to_json_dict()
        data_file.write_text(json.dumps({
            "good": good,
            "bad": {"ipv4Local": "10.0.0.1", "lastUpdate": "yesterday-ish"},
        }))
        assert JsonSnapshotStore(data_file).load() == {}

    def test_non_object_record_discards_whole_file(self, data_file: pathlib.Path) -> None:
        data_file.write_text(json.dumps({"a": "not a record"}))
        assert JsonSnapshotStore(data_file).load() == {}

    def test_loads_snapshot_without_hostname_in_values(self, data_file: pathlib.Path) -> None:
        data_file.write_text(json.dumps({
            "mbp-alice": {
                "computerName": "Alice's MacBook",
                "ipv4Local": "192.168.1.20",
                "ipv4Public": "",
                "ipv6Local": "",
                "ipv6Public": "",
                "sshPort": "22",
                "sshStatus": "active",
                "currentUser": "alice",
                "lastUpdate": "2026-10-18T09:30:00Z",
                "userAgent": "curl/8.4.0",
                "remoteAddress": "198.51.100.4:51234",
            }
        }))
        devices = JsonSnapshotStore(data_file).load()
        record = devices["mbp-alice"]
        assert record.hostname == "mbp-alice"
        assert record.current_user == "alice"
        assert record.last_update == datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)

    def test_map_key_wins_over_embedded_hostname(self, data_file: pathlib.Path) -> None:
        value = make_record("embedded").to_json_dict()
        data_file.write_text(json.dumps({"key-name": value}))
        assert JsonSnapshotStore(data_file).load()["key-name"].hostname == "key-name"


class TestSave:

    def test_save_writes_indented_json_with_wire_names(self, data_file: pathlib.Path) -> None:
        store = JsonSnapshotStore(data_file)
        assert store.save({"mbp-alice": make_record("mbp-alice")}) is True
        text = data_file.read_text()
        assert text.startswith('{\n  "mbp-alice": {\n')
        data = json.loads(text)
        entry = data["mbp-alice"]
        assert entry["computerName"] == "mbp-alice (laptop)"
        assert entry["ipv4Public"] == "203.0.113.7"
        assert entry["sshPort"] == "22"
        assert entry["lastUpdate"].startswith("2026-10-18T09:30:00")
        assert "computer_name" not in entry

    def test_save_replaces_previous_contents(self, data_file: pathlib.Path) -> None:
        store = JsonSnapshotStore(data_file)
        store.save({"a": make_record("a"), "b": make_record("b")})
        store.save({"c": make_record("c")})
        assert set(json.loads(data_file.read_text())) == {"c"}

    def test_save_leaves_no_temp_files(self, data_file: pathlib.Path) -> None:
        store = JsonSnapshotStore(data_file)
        store.save({"a": make_record("a")})
        assert [p.name for p in data_file.parent.iterdir()] == ["devices.json"]

    def test_save_failure_returns_false_and_logs(
        self, tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonSnapshotStore(blocker / "devices.json")
        with caplog.at_level(logging.ERROR):
            assert store.save({"a": make_record("a")}) is False
        assert "Error writing data file" in caplog.text

    def test_save_creates_parent_directory(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "state" / "devices.json"
        assert JsonSnapshotStore(path).save({}) is True
        assert json.loads(path.read_text()) == {}


class TestRoundTrip:

    @pytest.mark.parametrize("count", [0, 1, 10])
    def test_save_then_load_is_identical(self, data_file: pathlib.Path, count: int) -> None:
        snapshot = {
            f"host-{i}": make_record(f"host-{i}", ssh_status="inactive" if i % 2 else "active")
            for i in range(count)
        }
        store = JsonSnapshotStore(data_file)
        store.save(snapshot)
        assert JsonSnapshotStore(data_file).load() == snapshot
