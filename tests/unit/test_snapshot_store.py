"""Tests for the JSON snapshot store."""

import json
from unittest.mock import patch

import pytest

from deployer_api.storage.snapshot_store import JsonSnapshotStore


@pytest.mark.fast
class TestJsonSnapshotStore:
    def test_missing_file_loads_none(self, tmp_path):
        assert JsonSnapshotStore(tmp_path / "state.json").load() is None

    def test_save_then_load(self, tmp_path):
        store = JsonSnapshotStore(tmp_path / "nested" / "state.json")
        assert store.save({"config": {"namespace": "demo"}})
        assert store.load() == {"config": {"namespace": "demo"}}

    def test_save_overwrites_without_leftovers(self, tmp_path):
        store = JsonSnapshotStore(tmp_path / "state.json")
        store.save({"n": 1})
        store.save({"n": 2})
        assert json.loads((tmp_path / "state.json").read_text()) == {"n": 2}
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    def test_non_object_is_ignored(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2]")
        assert JsonSnapshotStore(path).load() is None

    def test_write_failure_is_reported_not_raised(self, tmp_path):
        store = JsonSnapshotStore(tmp_path / "state.json")
        with patch(
            "deployer_api.storage.snapshot_store.os.replace",
            side_effect=OSError("disk full"),
        ):
            assert store.save({"n": 1}) is False
        assert list(tmp_path.iterdir()) == []
