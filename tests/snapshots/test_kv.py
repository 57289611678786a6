"""Tests for key-value storage backends."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from mindmark.snapshots.kv import JsonFileKeyValueStore, MemoryKeyValueStore


class TestMemoryKeyValueStore:
    def test_get_fallback(self):
        assert MemoryKeyValueStore().get("missing", []) == []

    def test_values_are_copied(self):
        kv = MemoryKeyValueStore()
        value = [{"a": 1}]
        kv.set("k", value)
        value[0]["a"] = 2
        assert kv.get("k") == [{"a": 1}]


class TestJsonFileKeyValueStore:
    def test_missing_file_returns_fallback(self, tmp_path: Path):
        kv = JsonFileKeyValueStore(tmp_path / "none.json")
        assert kv.get("k", "default") == "default"

    def test_set_creates_parents_and_persists(self, tmp_path: Path):
        path = tmp_path / "a" / "b" / "store.json"
        kv = JsonFileKeyValueStore(path)
        assert kv.set("k", [1, 2]) is True
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": [1, 2]}
        assert JsonFileKeyValueStore(path).get("k") == [1, 2]

    def test_keys_are_independent(self, tmp_path: Path):
        kv = JsonFileKeyValueStore(tmp_path / "store.json")
        kv.set("a", 1)
        kv.set("b", 2)
        assert kv.get("a") == 1
        assert kv.get("b") == 2

    def test_no_temp_files_left(self, tmp_path: Path):
        kv = JsonFileKeyValueStore(tmp_path / "store.json")
        kv.set("k", "v")
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    def test_corrupt_file_reads_empty(self, tmp_path: Path):
        path = tmp_path / "store.json"
        path.write_text("not json at all", encoding="utf-8")
        assert JsonFileKeyValueStore(path).get("k", "fresh") == "fresh"

    def test_non_object_file_reads_empty(self, tmp_path: Path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert JsonFileKeyValueStore(path).get("k") is None

    def test_write_failure_returns_false(self, tmp_path: Path):
        kv = JsonFileKeyValueStore(tmp_path / "store.json")
        with patch("mindmark.snapshots.kv.os.replace", side_effect=OSError("disk full")):
            assert kv.set("k", "v") is False
        assert not (tmp_path / "store.json").exists()
        assert list(tmp_path.iterdir()) == []
