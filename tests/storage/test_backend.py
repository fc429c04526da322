"""Tests for membership snapshot backends."""

from __future__ import annotations

import json
import logging

import pytest

from peergate.core.exceptions import PersistenceWriteError
from peergate.storage.backend import (
    SNAPSHOT_VERSION,
    JsonFileSnapshotBackend,
    MemorySnapshotBackend,
)
from peergate.types import GroupId


class TestMemorySnapshotBackend:
    def test_load_missing_is_empty(self, group_id):
        assert MemorySnapshotBackend().load(group_id) == {}

    def test_write_copies_mapping(self, group_id, addresses, keys):
        backend = MemorySnapshotBackend()
        mapping = {keys(1): addresses(1)}
        backend.write(group_id, mapping)
        mapping[keys(2)] = addresses(2)

        assert backend.load(group_id) == {keys(1): addresses(1)}
        assert backend.backend_type == "memory"

    def test_clear(self, group_id, addresses, keys):
        backend = MemorySnapshotBackend()
        backend.write(group_id, {keys(1): addresses(1)})
        backend.clear()

        assert backend.load(group_id) == {}


class TestJsonFileSnapshotBackend:
    """One JSON document per group under the base path."""

    def test_path_is_group_hex(self, tmp_path, group_id):
        backend = JsonFileSnapshotBackend(tmp_path / "group")

        assert backend.path_for(group_id) == tmp_path / "group" / f"{group_id.hex()}.json"

    def test_write_then_load(self, tmp_path, group_id, addresses, keys):
        backend = JsonFileSnapshotBackend(tmp_path / "group")
        mapping = {keys(1): addresses(1), keys(2): addresses(2)}

        backend.write(group_id, mapping)

        assert backend.load(group_id) == mapping

    def test_document_shape(self, tmp_path, group_id, addresses, keys):
        backend = JsonFileSnapshotBackend(tmp_path)
        backend.write(group_id, {keys(1): addresses(1)})

        document = json.loads(backend.path_for(group_id).read_text())

        assert document["version"] == SNAPSHOT_VERSION
        assert document["group_id"] == group_id.hex()
        assert document["peers"] == {keys(1).hex(): addresses(1).hex()}
        assert "updated_at" in document

    def test_write_replaces_previous(self, tmp_path, group_id, addresses, keys):
        backend = JsonFileSnapshotBackend(tmp_path)
        backend.write(group_id, {keys(1): addresses(1)})
        backend.write(group_id, {keys(2): addresses(2)})

        assert backend.load(group_id) == {keys(2): addresses(2)}
        assert not list(tmp_path.glob(".snapshot-*"))

    def test_groups_are_separate(self, tmp_path, group_id, addresses, keys):
        backend = JsonFileSnapshotBackend(tmp_path)
        other = GroupId(b"\x08" * 32)
        backend.write(group_id, {keys(1): addresses(1)})

        assert backend.load(other) == {}

    def test_load_missing_is_empty(self, tmp_path, group_id):
        assert JsonFileSnapshotBackend(tmp_path / "nope").load(group_id) == {}

    @pytest.mark.parametrize("content", ["not json", "[]", '{"peers": {"zz": "00"}}'])
    def test_corrupt_file_loads_empty(self, tmp_path, group_id, caplog, content):
        backend = JsonFileSnapshotBackend(tmp_path)
        backend.path_for(group_id).write_text(content)

        with caplog.at_level(logging.WARNING):
            assert backend.load(group_id) == {}
        assert "Failed to load membership snapshot" in caplog.text

    def test_unwritable_path_raises_persistence_error(self, tmp_path, group_id, addresses, keys):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        backend = JsonFileSnapshotBackend(blocker / "group")

        with pytest.raises(PersistenceWriteError) as exc_info:
            backend.write(group_id, {keys(1): addresses(1)})
        assert exc_info.value.group_id == group_id.hex()

    def test_default_path_from_config(self, monkeypatch, clean_env, tmp_path, group_id):
        monkeypatch.setenv("PEERGATE_STORAGE_PATH", str(tmp_path))

        backend = JsonFileSnapshotBackend()

        assert backend.path_for(group_id) == tmp_path / "group" / f"{group_id.hex()}.json"
