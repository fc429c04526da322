"""Snapshot backends for membership checkpoints.

A backend persists one mapping per group: member public key to peer address.
It is a checkpoint, not a write-ahead log; callers treat every failure as
non-fatal.

Supported backends:
- Memory (for testing)
- Local JSON files, one document per group
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from ..core.exceptions import PersistenceWriteError
from ..types import GroupId, PeerAddress

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

Snapshot = dict[bytes, PeerAddress]


class SnapshotBackend(ABC):
    """Abstract base class for membership snapshot backends."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Type of backend (e.g., 'memory', 'json')."""
        pass

    @abstractmethod
    def load(self, group_id: GroupId) -> Snapshot:
        """Load the last snapshot for a group.

        Returns:
            The stored mapping, or an empty mapping if none exists.
        """
        pass

    @abstractmethod
    def write(self, group_id: GroupId, mapping: Snapshot) -> None:
        """Replace the stored snapshot for a group.

        Raises:
            PersistenceWriteError: If the snapshot could not be written
        """
        pass


class MemorySnapshotBackend(SnapshotBackend):
    """In-memory snapshot backend for testing. Not persistent."""

    def __init__(self) -> None:
        self._snapshots: dict[GroupId, Snapshot] = {}
        self.writes = 0

    @property
    def backend_type(self) -> str:
        return "memory"

    def load(self, group_id: GroupId) -> Snapshot:
        return dict(self._snapshots.get(group_id, {}))

    def write(self, group_id: GroupId, mapping: Snapshot) -> None:
        self._snapshots[group_id] = dict(mapping)
        self.writes += 1

    def clear(self) -> None:
        self._snapshots.clear()


class JsonFileSnapshotBackend(SnapshotBackend):
    """Local file system backend: ``<base_path>/<group_id>.json`` per group."""

    def __init__(self, base_path: str | Path | None = None):
        """
        Args:
            base_path: Snapshot directory. Defaults to the configured
                ``<storage_path>/group``.
        """
        if base_path is not None:
            self._base_path = Path(base_path)
        else:
            from ..core.config import get_config

            self._base_path = get_config().snapshot_dir

    @property
    def backend_type(self) -> str:
        return "json"

    def path_for(self, group_id: GroupId) -> Path:
        return self._base_path / f"{group_id.hex()}.json"

    def load(self, group_id: GroupId) -> Snapshot:
        path = self.path_for(group_id)
        if not path.exists():
            return {}

        try:
            data = json.loads(path.read_text())
            peers = data.get("peers", {})
            mapping = {bytes.fromhex(pk): PeerAddress.from_hex(addr) for pk, addr in peers.items()}
        except (OSError, json.JSONDecodeError, AttributeError, ValueError, TypeError) as e:
            # Unreadable snapshot: start empty rather than refuse to boot
            logger.warning("Failed to load membership snapshot %s: %s", path, e)
            return {}

        logger.info("Loaded %d member(s) for group %s from %s", len(mapping), group_id.short(), path)
        return mapping

    def write(self, group_id: GroupId, mapping: Snapshot) -> None:
        path = self.path_for(group_id)
        document = {
            "version": SNAPSHOT_VERSION,
            "group_id": group_id.hex(),
            "updated_at": datetime.now().isoformat(),
            "peers": {pk.hex(): addr.hex() for pk, addr in sorted(mapping.items())},
        }

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".snapshot-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(document, f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceWriteError(
                f"Failed to write membership snapshot {path}: {e}",
                group_id=group_id.hex(),
            ) from e
