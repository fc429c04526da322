"""Membership store for peer groups.

:class:`MembershipStore` is the in-memory table of admitted members, keyed by
peer address with a reverse index from public key to address.

:class:`PersistentMembershipStore` adds best-effort checkpointing through a
:class:`~peergate.storage.backend.SnapshotBackend`: it loads the last
snapshot at construction and writes a new one after every admitting
mutation. Snapshot failures are logged and never touch in-memory state.

All mutation is single-writer; the owning group actor serializes calls.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Mapping

from ..core.exceptions import PersistenceWriteError
from ..types import GroupId, PeerAddress
from .backend import Snapshot, SnapshotBackend
from .models import MembershipRecord

logger = logging.getLogger(__name__)


class MembershipStore:
    """In-memory address -> :class:`MembershipRecord` table."""

    def __init__(self) -> None:
        self._records: dict[PeerAddress, MembershipRecord] = {}
        self._by_key: dict[bytes, PeerAddress] = {}

    def add(self, address: PeerAddress, record: MembershipRecord) -> None:
        """Insert or replace the record for ``address``.

        A key already bound to another address is rebound to this one.
        """
        previous = self._records.get(address)
        if previous is not None and previous.public_key != record.public_key:
            if self._by_key.get(previous.public_key) == address:
                del self._by_key[previous.public_key]
        self._records[address] = record
        self._by_key[record.public_key] = address

    def get(self, address: PeerAddress) -> MembershipRecord | None:
        return self._records.get(address)

    def get_by_key(self, public_key: bytes) -> PeerAddress | None:
        return self._by_key.get(public_key)

    def remove(self, address: PeerAddress) -> MembershipRecord | None:
        """Drop ``address`` and every reverse-index entry pointing at it.

        Returns:
            The removed record, or None if the address was not a member.
        """
        record = self._records.pop(address, None)
        stale = [pk for pk, addr in self._by_key.items() if addr == address]
        for pk in stale:
            del self._by_key[pk]
        return record

    def all_keys(self) -> set[bytes]:
        return set(self._by_key)

    def addresses(self) -> list[PeerAddress]:
        return list(self._records)

    def mapping(self) -> Snapshot:
        """Public key -> address view, the shape that gets snapshotted."""
        return dict(self._by_key)

    def __contains__(self, address: object) -> bool:
        return address in self._records

    def __iter__(self) -> Iterator[PeerAddress]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)


class PersistentMembershipStore(MembershipStore):
    """Membership store that checkpoints through a snapshot backend.

    Args:
        group_id: Group whose snapshot this store owns
        backend: Where snapshots are loaded from and written to
    """

    def __init__(self, group_id: GroupId, backend: SnapshotBackend):
        super().__init__()
        self.group_id = group_id
        self.backend = backend
        self._pending: set[asyncio.Task] = set()
        self._write_lock: asyncio.Lock | None = None
        self._stats = {"snapshots_written": 0, "snapshots_failed": 0}
        self.loaded: Snapshot = self.load()

    def load(self) -> Snapshot:
        """Load the last snapshot for this group (empty on any failure)."""
        try:
            return self.backend.load(self.group_id)
        except Exception:
            logger.warning("Snapshot load failed for group %s", self.group_id.short(), exc_info=True)
            return {}

    def restore(self) -> int:
        """Populate the table from the loaded snapshot.

        Snapshots hold no proofs, so restored records carry an empty one.

        Returns:
            Number of records restored.
        """
        for public_key, address in self.loaded.items():
            self.add(address, MembershipRecord(public_key=public_key, proof=b"", address=address))
        if self.loaded:
            logger.info("Restored %d member(s) for group %s", len(self.loaded), self.group_id.short())
        return len(self.loaded)

    def snapshot(self, mapping: Mapping[bytes, PeerAddress] | None = None) -> None:
        """Checkpoint ``mapping`` (default: this store's own key -> address view).

        Inside a running event loop the write is scheduled and this returns
        immediately; call :meth:`flush` to wait for it. Outside a loop the
        write happens inline. Either way failures are only logged.
        """
        data = dict(mapping) if mapping is not None else self.mapping()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write(data)
            return

        task = loop.create_task(self._write_async(data))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        """Wait until every scheduled snapshot has been attempted."""
        while self._pending:
            batch = list(self._pending)
            await asyncio.gather(*batch)
            self._pending.difference_update(batch)

    async def _write_async(self, data: Snapshot) -> None:
        # Lock is FIFO, so snapshots land in the order they were taken
        if self._write_lock is None:
            self._write_lock = asyncio.Lock()
        async with self._write_lock:
            await asyncio.to_thread(self._write, data)

    def _write(self, data: Snapshot) -> None:
        try:
            self.backend.write(self.group_id, data)
        except PersistenceWriteError as e:
            self._stats["snapshots_failed"] += 1
            logger.warning("Membership snapshot not persisted: %s", e)
            return
        except Exception:
            self._stats["snapshots_failed"] += 1
            logger.warning(
                "Unexpected error persisting snapshot for group %s",
                self.group_id.short(),
                exc_info=True,
            )
            return
        self._stats["snapshots_written"] += 1
        logger.debug("Persisted %d member(s) for group %s", len(data), self.group_id.short())

    def get_stats(self) -> dict[str, int]:
        return {**self._stats, "members": len(self), "pending_snapshots": len(self._pending)}
