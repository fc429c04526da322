"""Membership storage: in-memory tables and best-effort snapshot checkpoints."""

from .backend import (
    JsonFileSnapshotBackend,
    MemorySnapshotBackend,
    Snapshot,
    SnapshotBackend,
)
from .membership import MembershipStore, PersistentMembershipStore
from .models import MembershipRecord

__all__ = [
    "Snapshot",
    "SnapshotBackend",
    "MemorySnapshotBackend",
    "JsonFileSnapshotBackend",
    "MembershipRecord",
    "MembershipStore",
    "PersistentMembershipStore",
]
