"""Peer-group admission control.

Policies:
- CAPermissionedGroup: members hold a proof signed by the group CA
- VoteGroup: candidates are admitted once enough members vouch for them
- PermissionlessGroup: open baseline with no membership table

GroupActor owns a policy and feeds it runtime events one at a time.
"""

from .base import GroupPolicy
from .ca import CAPermissionedGroup
from .certificate import Certificate
from .lifecycle import ALLOWED_TRANSITIONS, PeerLifecycle, PeerState
from .permissionless import PermissionlessGroup
from .quorum import VoteGroup, quorum_reached
from .runtime import GroupActor
from .types import JoinOutcome, RejectReason

__all__ = [
    # Policies
    "GroupPolicy",
    "CAPermissionedGroup",
    "VoteGroup",
    "PermissionlessGroup",
    # Runtime
    "GroupActor",
    # Types
    "Certificate",
    "JoinOutcome",
    "RejectReason",
    "PeerState",
    "PeerLifecycle",
    "ALLOWED_TRANSITIONS",
    # Functions
    "quorum_reached",
]
