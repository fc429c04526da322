"""Permissionless group: a baseline that lets anyone in.

No peer becomes a stable member, but nobody is refused either: every join
request gets ``accepted=False, need_retry=False``, which tells the runtime
the peer may stay in its routing table without a group connection.
"""

from __future__ import annotations

from ..transport.channel import OutboundChannel
from ..transport.messages import PeerJoinRequest
from ..types import GroupId, PeerAddress
from .base import GroupPolicy
from .types import JoinOutcome


class PermissionlessGroup(GroupPolicy):
    """Open group with no membership table."""

    def __init__(self, group_id: GroupId | None = None):
        super().__init__(group_id or GroupId.default())

    def guard(self, address: PeerAddress) -> bool:
        return True

    async def on_join_request(self, event: PeerJoinRequest, sender: OutboundChannel) -> JoinOutcome:
        outcome = JoinOutcome(accepted=False, need_retry=False)
        await self._send_verdict(sender, outcome.to_verdict(event.candidate_address))
        return outcome
