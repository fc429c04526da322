"""Common interface every admission policy implements."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ..transport.channel import OutboundChannel
from ..transport.messages import (
    JoinVerdict,
    PeerDisconnected,
    PeerHeartbeat,
    PeerJoinOutcome,
    PeerJoinRequest,
)
from ..types import GroupId, PeerAddress
from .types import JoinOutcome

logger = logging.getLogger(__name__)


class GroupPolicy(ABC):
    """Admission policy for one peer group.

    The runtime (normally a :class:`~peergate.groups.runtime.GroupActor`)
    calls the ``on_*`` hooks one event at a time. Only join requests produce
    an outbound message, and always exactly one.
    """

    def __init__(self, group_id: GroupId):
        self._id = group_id

    @property
    def id(self) -> GroupId:
        return self._id

    def guard(self, address: PeerAddress) -> bool:
        """Whether traffic from ``address`` should be routed to this group."""
        return True

    @abstractmethod
    async def on_join_request(self, event: PeerJoinRequest, sender: OutboundChannel) -> JoinOutcome:
        """Evaluate a join request and send exactly one verdict."""
        pass

    def on_join_outcome(self, event: PeerJoinOutcome) -> None:
        """The remote side resolved our own join request."""
        pass

    def on_disconnect(self, event: PeerDisconnected) -> None:
        """A peer connection went away."""
        pass

    def on_heartbeat(self, event: PeerHeartbeat) -> None:
        """A member signalled it is alive."""
        pass

    async def _send_verdict(self, sender: OutboundChannel, verdict: JoinVerdict) -> None:
        """Send a verdict; ChannelClosedError propagates to the caller."""
        logger.debug(
            "Group %s -> %s: accepted=%s need_retry=%s",
            self._id.short(),
            verdict.address.short(),
            verdict.accepted,
            verdict.need_retry,
        )
        await sender.send(verdict)
