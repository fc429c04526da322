"""Messages exchanged with the surrounding network runtime.

Inbound events are delivered by the runtime one at a time; the only outbound
message the admission engine produces is :class:`JoinVerdict`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from ..types import PeerAddress, SocketAddress


# =============================================================================
# INBOUND
# =============================================================================


@dataclass(frozen=True)
class PeerJoinRequest:
    """A remote peer asks to join the group, presenting ``payload``."""

    candidate_address: PeerAddress
    socket_address: SocketAddress
    payload: bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "peer_join_request",
            "candidate_address": self.candidate_address.hex(),
            "socket_address": str(self.socket_address),
            "payload": self.payload.hex(),
        }


@dataclass(frozen=True)
class PeerJoinOutcome:
    """The remote side's verdict on *our* join request to it."""

    address: PeerAddress
    accepted: bool
    response: bytes = b""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "peer_join_outcome",
            "address": self.address.hex(),
            "accepted": self.accepted,
            "response": self.response.hex(),
        }


@dataclass(frozen=True)
class PeerDisconnected:
    """A peer's connection went away."""

    address: PeerAddress

    def to_dict(self) -> dict[str, Any]:
        return {"type": "peer_disconnected", "address": self.address.hex()}


@dataclass(frozen=True)
class PeerHeartbeat:
    """Liveness signal from the member owning ``public_key``."""

    public_key: bytes

    def to_dict(self) -> dict[str, Any]:
        return {"type": "peer_heartbeat", "public_key": self.public_key.hex()}


InboundEvent = Union[PeerJoinRequest, PeerJoinOutcome, PeerDisconnected, PeerHeartbeat]


# =============================================================================
# OUTBOUND
# =============================================================================


@dataclass(frozen=True)
class JoinVerdict:
    """Accept/reject answer to a :class:`PeerJoinRequest`.

    On accept, ``response`` carries the local join payload so the remote side
    can validate us symmetrically. On reject it carries a one-byte reason code.
    """

    address: PeerAddress
    accepted: bool
    need_retry: bool
    response: bytes = b""

    @property
    def reason_code(self) -> int | None:
        """Reject reason code, or None for accepted verdicts."""
        if self.accepted or len(self.response) != 1:
            return None
        return self.response[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "join_verdict",
            "address": self.address.hex(),
            "accepted": self.accepted,
            "need_retry": self.need_retry,
            "response": self.response.hex(),
        }
