"""Data models for group membership storage."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..types import PeerAddress, SocketAddress


@dataclass
class MembershipRecord:
    """An admitted member.

    ``proof`` is whatever evidence admitted the member: the CA signature for
    certificate groups, the winning vote signature for quorum groups.
    """

    public_key: bytes
    proof: bytes
    address: PeerAddress
    socket_address: SocketAddress | None = None
    admitted_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "public_key": self.public_key.hex(),
            "proof": self.proof.hex(),
            "address": self.address.hex(),
            "socket_address": str(self.socket_address) if self.socket_address else None,
            "admitted_at": self.admitted_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MembershipRecord:
        """Create from dictionary."""
        return cls(
            public_key=bytes.fromhex(data["public_key"]),
            proof=bytes.fromhex(data.get("proof", "")),
            address=PeerAddress.from_hex(data["address"]),
            socket_address=SocketAddress.parse(data["socket_address"]) if data.get("socket_address") else None,
            admitted_at=datetime.fromisoformat(data["admitted_at"]) if data.get("admitted_at") else datetime.now(),
        )
