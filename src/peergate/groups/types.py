"""Type definitions for admission outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..transport.messages import JoinVerdict
from ..types import PeerAddress


class RejectReason(str, Enum):
    """Why a join request was refused."""

    MALFORMED_PAYLOAD = "malformed_payload"  # Join bytes did not decode
    BAD_CERTIFICATE = "bad_certificate"  # CA signature did not verify
    BAD_VOTE = "bad_vote"  # Vote invalid or issuer not a member

    @property
    def code(self) -> int:
        """One-byte reason code carried in the reject verdict."""
        return _REJECT_CODES[self]


_REJECT_CODES = {
    RejectReason.MALFORMED_PAYLOAD: 2,
    RejectReason.BAD_CERTIFICATE: 3,
    RejectReason.BAD_VOTE: 3,
}


@dataclass(frozen=True)
class JoinOutcome:
    """Result of evaluating one join request.

    ``admitted`` distinguishes a full member from a quorum candidate whose
    vote was accepted but who is still waiting for more votes.
    """

    accepted: bool
    reason: RejectReason | None = None
    response: bytes = b""
    admitted: bool = False
    need_retry: bool = False

    @classmethod
    def accept(cls, response: bytes, admitted: bool = True) -> JoinOutcome:
        return cls(accepted=True, response=response, admitted=admitted)

    @classmethod
    def reject(cls, reason: RejectReason) -> JoinOutcome:
        return cls(
            accepted=False,
            reason=reason,
            response=bytes([reason.code]),
            need_retry=True,
        )

    def to_verdict(self, address: PeerAddress) -> JoinVerdict:
        return JoinVerdict(
            address=address,
            accepted=self.accepted,
            need_retry=self.need_retry,
            response=self.response,
        )
