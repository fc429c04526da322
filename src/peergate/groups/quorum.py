"""Vote-based admission for peer groups.

A candidate becomes a member once enough existing members have vouched for
it. Each vote is a :class:`~peergate.groups.certificate.Certificate` whose
issuer is a current member. Votes accumulate per candidate until::

    distinct_votes / current_member_count >= acceptance_rate

The member count is read at every vote, so the bar moves with the group.
The comparison is done on exact fractions, so it is equivalent to
``distinct_votes >= ceil(acceptance_rate * current_member_count)``.

Membership here is keyed by public key. Leaving only affects liveness; a
member is removed from the group only through :meth:`VoteGroup.remove`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from fractions import Fraction

from ..core.exceptions import BadCertificateError, BadVoteError, ConfigException
from ..identity.scheme import IdentityScheme
from ..storage.membership import PersistentMembershipStore
from ..transport.channel import OutboundChannel
from ..transport.codec import CodecError, decode_pair, encode_pair
from ..transport.messages import PeerDisconnected, PeerHeartbeat, PeerJoinOutcome, PeerJoinRequest
from ..types import GroupId, PeerAddress, SocketAddress
from .base import GroupPolicy
from .certificate import Certificate
from .lifecycle import PeerLifecycle, PeerState
from .types import JoinOutcome, RejectReason

logger = logging.getLogger(__name__)

# Rates are configured as decimals; keep them exact for the quorum test
_RATE_PRECISION = 10**6


def _exact_rate(rate: float | Fraction) -> Fraction:
    if not 0 < rate <= 1:
        raise ConfigException("Acceptance rate must be in (0, 1]", setting="acceptance_rate", value=rate)
    return Fraction(rate).limit_denominator(_RATE_PRECISION)


def quorum_reached(votes: int, members: int, rate: Fraction) -> bool:
    """Whether ``votes`` out of ``members`` meets ``rate``."""
    if members <= 0:
        return False
    return Fraction(votes, members) >= rate


class VoteGroup(GroupPolicy):
    """Group admitting candidates by member co-signatures.

    Args:
        group_id: Group identifier
        scheme: Identity scheme used to check vote signatures
        public_key: This peer's public key (always a member)
        address: This peer's address
        rate: Acceptance rate in (0, 1]. Defaults to the configured
            ``acceptance_rate``.
        store: Optional persistent store used for snapshots
        certificate: Our own certificate, sent back on accepted joins
    """

    def __init__(
        self,
        group_id: GroupId,
        scheme: IdentityScheme,
        public_key: bytes,
        address: PeerAddress,
        rate: float | None = None,
        store: PersistentMembershipStore | None = None,
        certificate: Certificate | None = None,
    ):
        super().__init__(group_id)
        self.scheme = scheme
        self.public_key = public_key
        self.address = address
        if rate is None:
            from ..core.config import get_config

            rate = get_config().acceptance_rate
        self.rate = _exact_rate(rate)
        self.store = store
        self.certificate = certificate

        self._peers: dict[bytes, PeerAddress] = {}
        self._living: dict[bytes, None] = {}  # ordered set
        self._waiting: dict[bytes, dict[bytes, bytes]] = {}  # candidate -> voter -> signature
        self.lifecycle: PeerLifecycle[bytes] = PeerLifecycle(describe=scheme.display)

        self._set_member(public_key, address)

    @classmethod
    def load(
        cls,
        group_id: GroupId,
        scheme: IdentityScheme,
        public_key: bytes,
        address: PeerAddress,
        rate: float | None,
        store: PersistentMembershipStore,
        certificate: Certificate | None = None,
    ) -> VoteGroup:
        """Build a group from its last snapshot; this peer is always included."""
        group = cls(group_id, scheme, public_key, address, rate, store=store, certificate=certificate)
        for pk, addr in store.loaded.items():
            if pk not in group._peers:
                group._set_member(pk, addr)
        logger.info("Loaded group %s with %d member(s)", group_id.short(), len(group._peers))
        return group

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def has_peer(self, public_key: bytes) -> bool:
        return public_key in self._peers

    def verify(self, public_key: bytes) -> bool:
        """Whether ``public_key`` belongs to a member."""
        return self.has_peer(public_key)

    def get_peer_addr(self, public_key: bytes) -> PeerAddress | None:
        return self._peers.get(public_key)

    def get_by_peer_addr(self, address: PeerAddress) -> bytes | None:
        for pk, addr in self._peers.items():
            if addr == address:
                return pk
        return None

    def all_peer_keys(self) -> list[bytes]:
        return list(self._peers)

    def living_peers(self) -> list[bytes]:
        return list(self._living)

    def member_count(self) -> int:
        return len(self._peers)

    def pending_votes(self, candidate: bytes) -> list[tuple[bytes, bytes]]:
        """``(voter, signature)`` pairs collected for a candidate, oldest first."""
        return list(self._waiting.get(candidate, {}).items())

    def pending_candidates(self) -> list[bytes]:
        return list(self._waiting)

    def state_of(self, public_key: bytes) -> PeerState:
        return self.lifecycle.state(public_key)

    def required_votes(self) -> int:
        """Votes a new candidate needs at the current group size."""
        members = len(self._peers)
        return -((-self.rate.numerator * members) // self.rate.denominator)

    def guard(self, address: PeerAddress) -> bool:
        return self.get_by_peer_addr(address) is not None

    # ------------------------------------------------------------------
    # Membership changes
    # ------------------------------------------------------------------

    def check_vote(self, certificate: Certificate) -> None:
        """Validate a vote without recording it.

        Raises:
            BadVoteError: If the signature is invalid or the issuer is not a member.
        """
        voter = self.scheme.display(certificate.issuer_pk)
        try:
            certificate.verify_or_raise(self.scheme)
        except BadCertificateError as e:
            raise BadVoteError(f"invalid signature ({e.message})", voter=voter) from e
        if not self.has_peer(certificate.issuer_pk):
            raise BadVoteError(f"issuer {voter} is not a member", voter=voter)

    def join(self, certificate: Certificate, new_address: PeerAddress) -> bool:
        """Record a vote for ``certificate.subject_pk``.

        Returns:
            True if the candidate is already a member or the vote was
            accepted (whether or not quorum is now reached); False if the
            signature is invalid or the issuer is not a member.
        """
        candidate = certificate.subject_pk
        if self.has_peer(candidate):
            return True

        try:
            self.check_vote(certificate)
        except BadVoteError as e:
            logger.info("Ignoring vote for %s: %s", self.scheme.display(candidate), e.message)
            return False

        voter = certificate.issuer_pk
        votes = self._waiting.setdefault(candidate, {})
        if voter in votes:
            logger.debug("Duplicate vote from %s ignored", self.scheme.display(voter))
        else:
            votes[voter] = certificate.issuer_signature
        self.lifecycle.transition(candidate, PeerState.PENDING)

        members = len(self._peers)
        counted = sum(1 for v in votes if v in self._peers)
        if quorum_reached(counted, members, self.rate):
            del self._waiting[candidate]
            self._set_member(candidate, new_address)
            logger.info(
                "Admitted %s with %d/%d vote(s)",
                self.scheme.display(candidate),
                counted,
                members,
            )
            self._snapshot()
        else:
            logger.debug(
                "Candidate %s has %d/%d required vote(s)",
                self.scheme.display(candidate),
                counted,
                self.required_votes(),
            )
        return True

    def leave(self, address: PeerAddress) -> bool:
        """Mark every member at ``address`` as unreachable. Membership is kept."""
        for pk, addr in self._peers.items():
            if addr == address:
                self._living.pop(pk, None)
        return True

    def remove(self, public_key: bytes) -> bool:
        """Revoke a member (or drop a pending candidate).

        Returns:
            True if anything was removed.
        """
        was_member = self._peers.pop(public_key, None) is not None
        was_pending = self._waiting.pop(public_key, None) is not None
        self._living.pop(public_key, None)
        if not (was_member or was_pending):
            return False

        self.lifecycle.transition(public_key, PeerState.UNKNOWN)
        logger.info("Removed %s from group %s", self.scheme.display(public_key), self.id.short())
        if was_member:
            self._snapshot()
        return True

    def heart_beat(self, public_key: bytes) -> None:
        if self.has_peer(public_key) and public_key not in self._living:
            self._living[public_key] = None

    def help_sync_peers(self, requesting_pk: bytes) -> list[PeerAddress]:
        """Addresses of every live member, for a peer that is syncing."""
        return [self._peers[pk] for pk in self._living if pk in self._peers]

    def add_sync_peers(self, public_key: bytes, address: PeerAddress) -> None:
        """Insert a member directly unless it is already present."""
        if public_key not in self._peers:
            self._waiting.pop(public_key, None)
            self._set_member(public_key, address)

    def bootstrap(self, peers: Iterable[tuple[bytes, PeerAddress]]) -> None:
        """Seed the membership with a trusted peer list (group genesis only)."""
        before = len(self._peers)
        for public_key, address in peers:
            self.add_sync_peers(public_key, address)
        if len(self._peers) != before:
            logger.info("Bootstrapped %d member(s)", len(self._peers) - before)
            self._snapshot()

    def _set_member(self, public_key: bytes, address: PeerAddress) -> None:
        self._peers[public_key] = address
        self.lifecycle.transition(public_key, PeerState.MEMBER)

    def _snapshot(self) -> None:
        if self.store is not None:
            self.store.snapshot(self._peers)

    # ------------------------------------------------------------------
    # Wire handling
    # ------------------------------------------------------------------

    def join_payload(self, certificate: Certificate | None = None) -> bytes:
        """``(public_key, certificate_bytes)`` payload for a join request.

        Raises:
            ValueError: If no certificate is given and none is configured.
        """
        certificate = certificate or self.certificate
        if certificate is None:
            raise ValueError("No certificate available for join payload")
        return encode_pair(certificate.subject_pk, certificate.to_bytes())

    async def evaluate_join(
        self,
        candidate: PeerAddress,
        socket_address: SocketAddress,
        payload: bytes,
        sender: OutboundChannel,
    ) -> JoinOutcome:
        """Decode a join payload, record the vote, and send one verdict."""
        outcome = self._decide(candidate, payload)
        await self._send_verdict(sender, outcome.to_verdict(candidate))
        return outcome

    def _decide(self, candidate: PeerAddress, payload: bytes) -> JoinOutcome:
        try:
            public_key, certificate_bytes = decode_pair(payload)
            certificate = Certificate.from_bytes(certificate_bytes)
        except CodecError as e:
            logger.info("Rejecting %s: malformed join payload (%s)", candidate.short(), e.message)
            return JoinOutcome.reject(RejectReason.MALFORMED_PAYLOAD)

        if certificate.subject_pk != public_key:
            logger.info("Rejecting %s: certificate subject does not match key", candidate.short())
            return JoinOutcome.reject(RejectReason.MALFORMED_PAYLOAD)

        if not self.join(certificate, candidate):
            return JoinOutcome.reject(RejectReason.BAD_VOTE)

        admitted = self.has_peer(public_key)
        response = self.join_payload() if admitted and self.certificate is not None else b""
        return JoinOutcome.accept(response, admitted=admitted)

    # ------------------------------------------------------------------
    # GroupPolicy hooks
    # ------------------------------------------------------------------

    async def on_join_request(self, event: PeerJoinRequest, sender: OutboundChannel) -> JoinOutcome:
        return await self.evaluate_join(event.candidate_address, event.socket_address, event.payload, sender)

    def on_join_outcome(self, event: PeerJoinOutcome) -> None:
        logger.debug("Join outcome from %s: accepted=%s", event.address.short(), event.accepted)

    def on_disconnect(self, event: PeerDisconnected) -> None:
        self.leave(event.address)

    def on_heartbeat(self, event: PeerHeartbeat) -> None:
        self.heart_beat(event.public_key)
