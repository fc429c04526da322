"""Certificate-authority admission for peer groups.

A peer is admitted when it presents ``(public_key, proof)`` where ``proof``
is the group CA's signature over its public key. Every member holds its own
proof and sends it back on accept, so the remote side can validate us in
turn.

Rejections carry a one-byte reason code: ``2`` for an undecodable payload,
``3`` for a proof that does not verify against the CA key.
"""

from __future__ import annotations

import logging

from ..core.exceptions import BadCertificateError
from ..identity.scheme import IdentityScheme
from ..storage.membership import MembershipStore, PersistentMembershipStore
from ..storage.models import MembershipRecord
from ..transport.channel import OutboundChannel
from ..transport.codec import CodecError, decode_pair, encode_pair
from ..transport.messages import PeerDisconnected, PeerJoinOutcome, PeerJoinRequest
from ..types import GroupId, PeerAddress, SocketAddress
from .base import GroupPolicy
from .certificate import Certificate
from .lifecycle import PeerLifecycle, PeerState
from .types import JoinOutcome, RejectReason

logger = logging.getLogger(__name__)


class CAPermissionedGroup(GroupPolicy):
    """Group whose members all hold a proof signed by one CA key.

    Args:
        group_id: Group identifier
        scheme: Identity scheme used to verify proofs
        public_key: This peer's public key
        proof: CA signature over this peer's public key
        ca_public_key: Public key of the group CA
        store: Membership table (a persistent store is checkpointed on admit)
    """

    def __init__(
        self,
        group_id: GroupId,
        scheme: IdentityScheme,
        public_key: bytes,
        proof: bytes,
        ca_public_key: bytes,
        store: MembershipStore | None = None,
    ):
        super().__init__(group_id)
        self.scheme = scheme
        self.public_key = public_key
        self.proof = proof
        self.ca_public_key = ca_public_key
        self.store = store if store is not None else MembershipStore()
        self.lifecycle: PeerLifecycle[PeerAddress] = PeerLifecycle(describe=PeerAddress.short)

        if isinstance(self.store, PersistentMembershipStore) and not len(self.store):
            self.store.restore()
        for address in self.store:
            self.lifecycle.transition(address, PeerState.MEMBER)

    @staticmethod
    def sign_prove(scheme: IdentityScheme, secret_key: bytes, public_key: bytes) -> bytes:
        """CA side: produce the proof a peer with ``public_key`` presents to join."""
        return scheme.sign(secret_key, scheme.encode_public_key(public_key))

    def peers(self) -> list[PeerAddress]:
        return self.store.addresses()

    def get_peer_addr(self, public_key: bytes) -> PeerAddress | None:
        return self.store.get_by_key(public_key)

    def state_of(self, address: PeerAddress) -> PeerState:
        return self.lifecycle.state(address)

    def guard(self, address: PeerAddress) -> bool:
        return address in self.store

    def add(
        self,
        address: PeerAddress,
        public_key: bytes,
        proof: bytes,
        socket_address: SocketAddress | None = None,
    ) -> None:
        """Directly add a peer to the group, bypassing verification."""
        self._admit(address, public_key, proof, socket_address)

    def join_payload(self) -> bytes:
        """Our own ``(public_key, proof)`` for a peer evaluating us."""
        return encode_pair(self.public_key, self.proof)

    async def evaluate_join(
        self,
        candidate: PeerAddress,
        socket_address: SocketAddress,
        payload: bytes,
        sender: OutboundChannel,
    ) -> JoinOutcome:
        """Decide on a join request and send exactly one verdict.

        Raises:
            ChannelClosedError: If the verdict could not be sent. Any
                admission already applied stays applied.
        """
        outcome = self._decide(candidate, socket_address, payload)
        await self._send_verdict(sender, outcome.to_verdict(candidate))
        return outcome

    def _decide(self, candidate: PeerAddress, socket_address: SocketAddress, payload: bytes) -> JoinOutcome:
        if candidate in self.store:
            logger.debug("Peer %s already a member, accepting again", candidate.short())
            return JoinOutcome.accept(self.join_payload())

        try:
            public_key, proof = decode_pair(payload)
        except CodecError as e:
            logger.info("Rejecting %s: malformed join payload (%s)", candidate.short(), e.message)
            return JoinOutcome.reject(RejectReason.MALFORMED_PAYLOAD)

        self.lifecycle.transition(candidate, PeerState.PENDING)
        certificate = Certificate(subject_pk=public_key, issuer_pk=self.ca_public_key, issuer_signature=proof)
        try:
            certificate.verify_or_raise(self.scheme)
        except BadCertificateError as e:
            self.lifecycle.transition(candidate, PeerState.UNKNOWN)
            logger.info("Rejecting %s: %s", candidate.short(), e.message)
            return JoinOutcome.reject(RejectReason.BAD_CERTIFICATE)

        self._admit(candidate, public_key, proof, socket_address)
        logger.info("Admitted %s as %s", self.scheme.display(public_key), candidate.short())
        return JoinOutcome.accept(self.join_payload())

    def _admit(
        self,
        address: PeerAddress,
        public_key: bytes,
        proof: bytes,
        socket_address: SocketAddress | None,
    ) -> None:
        # Same identity on a new address: the old binding goes away
        previous = self.store.get_by_key(public_key)
        if previous is not None and previous != address:
            self.store.remove(previous)
            self.lifecycle.transition(previous, PeerState.UNKNOWN)
            logger.debug("Rebinding %s from %s", self.scheme.display(public_key), previous.short())

        self.store.add(
            address,
            MembershipRecord(
                public_key=public_key,
                proof=proof,
                address=address,
                socket_address=socket_address,
            ),
        )
        self.lifecycle.transition(address, PeerState.MEMBER)
        self._snapshot()

    def resolve_join_result(self, address: PeerAddress, accepted: bool, response: bytes = b"") -> None:
        """Roll back our provisional acceptance if the remote handshake failed."""
        if accepted:
            return
        if self.store.remove(address) is not None:
            self.lifecycle.transition(address, PeerState.UNKNOWN)
            logger.info("Rolled back %s: remote side refused the join", address.short())
            self._snapshot()

    def leave(self, address: PeerAddress) -> None:
        """Forget ``address`` and its reverse-index entries. No-op if absent."""
        if self.store.remove(address) is not None:
            self.lifecycle.transition(address, PeerState.UNKNOWN)
            logger.info("Peer %s left group %s", address.short(), self.id.short())
            self._snapshot()

    def _snapshot(self) -> None:
        if isinstance(self.store, PersistentMembershipStore):
            self.store.snapshot()

    # ------------------------------------------------------------------
    # GroupPolicy hooks
    # ------------------------------------------------------------------

    async def on_join_request(self, event: PeerJoinRequest, sender: OutboundChannel) -> JoinOutcome:
        return await self.evaluate_join(event.candidate_address, event.socket_address, event.payload, sender)

    def on_join_outcome(self, event: PeerJoinOutcome) -> None:
        self.resolve_join_result(event.address, event.accepted, event.response)

    def on_disconnect(self, event: PeerDisconnected) -> None:
        self.leave(event.address)
