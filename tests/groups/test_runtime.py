"""Tests for the GroupActor event loop."""

from __future__ import annotations

import asyncio
import logging

import pytest

from peergate.core.logging import get_correlation_id
from peergate.groups.base import GroupPolicy
from peergate.groups.ca import CAPermissionedGroup
from peergate.groups.quorum import VoteGroup
from peergate.groups.runtime import GroupActor
from peergate.groups.types import JoinOutcome
from peergate.transport.codec import encode_pair
from peergate.transport.messages import (
    PeerDisconnected,
    PeerHeartbeat,
    PeerJoinOutcome,
    PeerJoinRequest,
)


class RecordingPolicy(GroupPolicy):
    """Policy that records the correlation ID of each hook call."""

    def __init__(self, group_id):
        super().__init__(group_id)
        self.seen: list[tuple[str, str | None]] = []

    async def on_join_request(self, event, sender):
        self.seen.append(("join", get_correlation_id()))
        outcome = JoinOutcome.accept(b"")
        await self._send_verdict(sender, outcome.to_verdict(event.candidate_address))
        return outcome

    def on_disconnect(self, event):
        self.seen.append(("disconnect", get_correlation_id()))


@pytest.fixture
def ca_policy(mock_scheme, group_id, keys):
    ca = keys(99)
    return CAPermissionedGroup(
        group_id, mock_scheme, keys(0), CAPermissionedGroup.sign_prove(mock_scheme, ca, keys(0)), ca
    )


def _join(mock_scheme, keys, addresses, socket_address, n, ca_secret):
    proof = CAPermissionedGroup.sign_prove(mock_scheme, ca_secret, keys(n))
    return PeerJoinRequest(addresses(n), socket_address, encode_pair(keys(n), proof))


class TestHandle:
    """Dispatching single events."""

    async def test_join_dispatch_and_stats(self, ca_policy, sender, mock_scheme, keys, addresses, socket_address):
        actor = GroupActor(ca_policy, sender)

        outcome = await actor.handle(_join(mock_scheme, keys, addresses, socket_address, 1, keys(99)))
        rejected = await actor.handle(PeerJoinRequest(addresses(2), socket_address, b"junk"))

        assert outcome.accepted
        assert not rejected.accepted
        assert len(sender) == 2
        stats = actor.get_stats()
        assert stats["events_handled"] == 2
        assert stats["joins_accepted"] == 1
        assert stats["joins_rejected"] == 1

    async def test_disconnect_and_join_outcome(self, ca_policy, sender, mock_scheme, keys, addresses, socket_address):
        actor = GroupActor(ca_policy, sender)
        await actor.handle(_join(mock_scheme, keys, addresses, socket_address, 1, keys(99)))
        await actor.handle(_join(mock_scheme, keys, addresses, socket_address, 2, keys(99)))

        assert await actor.handle(PeerDisconnected(addresses(1))) is None
        await actor.handle(PeerJoinOutcome(addresses(2), accepted=False))

        assert ca_policy.peers() == []

    async def test_heartbeat_reaches_policy(self, mock_scheme, group_id, keys, addresses, sender):
        policy = VoteGroup(group_id, mock_scheme, keys(0), addresses(0), 0.5)
        actor = GroupActor(policy, sender)

        await actor.handle(PeerHeartbeat(keys(0)))

        assert policy.living_peers() == [keys(0)]

    async def test_closed_channel_contained(
        self, ca_policy, closed_sender, mock_scheme, keys, addresses, socket_address, caplog
    ):
        actor = GroupActor(ca_policy, closed_sender)

        with caplog.at_level(logging.ERROR):
            result = await actor.handle(_join(mock_scheme, keys, addresses, socket_address, 1, keys(99)))

        assert result is None
        assert actor.get_stats()["send_failures"] == 1
        assert ca_policy.guard(addresses(1))
        assert "outbound channel closed" in caplog.text

    async def test_unknown_event(self, ca_policy, sender, caplog):
        actor = GroupActor(ca_policy, sender)

        with caplog.at_level(logging.WARNING):
            assert await actor.handle("not an event") is None

        assert actor.get_stats()["unknown_events"] == 1
        assert "Ignoring unknown event type str" in caplog.text

    async def test_each_event_gets_own_correlation_id(self, group_id, sender, addresses, socket_address):
        policy = RecordingPolicy(group_id)
        actor = GroupActor(policy, sender)

        await actor.handle(PeerJoinRequest(addresses(1), socket_address, b""))
        await actor.handle(PeerDisconnected(addresses(1)))

        (_, first), (_, second) = policy.seen
        assert first and second and first != second
        assert get_correlation_id() is None


class TestRun:
    """The queue-driven loop."""

    async def test_processes_in_order_until_stopped(self, group_id, sender, addresses, socket_address):
        policy = RecordingPolicy(group_id)
        actor = GroupActor(policy, sender)
        task = asyncio.create_task(actor.run())

        await actor.submit(PeerJoinRequest(addresses(1), socket_address, b""))
        actor.submit_nowait(PeerDisconnected(addresses(1)))
        await actor.stop()
        await asyncio.wait_for(task, timeout=2)

        assert [kind for kind, _ in policy.seen] == ["join", "disconnect"]
        assert [v.address for v in sender.drain()] == [addresses(1)]
        assert not actor.running
        assert actor.get_stats()["queued_events"] == 0

    async def test_submit_nowait_full_queue(self, group_id, sender, addresses):
        actor = GroupActor(RecordingPolicy(group_id), sender, max_queue_size=1)
        actor.submit_nowait(PeerDisconnected(addresses(1)))

        with pytest.raises(asyncio.QueueFull):
            actor.submit_nowait(PeerDisconnected(addresses(2)))
