"""Tests for runtime boundary messages and identifier types."""

from __future__ import annotations

import pytest

from peergate.transport.messages import (
    JoinVerdict,
    PeerDisconnected,
    PeerHeartbeat,
    PeerJoinOutcome,
    PeerJoinRequest,
)
from peergate.types import GroupId, PeerAddress, SocketAddress


class TestJoinVerdict:
    def test_reason_code_on_reject(self, addresses):
        verdict = JoinVerdict(addresses(1), accepted=False, need_retry=True, response=b"\x03")

        assert verdict.reason_code == 3

    def test_no_reason_code_on_accept(self, addresses):
        verdict = JoinVerdict(addresses(1), accepted=True, need_retry=False, response=b"\x03")

        assert verdict.reason_code is None

    def test_no_reason_code_without_byte(self, addresses):
        assert JoinVerdict(addresses(1), accepted=False, need_retry=False).reason_code is None

    def test_to_dict(self, addresses):
        data = JoinVerdict(addresses(1), accepted=False, need_retry=True, response=b"\x02").to_dict()

        assert data == {
            "type": "join_verdict",
            "address": addresses(1).hex(),
            "accepted": False,
            "need_retry": True,
            "response": "02",
        }


class TestInboundEvents:
    def test_to_dict_types(self, addresses, socket_address):
        assert PeerJoinRequest(addresses(1), socket_address, b"\x01").to_dict()["socket_address"] == "127.0.0.1:7364"
        assert PeerJoinOutcome(addresses(1), True).to_dict()["type"] == "peer_join_outcome"
        assert PeerDisconnected(addresses(1)).to_dict()["type"] == "peer_disconnected"
        assert PeerHeartbeat(b"\xff").to_dict()["public_key"] == "ff"


class TestIdentifiers:
    def test_wrong_size_rejected(self):
        with pytest.raises(ValueError):
            PeerAddress(b"\x00" * 31)

    def test_non_bytes_rejected(self):
        with pytest.raises(TypeError):
            GroupId("00" * 32)

    def test_hex_round_trip(self):
        gid = GroupId.random()

        assert GroupId.from_hex(gid.hex()) == gid
        assert str(gid) == gid.hex()
        assert gid.short() == gid.hex()[:8]

    def test_invalid_hex(self):
        with pytest.raises(ValueError, match="Invalid PeerAddress hex"):
            PeerAddress.from_hex("zz")

    def test_default_is_zero(self):
        assert GroupId.default().value == bytes(32)

    def test_hashable_and_ordered(self, addresses):
        assert {addresses(1), addresses(1)} == {addresses(1)}
        assert addresses(1) < addresses(2)

    def test_socket_address_parse(self):
        assert SocketAddress.parse("10.0.0.1:80") == SocketAddress("10.0.0.1", 80)
        assert SocketAddress.parse("[::1]:7364") == SocketAddress("::1", 7364)
        assert str(SocketAddress("::1", 7364)) == "[::1]:7364"

    def test_socket_address_parse_invalid(self):
        with pytest.raises(ValueError):
            SocketAddress.parse("no-port")
