"""Boundary with the network runtime: wire codec, events and outbound channel."""

from .channel import OutboundChannel
from .codec import (
    FORMAT_VERSION,
    MAX_FIELD_SIZE,
    CodecError,
    decode_fields,
    decode_pair,
    encode_fields,
    encode_pair,
    serialize_public_key,
)
from .messages import (
    InboundEvent,
    JoinVerdict,
    PeerDisconnected,
    PeerHeartbeat,
    PeerJoinOutcome,
    PeerJoinRequest,
)

__all__ = [
    "FORMAT_VERSION",
    "MAX_FIELD_SIZE",
    "CodecError",
    "encode_fields",
    "decode_fields",
    "encode_pair",
    "decode_pair",
    "serialize_public_key",
    "InboundEvent",
    "PeerJoinRequest",
    "PeerJoinOutcome",
    "PeerDisconnected",
    "PeerHeartbeat",
    "JoinVerdict",
    "OutboundChannel",
]
