"""Identifier primitives shared across PeerGate.

``GroupId`` and ``PeerAddress`` are opaque fixed-size (32-byte) values that
render as hex. ``SocketAddress`` is the transport-level host/port a peer
was reached at.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import ClassVar, NamedTuple, TypeVar

ID_SIZE = 32

_T = TypeVar("_T", bound="_FixedId")


@dataclass(frozen=True, order=True)
class _FixedId:
    """Immutable fixed-size byte identifier."""

    value: bytes

    kind: ClassVar[str] = "identifier"

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray)):
            raise TypeError(f"{self.kind} must be bytes, got {type(self.value).__name__}")
        if len(self.value) != ID_SIZE:
            raise ValueError(f"{self.kind} must be {ID_SIZE} bytes, got {len(self.value)}")
        object.__setattr__(self, "value", bytes(self.value))

    @classmethod
    def from_hex(cls: type[_T], text: str) -> _T:
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise ValueError(f"Invalid {cls.kind} hex: {text!r}") from e
        return cls(raw)

    @classmethod
    def random(cls: type[_T]) -> _T:
        return cls(secrets.token_bytes(ID_SIZE))

    @classmethod
    def default(cls: type[_T]) -> _T:
        return cls(bytes(ID_SIZE))

    def hex(self) -> str:
        return self.value.hex()

    def short(self) -> str:
        return self.value.hex()[:8]

    def __bytes__(self) -> bytes:
        return self.value

    def __str__(self) -> str:
        return self.value.hex()


class GroupId(_FixedId):
    """Identifier of a peer group."""

    kind = "GroupId"


class PeerAddress(_FixedId):
    """Network-level routing handle of a peer (distinct from its public key)."""

    kind = "PeerAddress"


class SocketAddress(NamedTuple):
    """Host and port a peer connection came from."""

    host: str
    port: int

    @classmethod
    def parse(cls, text: str) -> SocketAddress:
        """Parse ``host:port`` (IPv6 hosts in brackets)."""
        host, sep, port = text.rpartition(":")
        if not sep or not host:
            raise ValueError(f"Invalid socket address: {text!r}")
        return cls(host.strip("[]"), int(port))

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"
