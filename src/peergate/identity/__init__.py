"""Peer identity for PeerGate.

A group policy is generic over an :class:`IdentityScheme`; the scheme owns
every cryptographic decision (key format, signature algorithm, display).
"""

from peergate.identity.scheme import (
    Ed25519Scheme,
    IdentityScheme,
    SigningError,
)

__all__ = [
    "IdentityScheme",
    "Ed25519Scheme",
    "SigningError",
]
