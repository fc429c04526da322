"""Global test fixtures for PeerGate test suite."""

from __future__ import annotations

import hashlib
import os

import pytest

from peergate.core.config import clear_config_cache
from peergate.identity.scheme import Ed25519Scheme, IdentityScheme, SigningError
from peergate.transport.channel import OutboundChannel
from peergate.types import GroupId, PeerAddress, SocketAddress

# ============================================================================
# Identity Schemes
# ============================================================================


class MockScheme(IdentityScheme):
    """Deterministic toy scheme: a public key is its own secret key.

    A signature is sha256(key || message), so verification can recompute it
    from the public key. Only for tests.
    """

    name = "mock"

    def sign(self, secret_key: bytes, message: bytes) -> bytes:
        if not secret_key:
            raise SigningError("Empty secret key")
        return hashlib.sha256(secret_key + message).digest()

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        return hashlib.sha256(public_key + message).digest() == signature


@pytest.fixture
def mock_scheme():
    """Deterministic identity scheme."""
    return MockScheme()


@pytest.fixture
def ed25519():
    """Production identity scheme."""
    return Ed25519Scheme()


@pytest.fixture
def ca_keypair():
    """Ed25519 (secret, public) keypair for a certificate authority."""
    return Ed25519Scheme.generate_keypair()


@pytest.fixture
def peer_keypair():
    """Ed25519 (secret, public) keypair for a joining peer."""
    return Ed25519Scheme.generate_keypair()


# ============================================================================
# Identifiers
# ============================================================================


def make_address(n: int) -> PeerAddress:
    """Deterministic peer address whose last byte is ``n``."""
    return PeerAddress(bytes(31) + bytes([n]))


def make_key(n: int) -> bytes:
    """Deterministic mock public key for peer ``n``."""
    return b"peer-key-%03d" % n


@pytest.fixture
def group_id():
    return GroupId(b"\x07" * 32)


@pytest.fixture
def socket_address():
    return SocketAddress("127.0.0.1", 7364)


@pytest.fixture
def addresses():
    """Factory for deterministic peer addresses."""
    return make_address


@pytest.fixture
def keys():
    """Factory for deterministic mock public keys."""
    return make_key


# ============================================================================
# Channels
# ============================================================================


@pytest.fixture
def sender():
    """Outbound channel collecting verdicts."""
    return OutboundChannel()


@pytest.fixture
def closed_sender():
    """Outbound channel that refuses every send."""
    channel = OutboundChannel()
    channel.close()
    return channel


# ============================================================================
# Environment
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all PEERGATE_ environment variables and reset the config singleton."""
    for key in list(os.environ.keys()):
        if key.startswith("PEERGATE_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()
