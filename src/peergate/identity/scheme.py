"""Pluggable peer identity schemes.

The admission policies never touch a concrete signature primitive. They are
handed an :class:`IdentityScheme` and only ever call ``sign``, ``verify``,
``encode_public_key`` and ``display`` on it. :class:`Ed25519Scheme` is the
production scheme, built on ``cryptography``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from ..core.exceptions import PeerGateException
from ..transport.codec import serialize_public_key


class SigningError(PeerGateException):
    """The scheme could not produce a signature (e.g. malformed secret key)."""

    pass


class IdentityScheme(ABC):
    """Abstract signature capability a peer group is generic over."""

    name: str = "abstract"

    @abstractmethod
    def sign(self, secret_key: bytes, message: bytes) -> bytes:
        """Sign ``message`` with ``secret_key``.

        Raises:
            SigningError: If the key cannot be used for signing
        """
        pass

    @abstractmethod
    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        """Return True iff ``signature`` is valid for ``message`` under ``public_key``.

        Must never raise for malformed input; malformed means invalid.
        """
        pass

    def encode_public_key(self, public_key: bytes) -> bytes:
        """Deterministic byte form of a public key, used as the certificate message."""
        return serialize_public_key(public_key)

    def display(self, public_key: bytes) -> str:
        """Short human-readable form of a public key for logs and names."""
        return public_key.hex()[:16]


class Ed25519Scheme(IdentityScheme):
    """Ed25519 signatures over raw 32-byte keys."""

    name = "ed25519"

    @staticmethod
    def generate_keypair() -> tuple[bytes, bytes]:
        """Generate a new keypair.

        Returns:
            Tuple of (secret_key, public_key) as raw bytes
        """
        private_key = Ed25519PrivateKey.generate()
        secret = private_key.private_bytes(
            encoding=Encoding.Raw,
            format=PrivateFormat.Raw,
            encryption_algorithm=NoEncryption(),
        )
        public = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        return secret, public

    @staticmethod
    def public_key_for(secret_key: bytes) -> bytes:
        """Derive the raw public key for a raw secret key."""
        try:
            private_key = Ed25519PrivateKey.from_private_bytes(secret_key)
        except ValueError as e:
            raise SigningError(f"Invalid Ed25519 secret key: {e}") from e
        return private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

    def sign(self, secret_key: bytes, message: bytes) -> bytes:
        try:
            private_key = Ed25519PrivateKey.from_private_bytes(secret_key)
        except ValueError as e:
            raise SigningError(f"Invalid Ed25519 secret key: {e}") from e
        return private_key.sign(message)

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        try:
            key = Ed25519PublicKey.from_public_bytes(public_key)
            key.verify(signature, message)
            return True
        except (InvalidSignature, ValueError):
            return False
