"""Tests for identity schemes."""

from __future__ import annotations

import pytest

from peergate.identity.scheme import Ed25519Scheme, SigningError
from peergate.transport.codec import serialize_public_key


class TestEd25519Scheme:
    """Tests for the production Ed25519 scheme."""

    def test_keypair_sizes(self):
        secret, public = Ed25519Scheme.generate_keypair()

        assert len(secret) == 32
        assert len(public) == 32

    def test_public_key_for_matches(self):
        secret, public = Ed25519Scheme.generate_keypair()

        assert Ed25519Scheme.public_key_for(secret) == public

    def test_sign_and_verify(self, ed25519):
        secret, public = Ed25519Scheme.generate_keypair()
        signature = ed25519.sign(secret, b"message")

        assert ed25519.verify(public, b"message", signature)

    def test_single_bit_flip_fails(self, ed25519):
        secret, public = Ed25519Scheme.generate_keypair()
        signature = bytearray(ed25519.sign(secret, b"message"))
        signature[0] ^= 0x01

        assert not ed25519.verify(public, b"message", bytes(signature))

    def test_wrong_key_fails(self, ed25519):
        secret, _ = Ed25519Scheme.generate_keypair()
        _, other = Ed25519Scheme.generate_keypair()

        assert not ed25519.verify(other, b"message", ed25519.sign(secret, b"message"))

    @pytest.mark.parametrize(
        "public_key, signature",
        [(b"short", b"\x00" * 64), (b"\x00" * 32, b"short"), (b"", b"")],
    )
    def test_malformed_input_is_invalid_not_error(self, ed25519, public_key, signature):
        assert ed25519.verify(public_key, b"message", signature) is False

    def test_bad_secret_key_raises(self, ed25519):
        with pytest.raises(SigningError):
            ed25519.sign(b"too-short", b"message")
        with pytest.raises(SigningError):
            Ed25519Scheme.public_key_for(b"too-short")


class TestSchemeHelpers:
    """Tests for the shared IdentityScheme helpers."""

    def test_encode_public_key_is_length_prefixed(self, ed25519):
        public = b"\x01" * 32

        assert ed25519.encode_public_key(public) == serialize_public_key(public)
        assert ed25519.encode_public_key(public)[:4] == b"\x00\x00\x00\x20"

    def test_display_is_short_hex(self, ed25519):
        assert ed25519.display(b"\xab" * 32) == "ab" * 8
