"""Membership certificates.

A certificate is an issuer's signature over a subject's public key::

    issuer_signature = sign(issuer_secret, encode_public_key(subject_pk))

It is valid iff the issuer's public key verifies that signature. Certificates
are created once and never mutated, only re-verified.

Two serialized forms exist: the compact binary form carried inside join
payloads, and a hex JSON form that is easy to copy between machines.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..core.exceptions import BadCertificateError
from ..identity.scheme import IdentityScheme
from ..transport.codec import CodecError, decode_fields, encode_fields


@dataclass(frozen=True)
class Certificate:
    """Issuer endorsement of a subject public key."""

    subject_pk: bytes
    issuer_pk: bytes
    issuer_signature: bytes

    @classmethod
    def issue(
        cls,
        scheme: IdentityScheme,
        issuer_secret: bytes,
        issuer_pk: bytes,
        subject_pk: bytes,
    ) -> Certificate:
        """Sign ``subject_pk`` with the issuer's secret key.

        Raises:
            SigningError: If the scheme cannot sign with ``issuer_secret``
        """
        signature = scheme.sign(issuer_secret, scheme.encode_public_key(subject_pk))
        return cls(subject_pk=subject_pk, issuer_pk=issuer_pk, issuer_signature=signature)

    @classmethod
    def issue_self(cls, scheme: IdentityScheme, secret: bytes, public_key: bytes) -> Certificate:
        """Self-signed certificate: subject and issuer are the same key."""
        return cls.issue(scheme, secret, public_key, public_key)

    def verify(self, scheme: IdentityScheme) -> bool:
        """Check the issuer signature over the subject key."""
        return scheme.verify(
            self.issuer_pk,
            scheme.encode_public_key(self.subject_pk),
            self.issuer_signature,
        )

    def verify_or_raise(self, scheme: IdentityScheme) -> None:
        """Like :meth:`verify`, but a bad signature is an error.

        Raises:
            BadCertificateError: If the issuer signature does not verify
        """
        if not self.verify(scheme):
            raise BadCertificateError(
                f"Certificate for {scheme.display(self.subject_pk)} not signed by {scheme.display(self.issuer_pk)}",
                subject=self.subject_pk.hex(),
            )

    @property
    def is_self_signed(self) -> bool:
        return self.subject_pk == self.issuer_pk

    # ------------------------------------------------------------------
    # Binary form
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        return encode_fields(self.subject_pk, self.issuer_pk, self.issuer_signature)

    @classmethod
    def from_bytes(cls, data: bytes) -> Certificate:
        """Decode the binary form.

        Raises:
            CodecError: If ``data`` is not a three-field frame
        """
        subject, issuer, signature = decode_fields(data, expected=3)
        return cls(subject_pk=subject, issuer_pk=issuer, issuer_signature=signature)

    # ------------------------------------------------------------------
    # JSON form
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject_pk.hex(),
            "issuer": self.issuer_pk.hex(),
            "signature": self.issuer_signature.hex(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Certificate:
        try:
            return cls(
                subject_pk=bytes.fromhex(data["subject"]),
                issuer_pk=bytes.fromhex(data["issuer"]),
                issuer_signature=bytes.fromhex(data["signature"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CodecError(f"Invalid certificate document: {e}") from e

    def to_json_string(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_string(cls, text: str) -> Certificate:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CodecError(f"Invalid certificate JSON: {e}") from e
        if not isinstance(data, dict):
            raise CodecError(f"Expected JSON object, got {type(data).__name__}")
        return cls.from_dict(data)
