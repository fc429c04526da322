# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Exception hierarchy for PeerGate.

Every error raised by the admission engine derives from
:class:`PeerGateException`, which carries a message plus a ``details``
dict that can be serialized for diagnostics.
"""

from __future__ import annotations

from typing import Any


class PeerGateException(Exception):  # noqa: N818
    """Base exception for all PeerGate errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class MalformedPayloadError(PeerGateException):
    """Join payload bytes could not be decoded.

    Raised when:
    - The payload is truncated or carries trailing bytes
    - The format version byte is unknown
    - The field count or a field length is out of range
    """

    def __init__(self, message: str, size: int | None = None):
        details = {}
        if size is not None:
            details["size"] = size
        super().__init__(message, details)
        self.size = size


class AdmissionError(PeerGateException):
    """A join attempt was refused by the admission policy."""

    pass


class BadCertificateError(AdmissionError):
    """Certificate signature did not verify against the expected issuer."""

    def __init__(self, message: str, subject: str | None = None):
        details = {}
        if subject:
            details["subject"] = subject
        super().__init__(message, details)
        self.subject = subject


class BadVoteError(AdmissionError):
    """A vote was structurally invalid or cast by a non-member."""

    def __init__(self, message: str, voter: str | None = None):
        details = {}
        if voter:
            details["voter"] = voter
        super().__init__(message, details)
        self.voter = voter


class PersistenceWriteError(PeerGateException):
    """Membership snapshot could not be written.

    Never fatal: the in-memory membership stays authoritative.
    """

    def __init__(self, message: str, group_id: str | None = None):
        details = {}
        if group_id:
            details["group_id"] = group_id
        super().__init__(message, details)
        self.group_id = group_id


class ChannelClosedError(PeerGateException):
    """The outbound channel to the runtime is gone."""

    pass


class ConfigException(PeerGateException):
    """Exception for configuration errors.

    Raised when:
    - A setting is out of range (e.g. acceptance rate outside (0, 1])
    - A required key is missing or not valid hex
    """

    def __init__(self, message: str, setting: str | None = None, value: Any = None):
        details = {}
        if setting:
            details["setting"] = setting
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.setting = setting
        self.value = value


class InvalidTransitionError(PeerGateException):
    """A peer lifecycle transition is not allowed from the current state."""

    def __init__(self, key: str, current: str, target: str):
        message = f"Cannot move {key} from {current} to {target}"
        super().__init__(message, {"key": key, "from": current, "to": target})
        self.current = current
        self.target = target
