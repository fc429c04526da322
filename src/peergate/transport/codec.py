"""
Binary codec for join payloads.

A join payload is a small tuple of byte strings: ``(public_key, proof)`` for
certificate admission or ``(public_key, certificate_bytes)`` for quorum
admission. The encoding is deterministic so signatures over it are stable.

Wire format::

    +---------+--------+----------------------+-----------+-----
    | version | count  | 4 bytes (BE u32)     | field     | ...
    | 1 byte  | 1 byte | = field length       | bytes     |
    +---------+--------+----------------------+-----------+-----

Decoding is strict: an unknown version, a field count other than the one
expected, a truncated frame, an oversized field or trailing bytes are all
rejected with :class:`CodecError`.
"""

from __future__ import annotations

import struct

from ..core.exceptions import MalformedPayloadError

FORMAT_VERSION: int = 1

# Keys, signatures and certificates are all tiny; anything bigger is hostile.
MAX_FIELD_SIZE: int = 64 * 1024
MAX_FIELDS: int = 16

_HEADER_STRUCT = struct.Struct("!BB")
_LENGTH_STRUCT = struct.Struct("!I")
HEADER_SIZE: int = _HEADER_STRUCT.size  # 2
LENGTH_SIZE: int = _LENGTH_STRUCT.size  # 4


class CodecError(MalformedPayloadError):
    """Raised when encoding or decoding fails."""


def encode_fields(*fields: bytes) -> bytes:
    """Encode byte strings as one versioned, length-prefixed frame.

    Raises:
        CodecError: If there are too many fields or a field is oversized.
    """
    if len(fields) > MAX_FIELDS:
        raise CodecError(f"Too many fields: {len(fields)} > {MAX_FIELDS}")

    parts = [_HEADER_STRUCT.pack(FORMAT_VERSION, len(fields))]
    for field in fields:
        field = bytes(field)
        if len(field) > MAX_FIELD_SIZE:
            raise CodecError(f"Field size {len(field)} exceeds maximum {MAX_FIELD_SIZE}", size=len(field))
        parts.append(_LENGTH_STRUCT.pack(len(field)))
        parts.append(field)
    return b"".join(parts)


def decode_fields(data: bytes | bytearray | memoryview, expected: int | None = None) -> tuple[bytes, ...]:
    """Decode a frame produced by :func:`encode_fields`.

    Args:
        data: Complete frame; trailing bytes are an error.
        expected: If given, the exact number of fields the frame must hold.

    Returns:
        Tuple of decoded fields.

    Raises:
        CodecError: On any structural problem.
    """
    buf = bytes(data)
    if len(buf) < HEADER_SIZE:
        raise CodecError("Incomplete payload header", size=len(buf))

    version, count = _HEADER_STRUCT.unpack_from(buf, 0)
    if version != FORMAT_VERSION:
        raise CodecError(f"Unsupported payload version {version}", size=len(buf))
    if count > MAX_FIELDS:
        raise CodecError(f"Too many fields: {count} > {MAX_FIELDS}", size=len(buf))
    if expected is not None and count != expected:
        raise CodecError(f"Expected {expected} fields, got {count}", size=len(buf))

    offset = HEADER_SIZE
    fields: list[bytes] = []
    for index in range(count):
        if len(buf) < offset + LENGTH_SIZE:
            raise CodecError(f"Truncated length prefix for field {index}", size=len(buf))
        (length,) = _LENGTH_STRUCT.unpack_from(buf, offset)
        offset += LENGTH_SIZE
        if length > MAX_FIELD_SIZE:
            raise CodecError(f"Field size {length} exceeds maximum {MAX_FIELD_SIZE}", size=len(buf))
        if len(buf) < offset + length:
            raise CodecError(
                f"Truncated field {index}: need {offset + length} bytes, have {len(buf)}",
                size=len(buf),
            )
        fields.append(buf[offset : offset + length])
        offset += length

    if offset != len(buf):
        raise CodecError(f"{len(buf) - offset} trailing bytes after payload", size=len(buf))

    return tuple(fields)


def encode_pair(first: bytes, second: bytes) -> bytes:
    """Encode a ``(public_key, proof)`` join payload."""
    return encode_fields(first, second)


def decode_pair(data: bytes | bytearray | memoryview) -> tuple[bytes, bytes]:
    """Decode a two-field join payload."""
    first, second = decode_fields(data, expected=2)
    return first, second


def serialize_public_key(public_key: bytes) -> bytes:
    """Canonical form of a public key that certificate signatures cover.

    A 4-byte big-endian length followed by the key bytes.
    """
    public_key = bytes(public_key)
    return _LENGTH_STRUCT.pack(len(public_key)) + public_key
