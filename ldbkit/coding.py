"""Fixed-width and varint encodings in little-endian order."""

from __future__ import annotations

import struct

from ldbkit.status import CorruptionError

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF
_FIXED32 = struct.Struct("<I")
_FIXED64 = struct.Struct("<Q")


def encode_fixed32(value: int) -> bytes:
    """Encode the low 32 bits of value as 4 little-endian bytes."""
    return _FIXED32.pack(value & _MASK32)


def encode_fixed64(value: int) -> bytes:
    """Encode the low 64 bits of value as 8 little-endian bytes."""
    return _FIXED64.pack(value & _MASK64)


def decode_fixed32(data, offset: int = 0) -> int:
    """Read a 4-byte little-endian integer at offset."""
    try:
        return _FIXED32.unpack_from(data, offset)[0]
    except struct.error as exc:
        raise ValueError(f"need 4 bytes at offset {offset}") from exc


def decode_fixed64(data, offset: int = 0) -> int:
    """Read an 8-byte little-endian integer at offset."""
    try:
        return _FIXED64.unpack_from(data, offset)[0]
    except struct.error as exc:
        raise ValueError(f"need 8 bytes at offset {offset}") from exc


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_varint32(value: int) -> bytes:
    """Encode the low 32 bits of value as a varint."""
    return _encode_varint(value & _MASK32)


def encode_varint64(value: int) -> bytes:
    """Encode the low 64 bits of value as a varint."""
    return _encode_varint(value & _MASK64)


def varint_length(value: int) -> int:
    """Number of bytes the varint encoding of value takes."""
    length = 1
    while value >= 0x80:
        length += 1
        value >>= 7
    return length


def _decode_varint(data, offset: int, max_bytes: int, mask: int) -> tuple[int, int]:
    result = 0
    window = bytes(data[offset:offset + max_bytes])
    for count, byte in enumerate(window, start=1):
        shift = 7 * (count - 1)
        if byte & 0x80:
            result |= (byte & 0x7F) << shift
        else:
            result |= byte << shift
            return result & mask, offset + count
    raise CorruptionError("bad varint", f"at offset {offset}")


def decode_varint32(data, offset: int = 0) -> tuple[int, int]:
    """Decode a varint32 at offset; return (value, offset after it)."""
    return _decode_varint(data, offset, 5, _MASK32)


def decode_varint64(data, offset: int = 0) -> tuple[int, int]:
    """Decode a varint64 at offset; return (value, offset after it)."""
    return _decode_varint(data, offset, 10, _MASK64)


def encode_length_prefixed(value) -> bytes:
    """Encode value as a varint32 length followed by its bytes."""
    payload = bytes(value)
    return encode_varint32(len(payload)) + payload


def decode_length_prefixed(data, offset: int = 0) -> tuple[bytes, int]:
    """Decode a length-prefixed byte string; return (value, offset after it)."""
    length, start = decode_varint32(data, offset)
    end = start + length
    if end > len(data):
        raise CorruptionError("bad length-prefixed slice", f"at offset {offset}")
    return bytes(data[start:end]), end