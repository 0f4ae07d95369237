"""A fast 32-bit hash similar to murmur hash."""

from __future__ import annotations

import struct

_M = 0xC6A4A793
_R = 24
_MASK32 = 0xFFFFFFFF


def hash_bytes(data, seed: int = 0) -> int:
    """Hash data into a 32-bit value starting from seed."""
    buf = bytes(data)
    n = len(buf)
    h = (seed ^ (_M * n)) & _MASK32
    limit = n - n % 4
    for (word,) in struct.iter_unpack("<I", buf[:limit]):
        h = ((h + word) * _M) & _MASK32
        h ^= h >> 16
    rest = buf[limit:]
    if rest:
        h = (h + int.from_bytes(rest, "little")) & _MASK32
        h = (h * _M) & _MASK32
        h ^= h >> _R
    return h