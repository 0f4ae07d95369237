"""Filter policies, including the built-in bloom filter."""

from __future__ import annotations

import abc
from collections.abc import Iterable

from ldbkit.hash import hash_bytes

_MASK32 = 0xFFFFFFFF
_BLOOM_SEED = 0xBC9F1D34
_MAX_PROBES = 30


def _as_bytes(data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _bloom_hash(key: bytes) -> int:
    return hash_bytes(key, _BLOOM_SEED)


class FilterPolicy(abc.ABC):
    """Builds compact summaries of key sets that answer "may contain"."""

    @abc.abstractmethod
    def name(self) -> str:
        """Name of the policy; changes whenever the encoding changes."""

    @abc.abstractmethod
    def create_filter(self, keys: Iterable) -> bytes:
        """Return a filter that summarises keys."""

    @abc.abstractmethod
    def key_may_match(self, key, filter_data) -> bool:
        """Return False only if key was certainly not in the filtered set."""


class BloomFilterPolicy(FilterPolicy):
    """Bloom filter using double hashing over a single 32-bit hash."""

    def __init__(self, bits_per_key: int) -> None:
        if bits_per_key < 0:
            raise ValueError("bits_per_key must not be negative")
        self._bits_per_key = bits_per_key
        # Rounded down on purpose to reduce probing cost a little.
        self._k = min(max(int(bits_per_key * 0.69), 1), _MAX_PROBES)

    def name(self) -> str:
        return "leveldb.BuiltinBloomFilter2"

    def create_filter(self, keys: Iterable) -> bytes:
        key_list = [_as_bytes(key) for key in keys]
        bits = max(len(key_list) * self._bits_per_key, 64)
        nbytes = (bits + 7) // 8
        bits = nbytes * 8
        array = bytearray(nbytes)
        for key in key_list:
            h = _bloom_hash(key)
            delta = ((h >> 17) | (h << 15)) & _MASK32
            for _ in range(self._k):
                bitpos = h % bits
                array[bitpos >> 3] |= 1 << (bitpos & 7)
                h = (h + delta) & _MASK32
        array.append(self._k)
        return bytes(array)

    def key_may_match(self, key, filter_data) -> bool:
        data = bytes(filter_data)
        length = len(data)
        if length < 2:
            return False
        bits = (length - 1) * 8
        k = data[-1]
        if k > _MAX_PROBES:
            # Reserved for other encodings of short filters: treat as a match.
            return True
        h = _bloom_hash(_as_bytes(key))
        delta = ((h >> 17) | (h << 15)) & _MASK32
        for _ in range(k):
            bitpos = h % bits
            if not data[bitpos >> 3] & (1 << (bitpos & 7)):
                return False
            h = (h + delta) & _MASK32
        return True


def new_bloom_filter_policy(bits_per_key: int) -> BloomFilterPolicy:
    """Return a bloom filter policy using about bits_per_key bits per key."""
    return BloomFilterPolicy(bits_per_key)