"""Orderings over byte-string keys."""

from __future__ import annotations

import abc


class Comparator(abc.ABC):
    """A total order over keys, plus helpers to shorten index keys."""

    @abc.abstractmethod
    def name(self) -> str:
        """Name of the ordering; must change if the ordering changes."""

    @abc.abstractmethod
    def compare(self, a: bytes, b: bytes) -> int:
        """Return a negative, zero or positive number as a <, == or > b."""

    @abc.abstractmethod
    def find_shortest_separator(self, start: bytes, limit: bytes) -> bytes:
        """Return a short key in [start, limit) when start < limit."""

    @abc.abstractmethod
    def find_short_successor(self, key: bytes) -> bytes:
        """Return a short key that is >= key."""


class BytewiseComparator(Comparator):
    """Lexicographic ordering of unsigned bytes."""

    def name(self) -> str:
        return "leveldb.BytewiseComparator"

    def compare(self, a: bytes, b: bytes) -> int:
        a, b = bytes(a), bytes(b)
        return (a > b) - (a < b)

    def find_shortest_separator(self, start: bytes, limit: bytes) -> bytes:
        start, limit = bytes(start), bytes(limit)
        min_length = min(len(start), len(limit))
        diff_index = next(
            (i for i in range(min_length) if start[i] != limit[i]), min_length
        )
        if diff_index < min_length:
            diff_byte = start[diff_index]
            if diff_byte < 0xFF and diff_byte + 1 < limit[diff_index]:
                result = start[:diff_index] + bytes([diff_byte + 1])
                assert self.compare(result, limit) < 0
                return result
        return start

    def find_short_successor(self, key: bytes) -> bytes:
        key = bytes(key)
        for i, byte in enumerate(key):
            if byte != 0xFF:
                return key[:i] + bytes([byte + 1])
        return key


_BYTEWISE = BytewiseComparator()


def bytewise_comparator() -> BytewiseComparator:
    """Return the shared bytewise comparator."""
    return _BYTEWISE