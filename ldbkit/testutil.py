"""Random data generators for tests and benchmarks."""

from __future__ import annotations

from ldbkit.rng import Random

_KEY_CHARS = b"\x00\x01abcde\xfd\xfe\xff"


def random_string(rnd: Random, length: int) -> bytes:
    """Return length random printable bytes (space through tilde)."""
    return bytes(0x20 + rnd.uniform(95) for _ in range(length))


def random_key(rnd: Random, length: int) -> bytes:
    """Return a random key drawn from a small set including edge bytes."""
    return bytes(_KEY_CHARS[rnd.uniform(len(_KEY_CHARS))] for _ in range(length))


def compressible_string(rnd: Random, compressed_fraction: float, length: int) -> bytes:
    """Return length bytes built by repeating a random piece.

    The piece is about length * compressed_fraction bytes long.
    """
    raw = max(int(length * compressed_fraction), 1)
    piece = random_string(rnd, raw)
    repeats = -(-length // raw)
    return (piece * repeats)[:length]