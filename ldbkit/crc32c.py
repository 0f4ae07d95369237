"""CRC32C (Castagnoli) checksums and the masked form used for stored CRCs."""

from __future__ import annotations

_MASK32 = 0xFFFFFFFF
_POLY = 0x82F63B78  # reflected Castagnoli polynomial
_XOR = 0xFFFFFFFF
_MASK_DELTA = 0xA282EAD8


def _build_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ _POLY if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_TABLE = _build_table()


def extend(crc: int, data) -> int:
    """Return the crc32c of A + data, where crc is the crc32c of some A."""
    table = _TABLE
    value = (crc & _MASK32) ^ _XOR
    for byte in bytes(data):
        value = table[(value ^ byte) & 0xFF] ^ (value >> 8)
    return value ^ _XOR


def value(data) -> int:
    """Return the crc32c of data."""
    return extend(0, data)


def mask(crc: int) -> int:
    """Return a masked form of crc, safe to store alongside checksummed data."""
    crc &= _MASK32
    rotated = ((crc >> 15) | (crc << 17)) & _MASK32
    return (rotated + _MASK_DELTA) & _MASK32


def unmask(masked_crc: int) -> int:
    """Return the crc whose masked form is masked_crc."""
    rotated = (masked_crc - _MASK_DELTA) & _MASK32
    return ((rotated >> 17) | (rotated << 15)) & _MASK32