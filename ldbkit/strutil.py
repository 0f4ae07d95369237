"""Number formatting, escaping and decimal parsing helpers."""

from __future__ import annotations

import re

_MAX_UINT64 = 0xFFFFFFFFFFFFFFFF
_DIGITS = re.compile(rb"[0-9]+")


def number_to_string(num: int) -> str:
    """Format an unsigned integer in decimal."""
    return str(num)


def escape_string(value) -> str:
    """Render bytes with every non-printable byte as \\xNN."""
    return "".join(
        chr(byte) if 0x20 <= byte <= 0x7E else f"\\x{byte:02x}"
        for byte in bytes(value)
    )


def consume_decimal_number(data) -> tuple[int, bytes]:
    """Parse leading decimal digits; return (value, remaining bytes).

    Raises ValueError when there are no leading digits or the number does
    not fit in 64 unsigned bits.
    """
    buf = bytes(data)
    match = _DIGITS.match(buf)
    if match is None:
        raise ValueError("no decimal digits at start of input")
    value = int(match.group())
    if value > _MAX_UINT64:
        raise ValueError("decimal number overflows 64 bits")
    return value, buf[match.end():]