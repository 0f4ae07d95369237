import pytest

from ldbkit.coding import (
    decode_fixed32,
    decode_fixed64,
    decode_length_prefixed,
    decode_varint32,
    decode_varint64,
    encode_fixed32,
    encode_fixed64,
    encode_length_prefixed,
    encode_varint32,
    encode_varint64,
    varint_length,
)
from ldbkit.status import CorruptionError


def test_fixed32():
    s = b"".join(encode_fixed32(v) for v in range(100000))
    for v in range(100000):
        assert decode_fixed32(s, v * 4) == v


def test_fixed64():
    s = bytearray()
    for power in range(64):
        v = 1 << power
        s += encode_fixed64(v - 1) + encode_fixed64(v) + encode_fixed64(v + 1)
    offset = 0
    for power in range(64):
        v = 1 << power
        for expected in (v - 1, v, v + 1):
            assert decode_fixed64(s, offset) == expected
            offset += 8


def test_encoding_output():
    assert encode_fixed32(0x04030201) == b"\x01\x02\x03\x04"
    assert encode_fixed64(0x0807060504030201) == bytes(range(1, 9))


def test_varint32():
    values = [((i // 32) << (i % 32)) & 0xFFFFFFFF for i in range(32 * 32)]
    s = b"".join(encode_varint32(v) for v in values)
    pos = 0
    for v in values:
        start = pos
        res, pos = decode_varint32(s, pos)
        assert res == v
        assert varint_length(res) == pos - start
    assert pos == len(s)


def test_varint64():
    values = [0, 100, 2**64 - 1, 2**64 - 2]
    for k in range(64):
        power = 1 << k
        values += [power, power - 1, power + 1]
    s = b"".join(encode_varint64(v) for v in values)
    pos = 0
    for v in values:
        assert pos < len(s)
        start = pos
        actual, pos = decode_varint64(s, pos)
        assert actual == v
        assert varint_length(actual) == pos - start
    assert pos == len(s)


def test_varint32_overflow():
    with pytest.raises(CorruptionError):
        decode_varint32(b"\x81\x82\x83\x84\x85\x11")


def test_varint32_truncation():
    large_value = (1 << 31) + 100
    s = encode_varint32(large_value)
    for length in range(len(s) - 1):
        with pytest.raises(CorruptionError):
            decode_varint32(s[:length])
    assert decode_varint32(s) == (large_value, len(s))


def test_varint64_overflow():
    with pytest.raises(CorruptionError):
        decode_varint64(b"\x81\x82\x83\x84\x85\x81\x82\x83\x84\x85\x11")


def test_varint64_truncation():
    large_value = (1 << 63) + 100
    s = encode_varint64(large_value)
    for length in range(len(s) - 1):
        with pytest.raises(CorruptionError):
            decode_varint64(s[:length])
    assert decode_varint64(s) == (large_value, len(s))


def test_strings():
    s = b"".join(
        encode_length_prefixed(v) for v in (b"", b"foo", b"bar", b"x" * 200)
    )
    pos = 0
    for expected in (b"", b"foo", b"bar", b"x" * 200):
        value, pos = decode_length_prefixed(s, pos)
        assert value == expected
    assert s[pos:] == b""


def test_length_prefixed_truncated():
    s = encode_length_prefixed(b"hello")
    with pytest.raises(CorruptionError):
        decode_length_prefixed(s[:-1])


def test_fixed_short_input():
    with pytest.raises(ValueError):
        decode_fixed32(b"\x01\x02")