"""Snappy and Zstandard block compression."""

from __future__ import annotations

import zstandard

from ldbkit.coding import decode_varint32, encode_varint32
from ldbkit.status import CorruptionError


class CompressionError(ValueError):
    """Raised when data cannot be compressed or decompressed."""


def _emit_literal(out: bytearray, chunk: bytes) -> None:
    if not chunk:
        return
    n = len(chunk) - 1
    if n < 60:
        out.append(n << 2)
    else:
        size = (n.bit_length() + 7) // 8
        out.append((59 + size) << 2)
        out += n.to_bytes(size, "little")
    out += chunk


def _emit_copy_piece(out: bytearray, offset: int, length: int) -> None:
    if 4 <= length <= 11 and offset < 2048:
        out.append(1 | ((length - 4) << 2) | ((offset >> 8) << 5))
        out.append(offset & 0xFF)
    elif offset < 65536:
        out.append(2 | ((length - 1) << 2))
        out += offset.to_bytes(2, "little")
    else:
        out.append(3 | ((length - 1) << 2))
        out += offset.to_bytes(4, "little")


def _emit_copy(out: bytearray, offset: int, length: int) -> None:
    while length >= 68:
        _emit_copy_piece(out, offset, 64)
        length -= 64
    if length > 64:
        _emit_copy_piece(out, offset, 60)
        length -= 60
    _emit_copy_piece(out, offset, length)


def snappy_compress(data) -> bytes:
    """Compress data into the raw snappy format."""
    src = bytes(data)
    n = len(src)
    if n > 0xFFFFFFFF:
        raise CompressionError("input too large for snappy")
    out = bytearray(encode_varint32(n))
    table: dict[bytes, int] = {}
    pos = 0
    literal_start = 0
    while pos + 4 <= n:
        key = src[pos:pos + 4]
        candidate = table.get(key)
        table[key] = pos
        if candidate is None:
            pos += 1
            continue
        length = 4
        while pos + length < n and src[candidate + length] == src[pos + length]:
            length += 1
        _emit_literal(out, src[literal_start:pos])
        _emit_copy(out, pos - candidate, length)
        pos += length
        literal_start = pos
    _emit_literal(out, src[literal_start:])
    return bytes(out)


def snappy_uncompressed_length(data) -> int:
    """Return the length recorded in the header of snappy data."""
    try:
        length, _ = decode_varint32(data)
    except CorruptionError as exc:
        raise CompressionError("bad snappy header") from exc
    return length


def _read_le(src: bytes, pos: int, size: int) -> int:
    if pos + size > len(src):
        raise CompressionError("truncated snappy data")
    return int.from_bytes(src[pos:pos + size], "little")


def snappy_uncompress(data) -> bytes:
    """Decompress raw snappy data."""
    src = bytes(data)
    try:
        expected, pos = decode_varint32(src)
    except CorruptionError as exc:
        raise CompressionError("bad snappy header") from exc
    out = bytearray()
    n = len(src)
    while pos < n:
        tag = src[pos]
        pos += 1
        kind = tag & 3
        if kind == 0:
            length = tag >> 2
            if length >= 60:
                extra = length - 59
                length = _read_le(src, pos, extra)
                pos += extra
            length += 1
            if pos + length > n:
                raise CompressionError("truncated snappy literal")
            out += src[pos:pos + length]
            pos += length
        else:
            if kind == 1:
                length = ((tag >> 2) & 7) + 4
                offset = ((tag >> 5) << 8) | _read_le(src, pos, 1)
                pos += 1
            elif kind == 2:
                length = (tag >> 2) + 1
                offset = _read_le(src, pos, 2)
                pos += 2
            else:
                length = (tag >> 2) + 1
                offset = _read_le(src, pos, 4)
                pos += 4
            if offset == 0 or offset > len(out):
                raise CompressionError("bad snappy copy offset")
            start = len(out) - offset
            if offset >= length:
                out += out[start:start + length]
            else:
                pattern = out[start:]
                out += (pattern * (length // offset + 1))[:length]
        if len(out) > expected:
            raise CompressionError("snappy output exceeds recorded length")
    if len(out) != expected:
        raise CompressionError("snappy output shorter than recorded length")
    return bytes(out)


def zstd_compress(data, level: int = 1) -> bytes:
    """Compress data into a zstd frame that records its content size."""
    try:
        return zstandard.ZstdCompressor(level=level).compress(bytes(data))
    except zstandard.ZstdError as exc:
        raise CompressionError(str(exc)) from exc


def zstd_uncompressed_length(data) -> int:
    """Return the content size recorded in a zstd frame.

    A size of zero or an unknown size is treated as a failure.
    """
    try:
        size = zstandard.frame_content_size(bytes(data))
    except zstandard.ZstdError as exc:
        raise CompressionError(str(exc)) from exc
    if size <= 0:
        raise CompressionError("zstd frame has no usable content size")
    return size


def zstd_uncompress(data) -> bytes:
    """Decompress a zstd frame produced by zstd_compress."""
    src = bytes(data)
    length = zstd_uncompressed_length(src)
    try:
        return zstandard.ZstdDecompressor().decompress(src, max_output_size=length)
    except zstandard.ZstdError as exc:
        raise CompressionError(str(exc)) from exc