"""A block-based allocator handing out writable views into shared blocks."""

from __future__ import annotations

_BLOCK_SIZE = 4096
_ALIGN = 8
_POINTER_SIZE = 8


class Arena:
    """Hands out small buffers carved from 4 KiB blocks."""

    def __init__(self) -> None:
        self._blocks: list[bytearray] = []
        self._current: memoryview | None = None
        self._offset = 0
        self._remaining = 0
        self._usage = 0

    def allocate(self, nbytes: int) -> memoryview:
        """Return a writable buffer of nbytes bytes; nbytes must be positive."""
        if nbytes <= 0:
            raise ValueError("allocation size must be positive")
        if nbytes <= self._remaining:
            return self._take(0, nbytes)
        return self._allocate_fallback(nbytes)

    def allocate_aligned(self, nbytes: int) -> memoryview:
        """Return a buffer whose offset in its block is a multiple of 8."""
        if nbytes < 0:
            raise ValueError("allocation size must not be negative")
        slop = -self._offset % _ALIGN
        if nbytes + slop <= self._remaining:
            return self._take(slop, nbytes)
        return self._allocate_fallback(nbytes)

    def memory_usage(self) -> int:
        """Estimated number of bytes held by the arena."""
        return self._usage

    def _take(self, slop: int, nbytes: int) -> memoryview:
        start = self._offset + slop
        view = self._current[start:start + nbytes]
        self._offset = start + nbytes
        self._remaining -= slop + nbytes
        return view

    def _allocate_fallback(self, nbytes: int) -> memoryview:
        if nbytes > _BLOCK_SIZE // 4:
            # Large requests get their own block so the current one is kept.
            return self._new_block(nbytes)
        self._current = self._new_block(_BLOCK_SIZE)
        self._offset = 0
        self._remaining = _BLOCK_SIZE
        return self._take(0, nbytes)

    def _new_block(self, size: int) -> memoryview:
        block = bytearray(size)
        self._blocks.append(block)
        self._usage += size + _POINTER_SIZE
        return memoryview(block)