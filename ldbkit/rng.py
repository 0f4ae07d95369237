"""A small deterministic Park-Miller pseudo-random generator."""

from __future__ import annotations

_M = 2147483647  # 2**31 - 1
_A = 16807


class Random:
    """Linear congruential generator cycling through [1, 2**31 - 2]."""

    def __init__(self, seed: int) -> None:
        self._seed = seed & 0x7FFFFFFF
        if self._seed in (0, _M):
            self._seed = 1

    def next(self) -> int:
        """Return the next value in [1, 2**31 - 2]."""
        product = self._seed * _A
        seed = (product >> 31) + (product & _M)
        if seed > _M:
            seed -= _M
        self._seed = seed
        return seed

    def uniform(self, n: int) -> int:
        """Return a value uniformly drawn from [0, n - 1]; n must be positive."""
        return self.next() % n

    def one_in(self, n: int) -> bool:
        """Return True with a probability of about 1/n."""
        return self.next() % n == 0

    def skewed(self, max_log: int) -> int:
        """Pick a base in [0, max_log], then a value in [0, 2**base - 1]."""
        return self.uniform(1 << self.uniform(max_log + 1))