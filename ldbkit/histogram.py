"""A bucketed histogram of measurements with a textual report."""

from __future__ import annotations

import bisect
import math


def _bucket_limits() -> tuple[float, ...]:
    limits = list(range(1, 11))
    steps = (12, 14, 16, 18, 20, 25, 30, 35, 40, 45, 50, 60, 70, 80, 90, 100)
    decade = 10
    while decade <= 1_000_000_000:
        limits.extend(step * decade // 10 for step in steps)
        decade *= 10
    limits[-1] = 1e200
    return tuple(float(limit) for limit in limits)


_BUCKET_LIMITS = _bucket_limits()
_NUM_BUCKETS = len(_BUCKET_LIMITS)


class Histogram:
    """Counts values into fixed buckets and tracks summary statistics."""

    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        """Forget every recorded value."""
        self._min = _BUCKET_LIMITS[-1]
        self._max = 0.0
        self._num = 0.0
        self._sum = 0.0
        self._sum_squares = 0.0
        self._buckets = [0.0] * _NUM_BUCKETS

    def add(self, value: float) -> None:
        """Record one value."""
        bucket = min(bisect.bisect_right(_BUCKET_LIMITS, value), _NUM_BUCKETS - 1)
        self._buckets[bucket] += 1.0
        self._min = min(self._min, value)
        self._max = max(self._max, value)
        self._num += 1
        self._sum += value
        self._sum_squares += value * value

    def merge(self, other: Histogram) -> None:
        """Add every value recorded in other to this histogram."""
        self._min = min(self._min, other._min)
        self._max = max(self._max, other._max)
        self._num += other._num
        self._sum += other._sum
        self._sum_squares += other._sum_squares
        self._buckets = [a + b for a, b in zip(self._buckets, other._buckets)]

    def median(self) -> float:
        """Estimated median of the recorded values."""
        return self.percentile(50.0)

    def percentile(self, p: float) -> float:
        """Estimate percentile p by linear interpolation within a bucket."""
        threshold = self._num * (p / 100.0)
        cumulative = 0.0
        for index, count in enumerate(self._buckets):
            cumulative += count
            if cumulative >= threshold:
                left_point = 0.0 if index == 0 else _BUCKET_LIMITS[index - 1]
                right_point = _BUCKET_LIMITS[index]
                left_sum = cumulative - count
                pos = (threshold - left_sum) / count if count else 0.0
                result = left_point + (right_point - left_point) * pos
                return min(max(result, self._min), self._max)
        return self._max

    def average(self) -> float:
        """Mean of the recorded values, or 0 when empty."""
        if self._num == 0.0:
            return 0.0
        return self._sum / self._num

    def standard_deviation(self) -> float:
        """Population standard deviation, or 0 when empty."""
        if self._num == 0.0:
            return 0.0
        variance = (self._sum_squares * self._num - self._sum * self._sum) / (
            self._num * self._num
        )
        return math.sqrt(max(variance, 0.0))

    def __str__(self) -> str:
        lines = [
            "Count: %.0f  Average: %.4f  StdDev: %.2f\n"
            % (self._num, self.average(), self.standard_deviation()),
            "Min: %.4f  Median: %.4f  Max: %.4f\n"
            % (0.0 if self._num == 0.0 else self._min, self.median(), self._max),
            "------------------------------------------------------\n",
        ]
        cumulative = 0.0
        for index, count in enumerate(self._buckets):
            if count <= 0.0:
                continue
            cumulative += count
            mult = 100.0 / self._num
            left = 0.0 if index == 0 else _BUCKET_LIMITS[index - 1]
            lines.append(
                "[ %7.0f, %7.0f ) %7.0f %7.3f%% %7.3f%% "
                % (left, _BUCKET_LIMITS[index], count, mult * count, mult * cumulative)
            )
            marks = int(20 * (count / self._num) + 0.5)
            lines.append("#" * marks + "\n")
        return "".join(lines)