"""Running statistics over a stream of durations.

Mean and variance use Welford's online update so a window never has to keep
its samples; two accumulators combine with the parallel (Chan et al.) merge,
which is what tag rollup relies on.
"""

from __future__ import annotations

import math
from typing import Iterable


class RunningStats:
    """Count, mean, min, max and population standard deviation in O(1) space."""

    __slots__ = ("count", "mean", "m2", "min", "max")

    def __init__(self) -> None:
        self.count = 0
        self.mean = 0.0
        self.m2 = 0.0
        self.min = math.inf
        self.max = -math.inf

    @classmethod
    def from_values(cls, values: Iterable[float]) -> "RunningStats":
        stats = cls()
        for value in values:
            stats.add(value)
        return stats

    def add(self, value: float) -> None:
        """Record one duration (milliseconds)."""
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        self.m2 += delta * (value - self.mean)
        if value < self.min:
            self.min = value
        if value > self.max:
            self.max = value

    def merge(self, other: "RunningStats") -> "RunningStats":
        """Return a new accumulator equal to the union of both inputs."""
        merged = RunningStats()
        if self.count == 0:
            merged._copy_from(other)
            return merged
        if other.count == 0:
            merged._copy_from(self)
            return merged

        count = self.count + other.count
        delta = other.mean - self.mean
        merged.count = count
        merged.mean = self.mean + delta * other.count / count
        merged.m2 = self.m2 + other.m2 + delta * delta * self.count * other.count / count
        merged.min = min(self.min, other.min)
        merged.max = max(self.max, other.max)
        return merged

    def _copy_from(self, other: "RunningStats") -> None:
        self.count = other.count
        self.mean = other.mean
        self.m2 = other.m2
        self.min = other.min
        self.max = other.max

    @property
    def sum(self) -> float:
        return self.mean * self.count

    @property
    def variance(self) -> float:
        # Population variance; a single sample has no spread.
        if self.count <= 1:
            return 0.0
        return max(self.m2 / self.count, 0.0)

    @property
    def std_dev(self) -> float:
        return math.sqrt(self.variance)

    def to_dict(self) -> dict:
        """Convert stats to dictionary."""
        empty = self.count == 0
        return {
            "count": self.count,
            "mean": self.mean,
            "min": None if empty else self.min,
            "max": None if empty else self.max,
            "std_dev": self.std_dev,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RunningStats):
            return NotImplemented
        return (
            self.count == other.count
            and self.min == other.min
            and self.max == other.max
            and math.isclose(self.mean, other.mean, rel_tol=1e-9, abs_tol=1e-9)
            and math.isclose(self.m2, other.m2, rel_tol=1e-9, abs_tol=1e-6)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"RunningStats(count={self.count} mean={self.mean:.3f} "
            f"min={self.min} max={self.max} std_dev={self.std_dev:.3f})"
        )
