"""Running statistics used by the time slicer."""

from .running_stats import RunningStats

__all__ = ["RunningStats"]
