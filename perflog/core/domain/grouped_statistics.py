"""Per-window statistics snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from ...metrics.running_stats import RunningStats


@dataclass(frozen=True)
class GroupedTimingStatistics:
    """Statistics of every tag seen in one closed time window.

    Emitted by the slicer once the window can no longer receive records and
    never modified afterwards; `statistics` is a read-only view.
    """
    window_start_time: int
    window_stop_time: int
    create_rollup_statistics: bool
    statistics: Mapping[str, RunningStats] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.statistics, MappingProxyType):
            object.__setattr__(self, "statistics", MappingProxyType(dict(self.statistics)))

    @property
    def window_duration_ms(self) -> int:
        return self.window_stop_time - self.window_start_time

    def tags(self) -> list[str]:
        """Tags ordered by name (rollup parents sort before their children)."""
        return sorted(self.statistics)

    def get(self, tag: str) -> Optional[RunningStats]:
        return self.statistics.get(tag)

    def tps(self, tag: str) -> float:
        """Records per second for the tag within this window."""
        stats = self.statistics.get(tag)
        if stats is None or self.window_duration_ms <= 0:
            return 0.0
        return stats.count / (self.window_duration_ms / 1000.0)

    def items(self) -> Iterator[tuple[str, RunningStats]]:
        for tag in self.tags():
            yield tag, self.statistics[tag]

    def __len__(self) -> int:
        return len(self.statistics)

    def __contains__(self, tag: object) -> bool:
        return tag in self.statistics
