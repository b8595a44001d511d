"""Time slicer: buckets timing records into epoch-aligned windows.

Input is assumed to be almost ordered by start time. A window stays open
until a record starts at or after its stop time (plus the optional grace
period), or until the input ends; it is then emitted as an immutable
GroupedTimingStatistics. Records belonging to an already emitted window are
late: they are dropped and counted, closed windows are never reopened.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from ..core.domain.grouped_statistics import GroupedTimingStatistics
from ..core.domain.timing_record import TimingRecord
from ..core.monitoring.stats import PipelineStats
from ..metrics.running_stats import RunningStats
from .rollup import TagHierarchy

logger = logging.getLogger(__name__)


class _WindowBuilder:
    """Accumulators for one open window. Owned by a single TimeSlicer."""

    __slots__ = ("index", "start_time", "stop_time", "stats")

    def __init__(self, index: int, timeslice_ms: int):
        self.index = index
        self.start_time = index * timeslice_ms
        self.stop_time = self.start_time + timeslice_ms
        self.stats: Dict[str, RunningStats] = {}

    def add(self, tags: Iterable[str], elapsed: float) -> None:
        for tag in tags:
            stats = self.stats.get(tag)
            if stats is None:
                stats = self.stats[tag] = RunningStats()
            stats.add(elapsed)

    def build(self, rollup: bool) -> GroupedTimingStatistics:
        return GroupedTimingStatistics(
            window_start_time=self.start_time,
            window_stop_time=self.stop_time,
            create_rollup_statistics=rollup,
            statistics=self.stats,
        )


class TimeSlicer:
    """Streaming aggregator from TimingRecord to per-window statistics.

    Usage:
        slicer = TimeSlicer(timeslice_ms=30000, create_rollup_statistics=True)
        for window in slicer.iter_windows(records):
            ...

    or push records one by one with `feed()` and call `flush()` at the end.
    """

    def __init__(
        self,
        timeslice_ms: int = 30000,
        create_rollup_statistics: bool = False,
        grace_ms: int = 0,
        stats: Optional[PipelineStats] = None,
    ):
        if timeslice_ms <= 0:
            raise ValueError(f"timeslice_ms must be positive, got {timeslice_ms}")
        if grace_ms < 0:
            raise ValueError(f"grace_ms must not be negative, got {grace_ms}")

        self.timeslice_ms = timeslice_ms
        self.create_rollup_statistics = create_rollup_statistics
        self.grace_ms = grace_ms
        self.stats = stats if stats is not None else PipelineStats()

        self._open: Dict[int, _WindowBuilder] = {}
        self._last_closed: Optional[int] = None
        self._hierarchy = TagHierarchy()

    @property
    def last_closed_index(self) -> Optional[int]:
        return self._last_closed

    @property
    def open_windows(self) -> int:
        return len(self._open)

    def window_index(self, start_time: int) -> int:
        # floor division keeps pre-epoch timestamps aligned too
        return start_time // self.timeslice_ms

    def feed(self, record: TimingRecord) -> List[GroupedTimingStatistics]:
        """Add one record; return the windows it closed, oldest first."""
        index = self.window_index(record.start_time)

        if self._last_closed is not None and index <= self._last_closed:
            self.stats.late += 1
            logger.debug(
                "[SLICER] Late record dropped tag=%s start=%d window=%d last_closed=%d",
                record.tag, record.start_time, index, self._last_closed,
            )
            return []

        closed = self._close_before(record.start_time - self.grace_ms)

        builder = self._open.get(index)
        if builder is None:
            builder = self._open[index] = _WindowBuilder(index, self.timeslice_ms)

        if self.create_rollup_statistics:
            builder.add(self._hierarchy.expand(record.tag), record.elapsed_time)
        else:
            builder.add((record.tag,), record.elapsed_time)

        return closed

    def flush(self) -> List[GroupedTimingStatistics]:
        """Close every open window (end of input)."""
        indexes = sorted(self._open)
        return [self._emit(index) for index in indexes]

    def iter_windows(self, records: Iterable[TimingRecord]) -> Iterator[GroupedTimingStatistics]:
        """Lazily yield closed windows for a record stream, then flush."""
        for record in records:
            yield from self.feed(record)
        yield from self.flush()

    def _close_before(self, cutoff: int) -> List[GroupedTimingStatistics]:
        """Emit every open window whose stop time is <= cutoff."""
        if not self._open:
            return []
        ready = sorted(
            index for index, builder in self._open.items()
            if builder.stop_time <= cutoff
        )
        return [self._emit(index) for index in ready]

    def _emit(self, index: int) -> GroupedTimingStatistics:
        builder = self._open.pop(index)
        self._last_closed = index if self._last_closed is None else max(self._last_closed, index)
        self.stats.windows_emitted += 1
        logger.debug(
            "[SLICER] Window closed start=%d tags=%d",
            builder.start_time, len(builder.stats),
        )
        return builder.build(self.create_rollup_statistics)
