"""CSV statistics report.

String fields are quoted, numeric fields are not, so reading the file back
with ``csv.QUOTE_NONNUMERIC`` yields the same numbers.
"""

from __future__ import annotations

import csv
from typing import IO

from ..core.domain.grouped_statistics import GroupedTimingStatistics
from .base import StatisticsFormatter, format_timestamp

CSV_HEADER = ("Tag", "Start", "Stop", "Count", "Mean", "Min", "Max", "StdDev", "TPS")


class CsvFormatter(StatisticsFormatter):
    """One row per (window, tag); header written once before the first window."""

    def __init__(self, out: IO[str], include_header: bool = True):
        super().__init__(out)
        self.include_header = include_header
        self._writer = csv.writer(out, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")

    @property
    def format_name(self) -> str:
        return "csv"

    def begin(self) -> None:
        if self.include_header:
            self._writer.writerow(CSV_HEADER)

    def write(self, window: GroupedTimingStatistics) -> None:
        start = format_timestamp(window.window_start_time)
        stop = format_timestamp(window.window_stop_time)
        for tag, stats in window.items():
            self._writer.writerow(
                (
                    tag,
                    start,
                    stop,
                    stats.count,
                    stats.mean,
                    stats.min,
                    stats.max,
                    stats.std_dev,
                    window.tps(tag),
                )
            )
