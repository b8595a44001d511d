"""Plain text statistics report."""

from __future__ import annotations

from typing import IO

from ..core.domain.grouped_statistics import GroupedTimingStatistics
from .base import StatisticsFormatter, format_timestamp

TAG_WIDTH = 48


class TextFormatter(StatisticsFormatter):
    """One block per window, one line per tag sorted by name.

    Example:
        Performance Statistics   2024-01-31 08:00:00 - 2024-01-31 08:00:30
        Tag                                               Avg(ms)         Min ...
        db                                                  150.0         100 ...
    """

    def __init__(self, out: IO[str], tag_width: int = TAG_WIDTH):
        super().__init__(out)
        self.tag_width = tag_width

    @property
    def format_name(self) -> str:
        return "default"

    def write(self, window: GroupedTimingStatistics) -> None:
        self.out.write(format_window(window, self.tag_width))
        self.out.write("\n")


def format_window(window: GroupedTimingStatistics, tag_width: int = TAG_WIDTH) -> str:
    lines = []
    lines.append(
        f"Performance Statistics   {format_timestamp(window.window_start_time)}"
        f" - {format_timestamp(window.window_stop_time)}"
    )
    lines.append(
        f"{'Tag':<{tag_width}}{'Avg(ms)':>12}{'Min':>12}{'Max':>12}"
        f"{'Std Dev':>12}{'Count':>12}{'TPS':>12}"
    )

    for tag, stats in window.items():
        lines.append(
            f"{tag:<{tag_width}}{stats.mean:>12.1f}{stats.min:>12.0f}{stats.max:>12.0f}"
            f"{stats.std_dev:>12.1f}{stats.count:>12d}{window.tps(tag):>12.2f}"
        )

    return "\n".join(lines) + "\n"
