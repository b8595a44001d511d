"""Chart URL generation for time-sliced statistics.

Builds one line-XY chart request per statistic, in the query syntax of the
image-charts API (``cht=lxy``). Unlike the text and CSV formats this
formatter has to see the whole run before it can write anything, so it keeps
one point per (statistic, tag, window) in memory until `end()`.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import IO, Callable, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote_plus

from common.config import DEFAULT_CHART_BASE_URL

from ..core.domain.grouped_statistics import GroupedTimingStatistics
from .base import StatisticsFormatter, format_timestamp

logger = logging.getLogger(__name__)

StatisticGetter = Callable[[GroupedTimingStatistics, str], float]

STATISTICS: Dict[str, StatisticGetter] = {
    "Mean": lambda window, tag: window.statistics[tag].mean,
    "Min": lambda window, tag: float(window.statistics[tag].min),
    "Max": lambda window, tag: float(window.statistics[tag].max),
    "StdDev": lambda window, tag: window.statistics[tag].std_dev,
    "Count": lambda window, tag: float(window.statistics[tag].count),
    "TPS": lambda window, tag: window.tps(tag),
}

DEFAULT_STATISTICS = ("Mean", "TPS")

# Same limits as the chart service accepts comfortably in a GET request.
MAX_SERIES = 8
DEFAULT_MAX_DATA_POINTS = 20
DEFAULT_WIDTH = 750
DEFAULT_HEIGHT = 400

SERIES_COLORS = (
    "ff0000", "00ff00", "0000ff", "00ffff",
    "ff00ff", "ffff00", "000000", "d2691e",
)

Point = Tuple[int, float]


def parse_statistic_names(text: str) -> Tuple[str, ...]:
    """Parse a comma separated list such as ``"Mean,TPS"``.

    Raises:
        ValueError: If a name is not one of STATISTICS.
    """
    lookup = {name.lower(): name for name in STATISTICS}
    names = []
    for raw in text.split(","):
        raw = raw.strip()
        if not raw:
            continue
        name = lookup.get(raw.lower())
        if name is None:
            raise ValueError(
                f"Unknown statistic '{raw}', expected one of: {', '.join(STATISTICS)}"
            )
        if name not in names:
            names.append(name)
    if not names:
        raise ValueError("At least one statistic is required")
    return tuple(names)


def downsample(points: List[Point], max_points: int) -> List[Point]:
    """Keep at most `max_points` evenly spaced points, including both ends."""
    if max_points <= 0 or len(points) <= max_points:
        return list(points)
    if max_points == 1:
        return [points[-1]]
    last = len(points) - 1
    step = last / (max_points - 1)
    return [points[round(i * step)] for i in range(max_points)]


def _fmt(value: float) -> str:
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


def _time_label(epoch_ms: int) -> str:
    return format_timestamp(epoch_ms, "%H:%M:%S")


class ChartUrlFormatter(StatisticsFormatter):
    """Accumulates series across all windows and writes one URL per statistic."""

    def __init__(
        self,
        out: IO[str],
        statistics: Sequence[str] = DEFAULT_STATISTICS,
        base_url: str = DEFAULT_CHART_BASE_URL,
        max_data_points: int = DEFAULT_MAX_DATA_POINTS,
        max_series: int = MAX_SERIES,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ):
        super().__init__(out)
        unknown = [name for name in statistics if name not in STATISTICS]
        if unknown:
            raise ValueError(f"Unknown statistics: {', '.join(unknown)}")
        self.statistics = tuple(statistics)
        self.base_url = base_url if base_url.endswith(("?", "&")) else base_url + "?"
        self.max_data_points = max_data_points
        self.max_series = max_series
        self.width = width
        self.height = height
        # statistic -> tag -> [(window_start, value)]
        self._series: Dict[str, Dict[str, List[Point]]] = {
            name: defaultdict(list) for name in self.statistics
        }
        self._timeslice_ms: Optional[int] = None

    @property
    def format_name(self) -> str:
        return "chart"

    def write(self, window: GroupedTimingStatistics) -> None:
        self._timeslice_ms = window.window_duration_ms
        for tag in window.tags():
            for name in self.statistics:
                value = STATISTICS[name](window, tag)
                self._series[name][tag].append((window.window_start_time, value))

    def end(self) -> None:
        if not any(self._series[name] for name in self.statistics):
            logger.info("[CHART] No windows to chart")
        else:
            for name in self.statistics:
                self.out.write(self.build_url(name))
                self.out.write("\n")
        super().end()

    def build_url(self, statistic: str) -> str:
        series = self._select_series(self._series[statistic])
        if not series:
            return self.base_url + f"chtt={quote_plus(statistic)}"

        all_points = [point for points in series.values() for point in points]
        t0 = min(t for t, _ in all_points)
        t1 = max(t for t, _ in all_points)
        x_max = max((t1 - t0) / 1000.0, (self._timeslice_ms or 1000) / 1000.0)
        y_max = max(v for _, v in all_points)
        if y_max <= 0:
            y_max = 1.0

        data = []
        scales = []
        for points in series.values():
            data.append(",".join(_fmt((t - t0) / 1000.0) for t, _ in points))
            data.append(",".join(_fmt(v) for _, v in points))
            scales.append(f"0,{_fmt(x_max)},0,{_fmt(y_max)}")

        colors = [SERIES_COLORS[i % len(SERIES_COLORS)] for i in range(len(series))]
        params = [
            "cht=lxy",
            f"chtt={quote_plus(statistic)}",
            f"chs={self.width}x{self.height}",
            "chxt=x,x,y",
            f"chxr=2,0,{_fmt(y_max)}",
            f"chxl=0:|{_time_label(t0)}|{_time_label(t1)}|1:|Time",
            f"chd=t:{'|'.join(data)}",
            f"chds={','.join(scales)}",
            f"chco={','.join(colors)}",
            f"chdl={'|'.join(quote_plus(tag) for tag in series)}",
        ]
        return self.base_url + "&".join(params)

    def _select_series(self, by_tag: Dict[str, List[Point]]) -> Dict[str, List[Point]]:
        """Most populated tags first, capped at max_series, then ordered by name."""
        ranked = sorted(by_tag.items(), key=lambda item: (-len(item[1]), item[0]))
        chosen = sorted(ranked[: self.max_series])
        if len(ranked) > self.max_series:
            logger.info(
                "[CHART] %d tags available, charting the %d most populated",
                len(ranked), self.max_series,
            )
        return {tag: downsample(points, self.max_data_points) for tag, points in chosen}
