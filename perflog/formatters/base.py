"""StatisticsFormatter - Interface base para todos los formateadores.

Define el contrato común que implementan el formato de texto, CSV y el
generador de URLs de gráficos.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import IO, Iterable, Optional, Sequence

from ..core.domain.grouped_statistics import GroupedTimingStatistics

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_utc_datetime(epoch_ms: int) -> Optional[datetime]:
    """Epoch millis as an aware UTC datetime, None outside years 1..9999."""
    try:
        return _EPOCH + timedelta(milliseconds=epoch_ms)
    except OverflowError:
        return None


def format_timestamp(epoch_ms: int, fmt: str = TIMESTAMP_FORMAT) -> str:
    """Epoch millis rendered in UTC so output does not depend on the host.

    Instants a calendar date can't represent are written as the raw millis.
    """
    moment = to_utc_datetime(epoch_ms)
    if moment is None:
        return str(epoch_ms)
    return moment.strftime(fmt)


class StatisticsFormatter(ABC):
    """Interface común para todos los formateadores.

    Output is written incrementally to `out`: `begin()` once, `write()` for
    each closed window as soon as the slicer emits it, `end()` once.
    """

    def __init__(self, out: IO[str]):
        self.out = out
        self.windows_written = 0

    def begin(self) -> None:
        """Hook before the first window."""

    @abstractmethod
    def write(self, window: GroupedTimingStatistics) -> None:
        """Renders one closed window."""

    def end(self) -> None:
        """Hook after the last window."""
        self.out.flush()

    def render(self, windows: Iterable[GroupedTimingStatistics]) -> int:
        """Format a whole window sequence; returns the number of windows."""
        return fan_out(windows, [self])

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Nombre del formato: default, csv, chart."""


def fan_out(
    windows: Iterable[GroupedTimingStatistics],
    formatters: Sequence[StatisticsFormatter],
) -> int:
    """Push every window to all formatters as it is produced.

    The window sequence is single-pass, so it is consumed exactly once here.
    """
    for formatter in formatters:
        formatter.begin()

    count = 0
    for window in windows:
        count += 1
        for formatter in formatters:
            formatter.write(window)
            formatter.windows_written += 1

    for formatter in formatters:
        formatter.end()
    return count
