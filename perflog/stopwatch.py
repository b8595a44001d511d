"""StopWatch: produces timing records in the format RecordParser reads.

Typical usage in instrumented code:

    watch = StopWatch("db.query")
    try:
        run_query()
        logger.info(watch.stop("db.query.success"))
    except Exception:
        logger.error(watch.stop("db.query.fail"))
        raise

The clock is injectable so tests can use fixed instants instead of the wall
clock.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from .core.domain.timing_record import TimingRecord

Clock = Callable[[], int]


def system_clock() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class StopWatch:
    """Reusable start/stop timer for one tagged operation."""

    def __init__(
        self,
        tag: str = "",
        message: Optional[str] = None,
        clock: Clock = system_clock,
    ):
        self._clock = clock
        self.tag = tag
        self.message = message
        self.start_time = clock()
        self._elapsed: Optional[int] = None

    def start(self, tag: Optional[str] = None, message: Optional[str] = None) -> None:
        """Restart timing; tag and message are only replaced when given."""
        self.start_time = self._clock()
        self._elapsed = None
        if tag is not None:
            self.tag = tag
        if message is not None:
            self.message = message

    def stop(self, tag: Optional[str] = None, message: Optional[str] = None) -> str:
        """Freeze the elapsed time and return the log line for this timing."""
        self._elapsed = self._clock() - self.start_time
        if tag is not None:
            self.tag = tag
        if message is not None:
            self.message = message
        return str(self)

    def lap(self, tag: str, message: Optional[str] = None) -> str:
        """Stop under `tag`, then immediately start timing the next section."""
        line = self.stop(tag, message)
        self.start()
        return line

    @property
    def elapsed_time(self) -> int:
        """Elapsed ms; keeps running until stop() is called."""
        if self._elapsed is None:
            return self._clock() - self.start_time
        return self._elapsed

    @property
    def is_running(self) -> bool:
        return self._elapsed is None

    def to_record(self) -> TimingRecord:
        return TimingRecord(
            tag=self.tag,
            start_time=self.start_time,
            elapsed_time=self.elapsed_time,
            message=self.message,
        )

    def __str__(self) -> str:
        return self.to_record().to_log_line()

    def __repr__(self) -> str:
        return f"StopWatch(tag={self.tag!r} start={self.start_time} elapsed={self.elapsed_time})"
