"""Domain model for a single timing record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TimingRecord:
    """One "operation X took Y ms" entry.

    This is the unit that flows through the whole pipeline:
    log line → parser → slicer → per-window statistics
    """
    tag: str
    start_time: int
    elapsed_time: int
    message: Optional[str] = None

    @property
    def stop_time(self) -> int:
        return self.start_time + self.elapsed_time

    def to_log_line(self) -> str:
        """Renders the record in the line format read by RecordParser."""
        line = f"start[{self.start_time}] time[{self.elapsed_time}] tag[{self.tag}]"
        if self.message is None:
            return line
        return f"{line} message[{self.message}]"
