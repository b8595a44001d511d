"""Parser de líneas de log a TimingRecord.

The line grammar is the one produced by StopWatch:

    start[<millis>] time[<millis>] tag[<tag>] message[<text>]

where ``message[...]`` is optional. The pattern may appear anywhere in the
line so prefixes added by the logging framework are ignored.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Protocol

from ..core.domain.timing_record import TimingRecord
from .validators import ParseResult, validate_timing_fields

logger = logging.getLogger(__name__)

RECORD_PATTERN = re.compile(
    r"start\[(?P<start>-?\d+)\] time\[(?P<time>-?\d+)\] tag\[(?P<tag>.*?)\]"
    r"(?: message\[(?P<message>.*)\])?"
)


class LineParser(Protocol):
    """Contract for anything that turns one line into zero-or-one record."""

    def parse(self, line: str) -> Optional[TimingRecord]:
        ...


class RecordParser:
    """Parses StopWatch log lines.

    `parse` returns None for anything it cannot turn into a record; it never
    raises for bad input.
    """

    def __init__(self, pattern: re.Pattern = RECORD_PATTERN):
        self._pattern = pattern

    def validate(self, line: str) -> ParseResult:
        """Parse one line and describe why it was rejected, if it was."""
        if line is None or not line.strip():
            return ParseResult(valid=False, error="blank line")

        match = self._pattern.search(line)
        if match is None:
            return ParseResult(valid=False, error="no timing record in line")

        return validate_timing_fields(
            {
                "start": match.group("start"),
                "time": match.group("time"),
                "tag": match.group("tag"),
                "message": match.group("message"),
            }
        )

    def parse(self, line: str) -> Optional[TimingRecord]:
        result = self.validate(line)
        if not result.valid:
            logger.debug("[PARSER] Skipping line: %s", result.error)
            return None
        return result.record
