"""Parsing of StopWatch log lines."""

from .parser import RECORD_PATTERN, LineParser, RecordParser
from .validators import ParseResult, TimingRecordPayload, validate_timing_fields

__all__ = [
    "RECORD_PATTERN",
    "LineParser",
    "RecordParser",
    "ParseResult",
    "TimingRecordPayload",
    "validate_timing_fields",
]
