"""Record sources for files and streams."""

from .source import RecordSource, decode_leniently, open_log, read_records

__all__ = ["RecordSource", "decode_leniently", "open_log", "read_records"]
