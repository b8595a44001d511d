"""Record source over log files and streams.

Reads lines on demand so the log never has to fit in memory.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional, Union

from ..core.domain.timing_record import TimingRecord
from ..core.monitoring.stats import PipelineStats
from ..parsing.parser import LineParser, RecordParser

logger = logging.getLogger(__name__)


class RecordSource:
    """Lazy, forward-only sequence of TimingRecord.

    Wraps any iterable of lines (an open file, stdin, a list in tests).
    Unparseable lines are counted in `stats.malformed` and skipped.
    Iterating a second time continues where the first pass stopped; the
    source is not restartable.
    """

    def __init__(
        self,
        lines: Iterable[str],
        parser: Optional[LineParser] = None,
        stats: Optional[PipelineStats] = None,
        name: str = "<stream>",
    ):
        self._lines = iter(lines)
        self._parser = parser or RecordParser()
        self.stats = stats if stats is not None else PipelineStats()
        self.name = name

    def __iter__(self) -> Iterator[TimingRecord]:
        return self._records()

    def _records(self) -> Iterator[TimingRecord]:
        for line in self._lines:
            self.stats.lines_read += 1
            record = self._parser.parse(line)
            if record is None:
                if line.strip():
                    self.stats.malformed += 1
                    logger.debug(
                        "[SOURCE] %s line %d is not a timing record",
                        self.name, self.stats.lines_read,
                    )
                continue
            self.stats.records_parsed += 1
            yield record


def open_log(path: Union[str, Path], encoding: str = "utf-8") -> IO[str]:
    """Open a log file for reading; undecodable bytes become U+FFFD."""
    logger.info("[SOURCE] Reading log file: %s", path)
    return open(path, "r", encoding=encoding, errors="replace")


def decode_leniently(stream: IO[str]) -> IO[str]:
    """Make an already-open text stream replace undecodable bytes like open_log.

    Applies to io.TextIOWrapper (sys.stdin); other streams are returned as is.
    """
    if isinstance(stream, io.TextIOWrapper) and stream.errors == "strict":
        stream.reconfigure(errors="replace")
        logger.debug(
            "[SOURCE] Undecodable bytes in %s will be replaced",
            getattr(stream, "name", "<stream>"),
        )
    return stream


def read_records(
    stream: IO[str],
    parser: Optional[LineParser] = None,
    stats: Optional[PipelineStats] = None,
) -> RecordSource:
    """Build a RecordSource over an already-open text stream."""
    name = getattr(stream, "name", "<stream>")
    return RecordSource(stream, parser=parser, stats=stats, name=str(name))
