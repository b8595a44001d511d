"""Log parser run configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from common.config import DEFAULT_CHART_BASE_URL

OUTPUT_FORMATS = ("default", "csv")


class PerfLogError(Exception):
    """Base error for a failed log parser run."""


class ArgumentValidationError(PerfLogError):
    """Bad command line: unknown flag, missing value or invalid value."""

    UNKNOWN = "unknown"
    MISSING = "missing"
    INVALID = "invalid"

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(message)


@dataclass(frozen=True)
class ParserConfig:
    """Resolved configuration of one run. None means the standard stream."""
    input_path: Optional[str] = None
    output_path: Optional[str] = None
    graph_path: Optional[str] = None
    output_format: str = "default"
    timeslice_ms: int = 30000
    rollup: bool = False
    grace_ms: int = 0
    graph_statistics: Tuple[str, ...] = ("Mean", "TPS")
    chart_base_url: str = DEFAULT_CHART_BASE_URL
    chart_max_points: int = 20

    def validate(self) -> "ParserConfig":
        """Raise ArgumentValidationError for values the pipeline can't use."""
        if self.output_format not in OUTPUT_FORMATS:
            raise ArgumentValidationError(
                ArgumentValidationError.INVALID,
                f"Invalid format '{self.output_format}', expected one of: {', '.join(OUTPUT_FORMATS)}",
            )
        if self.timeslice_ms <= 0:
            raise ArgumentValidationError(
                ArgumentValidationError.INVALID,
                f"Invalid timeslice {self.timeslice_ms}: must be a positive number of milliseconds",
            )
        if self.grace_ms < 0:
            raise ArgumentValidationError(
                ArgumentValidationError.INVALID,
                f"Invalid grace period {self.grace_ms}: must not be negative",
            )
        if self.graph_path is not None and self.graph_path == self.output_path:
            raise ArgumentValidationError(
                ArgumentValidationError.INVALID,
                "Statistics output and graph output must be different files",
            )
        return self
