"""perflog - time-sliced statistics from StopWatch timing logs.

Pipeline: log lines → RecordSource → TimeSlicer → formatters
"""

from .core.domain.timing_record import TimingRecord
from .core.domain.grouped_statistics import GroupedTimingStatistics
from .core.monitoring.stats import PipelineStats
from .metrics.running_stats import RunningStats
from .parsing.parser import RecordParser
from .transports.source import RecordSource
from .aggregation.slicer import TimeSlicer
from .stopwatch import StopWatch

__all__ = [
    "TimingRecord",
    "GroupedTimingStatistics",
    "PipelineStats",
    "RunningStats",
    "RecordParser",
    "RecordSource",
    "TimeSlicer",
    "StopWatch",
]
