"""Output formats for per-window statistics.

Modules:
- base: StatisticsFormatter interface + fan_out
- text: plain text blocks
- csv_formatter: one CSV row per tag per window
- chart: chart-service URLs, one per statistic
"""

from .base import StatisticsFormatter, fan_out, format_timestamp
from .text import TextFormatter
from .csv_formatter import CsvFormatter
from .chart import ChartUrlFormatter, STATISTICS, parse_statistic_names

__all__ = [
    "StatisticsFormatter",
    "fan_out",
    "format_timestamp",
    "TextFormatter",
    "CsvFormatter",
    "ChartUrlFormatter",
    "STATISTICS",
    "parse_statistic_names",
]
