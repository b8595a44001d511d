"""Modelos de dominio."""

from .timing_record import TimingRecord
from .grouped_statistics import GroupedTimingStatistics

__all__ = ["TimingRecord", "GroupedTimingStatistics"]
