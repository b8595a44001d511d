"""Fixtures compartidos para los tests de perflog."""

from typing import List

import pytest

from common.config import DEFAULT_CHART_BASE_URL, Settings
from perflog.aggregation.slicer import TimeSlicer
from perflog.core.domain.grouped_statistics import GroupedTimingStatistics
from perflog.core.domain.timing_record import TimingRecord

# Aligned to a 30s (and 60s/120s) window boundary.
BASE_TS = 1_700_000_040_000


def make_records(*rows) -> List[TimingRecord]:
    """rows: (tag, start_offset_ms, elapsed_ms) relative to BASE_TS."""
    return [
        TimingRecord(tag=tag, start_time=BASE_TS + offset, elapsed_time=elapsed)
        for tag, offset, elapsed in rows
    ]


def collect_windows(records, timeslice_ms=30000, rollup=False, grace_ms=0) -> List[GroupedTimingStatistics]:
    slicer = TimeSlicer(timeslice_ms=timeslice_ms, create_rollup_statistics=rollup, grace_ms=grace_ms)
    return list(slicer.iter_windows(records))


@pytest.fixture
def settings() -> Settings:
    """Settings con valores por defecto, sin leer el entorno."""
    return Settings(
        timeslice_ms=30000,
        output_format="default",
        rollup=False,
        grace_ms=0,
        chart_base_url=DEFAULT_CHART_BASE_URL,
        chart_max_points=20,
        log_level="WARNING",
    )


@pytest.fixture
def test_log() -> str:
    """Log de ejemplo: tres tags en tres ventanas de 30s, más ruido."""
    lines = [
        "2023-11-14 22:14:00,000 INFO TimingLogger - Application started",
        f"2023-11-14 22:14:00,010 INFO TimingLogger - start[{BASE_TS}] time[100] tag[tag]",
        f"2023-11-14 22:14:00,020 INFO TimingLogger - start[{BASE_TS + 10}] time[200] tag[tag2] message[first]",
        f"2023-11-14 22:14:01,000 INFO TimingLogger - start[{BASE_TS + 1000}] time[300] tag[tag3]",
        "",
        f"2023-11-14 22:14:31,000 INFO TimingLogger - start[{BASE_TS + 31000}] time[150] tag[tag]",
        f"2023-11-14 22:14:32,000 INFO TimingLogger - start[{BASE_TS + 32000}] time[250] tag[tag2]",
        "start[not-a-number] time[10] tag[broken]",
        f"2023-11-14 22:15:05,000 INFO TimingLogger - start[{BASE_TS + 65000}] time[50] tag[tag3]",
    ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def windows() -> List[GroupedTimingStatistics]:
    records = make_records(
        ("db.query", 0, 100),
        ("db.query", 10, 200),
        ("db.update", 20, 50),
        ("tag", 30, 10),
        ("db.query", 30_000, 40),
        ("tag", 31_000, 20),
    )
    return collect_windows(records, rollup=True)
