"""Log parser orchestrator: source → slicer → formatters → sinks."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import IO, List, Optional

from perflog.aggregation.slicer import TimeSlicer
from perflog.core.monitoring.stats import PipelineStats
from perflog.formatters.base import StatisticsFormatter, fan_out
from perflog.formatters.chart import ChartUrlFormatter
from perflog.formatters.csv_formatter import CsvFormatter
from perflog.formatters.text import TextFormatter
from perflog.transports.source import decode_leniently, open_log, read_records

from .config import ParserConfig

logger = logging.getLogger(__name__)


def build_formatters(
    cfg: ParserConfig,
    out: IO[str],
    graph_out: Optional[IO[str]] = None,
) -> List[StatisticsFormatter]:
    """Primary statistics formatter, plus the chart formatter when requested."""
    formatters: List[StatisticsFormatter] = []
    if cfg.output_format == "csv":
        formatters.append(CsvFormatter(out))
    else:
        formatters.append(TextFormatter(out))

    if graph_out is not None:
        formatters.append(
            ChartUrlFormatter(
                graph_out,
                statistics=cfg.graph_statistics,
                base_url=cfg.chart_base_url,
                max_data_points=cfg.chart_max_points,
            )
        )
    return formatters


def run_pipeline(
    cfg: ParserConfig,
    source: IO[str],
    out: IO[str],
    graph_out: Optional[IO[str]] = None,
) -> PipelineStats:
    """Drive one run over already-open streams."""
    stats = PipelineStats()
    records = read_records(source, stats=stats)
    slicer = TimeSlicer(
        timeslice_ms=cfg.timeslice_ms,
        create_rollup_statistics=cfg.rollup,
        grace_ms=cfg.grace_ms,
        stats=stats,
    )
    formatters = build_formatters(cfg, out, graph_out)

    fan_out(slicer.iter_windows(records), formatters)

    logger.info("[RUNNER] Run completed: %s", stats)
    if stats.malformed:
        logger.warning("[RUNNER] Skipped %d malformed line(s)", stats.malformed)
    if stats.late:
        logger.warning(
            "[RUNNER] Dropped %d late record(s) for already closed windows", stats.late
        )
    return stats


def run_once(
    cfg: ParserConfig,
    stdin: IO[str],
    stdout: IO[str],
) -> PipelineStats:
    """Open the configured files, run the pipeline and close everything.

    Raises:
        OSError: If an input or output file can't be opened or written.
    """
    with ExitStack() as stack:
        if cfg.input_path is None:
            source = decode_leniently(stdin)
        else:
            source = stack.enter_context(open_log(cfg.input_path))

        if cfg.output_path is None:
            out = stdout
        else:
            out = stack.enter_context(open(cfg.output_path, "w", encoding="utf-8", newline=""))

        graph_out = None
        if cfg.graph_path is not None:
            graph_out = stack.enter_context(open(cfg.graph_path, "w", encoding="utf-8"))

        logger.info(
            "[RUNNER] Config: input=%s output=%s format=%s timeslice=%dms rollup=%s",
            cfg.input_path or "<stdin>",
            cfg.output_path or "<stdout>",
            cfg.output_format,
            cfg.timeslice_ms,
            cfg.rollup,
        )
        return run_pipeline(cfg, source, out, graph_out)
