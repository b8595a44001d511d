"""CLI entry point for the log parser."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from typing import IO, List, Optional, Sequence

from common.config import Settings, get_settings
from perflog.formatters.chart import parse_statistic_names

from .config import OUTPUT_FORMATS, ArgumentValidationError, ParserConfig
from .runner import run_once

logger = logging.getLogger(__name__)

PROG = "perflog-parse"

DESCRIPTION = """\
Parses StopWatch timing logs and prints time-sliced statistics per tag.

Arguments:
  logInputFile  The log file to parse. If not specified, the log is read
                from standard input."""

_MISSING_VALUE = re.compile(r"argument (?P<flag>[^\s:/]+)[^:]*: expected one argument")
_BUNDLED_UNKNOWN = re.compile(
    r"argument (?P<flag>[^\s:/]+)[^:]*: ignored explicit argument '(?P<value>.*)'"
)
_HELP_FLAGS = ("-h", "--help")


class _HelpFormatter(argparse.RawDescriptionHelpFormatter):
    def add_usage(self, usage, actions, groups, prefix=None):
        if prefix is None:
            prefix = "Usage: "
        return super().add_usage(usage, actions, groups, prefix)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting the process."""

    def error(self, message):
        match = _MISSING_VALUE.search(message)
        if match:
            raise ArgumentValidationError(
                ArgumentValidationError.MISSING,
                f"Missing value for parameter {match.group('flag')}",
            )
        match = _BUNDLED_UNKNOWN.search(message)
        if match:
            raise ArgumentValidationError(
                ArgumentValidationError.UNKNOWN,
                f"Unknown argument: '{match.group('value')}' given with {match.group('flag')}",
            )
        raise ArgumentValidationError(ArgumentValidationError.INVALID, f"Invalid argument: {message}")


def build_arg_parser(settings: Settings) -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog=PROG,
        description=DESCRIPTION,
        formatter_class=_HelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    p.add_argument("input_path", nargs="?", metavar="logInputFile")
    p.add_argument("-h", "--help", action="store_true", help="print this usage message and exit")
    p.add_argument(
        "-o", "--out", "--output", dest="output_path", metavar="outputFile",
        help="file where statistics are written (default: standard output)",
    )
    p.add_argument(
        "-g", "--graph", dest="graph_path", metavar="graphingOutputFile",
        help="file where chart URLs for the Mean and TPS series are written",
    )
    p.add_argument(
        "-t", "--timeslice", dest="timeslice_ms", type=int, default=settings.timeslice_ms,
        metavar="timeslice",
        help=f"length of each time window in milliseconds (default: {settings.timeslice_ms})",
    )
    p.add_argument(
        "-f", "--format", dest="output_format", choices=OUTPUT_FORMATS,
        default=settings.output_format,
        help=f"statistics output format (default: {settings.output_format})",
    )
    p.add_argument(
        "-r", "--rollup", action="store_true", default=settings.rollup,
        help="also aggregate each dotted tag into its parent tags",
    )
    p.add_argument(
        "--graph-stats", dest="graph_statistics", default="Mean,TPS", metavar="Mean,TPS",
        help="comma separated statistics to chart: Mean, Min, Max, StdDev, Count, TPS",
    )
    p.add_argument(
        "--grace", dest="grace_ms", type=int, default=settings.grace_ms, metavar="ms",
        help="keep each window open this many ms past its end for out-of-order records",
    )
    return p


def parse_args(argv: Sequence[str], settings: Settings) -> ParserConfig:
    """Turn argv into a validated ParserConfig.

    Raises:
        ArgumentValidationError: unknown flag, missing or invalid value.
    """
    parser = build_arg_parser(settings)
    args, unknown = parser.parse_known_args(list(argv))
    if unknown:
        raise ArgumentValidationError(
            ArgumentValidationError.UNKNOWN,
            f"Unknown argument: {' '.join(unknown)}",
        )

    try:
        graph_statistics = parse_statistic_names(args.graph_statistics)
    except ValueError as e:
        raise ArgumentValidationError(ArgumentValidationError.INVALID, str(e)) from e

    cfg = ParserConfig(
        input_path=args.input_path,
        output_path=args.output_path,
        graph_path=args.graph_path,
        output_format=args.output_format,
        timeslice_ms=args.timeslice_ms,
        rollup=bool(args.rollup),
        grace_ms=args.grace_ms,
        graph_statistics=graph_statistics,
        chart_base_url=settings.chart_base_url,
        chart_max_points=settings.chart_max_points,
    )
    return cfg.validate()


def run_main(
    argv: Sequence[str],
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
    stderr: Optional[IO[str]] = None,
    settings: Optional[Settings] = None,
) -> int:
    """Run the log parser; returns the process exit code."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr
    settings = settings if settings is not None else get_settings()
    argv = list(argv)

    if any(flag in argv for flag in _HELP_FLAGS):
        stdout.write(build_arg_parser(settings).format_help())
        return 0

    try:
        cfg = parse_args(argv, settings)
    except ArgumentValidationError as e:
        stderr.write(f"{e}\n")
        stderr.write(build_arg_parser(settings).format_usage())
        return 1

    try:
        run_once(cfg, stdin=stdin, stdout=stdout)
    except UnicodeError as e:
        logger.error("[RUNNER] Input is not valid text: %s", e)
        stderr.write(f"Invalid input encoding: {e}\n")
        return 1
    except OSError as e:
        logger.error("[RUNNER] I/O error: %s", e)
        stderr.write(f"I/O error: {e}\n")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    sys.exit(run_main(sys.argv[1:] if argv is None else argv, settings=settings))


if __name__ == "__main__":
    main()
