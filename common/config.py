from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_CHART_BASE_URL = "http://chart.apis.google.com/chart?"


def _default_env_file() -> str:
    # A .env next to the working directory is picked up unless overridden.
    return str(Path.cwd() / ".env")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    timeslice_ms: int
    output_format: str
    rollup: bool
    grace_ms: int

    chart_base_url: str
    chart_max_points: int

    log_level: str


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("PERFLOG_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    timeslice_ms = int(os.getenv("PERFLOG_TIMESLICE_MS", "30000"))
    output_format = os.getenv("PERFLOG_FORMAT", "default")
    rollup = _env_bool("PERFLOG_ROLLUP", "false")
    grace_ms = int(os.getenv("PERFLOG_GRACE_MS", "0"))

    # Any service that understands the image-charts query syntax works here.
    chart_base_url = os.getenv("PERFLOG_CHART_BASE_URL", DEFAULT_CHART_BASE_URL)
    chart_max_points = int(os.getenv("PERFLOG_CHART_MAX_POINTS", "20"))

    log_level = os.getenv("PERFLOG_LOG_LEVEL", "WARNING").upper()

    return Settings(
        timeslice_ms=timeslice_ms,
        output_format=output_format,
        rollup=rollup,
        grace_ms=grace_ms,
        chart_base_url=chart_base_url,
        chart_max_points=chart_max_points,
        log_level=log_level,
    )
