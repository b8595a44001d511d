"""Log parser package - command line front end for perflog.

Modules:
- config: ParserConfig dataclass + argument errors
- runner: Orchestrator (run_once, run_pipeline)
- cli: CLI entry point (main, run_main)
"""

from .config import ParserConfig, PerfLogError, ArgumentValidationError
from .runner import run_once, run_pipeline
from .cli import main, run_main

__all__ = [
    "ParserConfig",
    "PerfLogError",
    "ArgumentValidationError",
    "run_once",
    "run_pipeline",
    "main",
    "run_main",
]
