"""Estadísticas de procesamiento del pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PipelineStats:
    """Counters for recoverable problems seen during a run.

    Shared by the record source (malformed lines) and the slicer (late
    records) so the orchestrator can report them in one place.
    """

    lines_read: int = 0
    records_parsed: int = 0
    malformed: int = 0
    late: int = 0
    windows_emitted: int = 0

    def __str__(self) -> str:
        return (
            f"Stats: lines={self.lines_read} parsed={self.records_parsed} "
            f"malformed={self.malformed} late={self.late} windows={self.windows_emitted}"
        )

    def to_dict(self) -> dict:
        """Convierte a diccionario."""
        return {
            "lines_read": self.lines_read,
            "records_parsed": self.records_parsed,
            "malformed": self.malformed,
            "late": self.late,
            "windows_emitted": self.windows_emitted,
        }

    @property
    def has_dropped_records(self) -> bool:
        return self.malformed > 0 or self.late > 0
