"""Validadores de campos de registros de tiempo.

Validates the raw string fields pulled out of a log line and converts them
into a TimingRecord.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, Field, validator

from ..core.domain.timing_record import TimingRecord

logger = logging.getLogger(__name__)

# Epoch milliseconds must fit a signed 64-bit value, like the producer's clock.
_MAX_MILLIS = 2**63 - 1


class TimingRecordPayload(BaseModel):
    """Schema de validación para un registro de tiempo.

    Formato esperado (fields as captured from the line):
    {
        "start": "1706688000123",
        "time": "150",
        "tag": "db.query.select",
        "message": "rows=12"
    }
    """

    start_time: int = Field(..., alias="start", ge=-_MAX_MILLIS, le=_MAX_MILLIS)
    elapsed_time: int = Field(..., alias="time", ge=0, le=_MAX_MILLIS)
    tag: str
    message: Optional[str] = None

    class Config:
        populate_by_name = True
        frozen = True

    @validator("start_time", "elapsed_time", pre=True)
    def validate_integer_text(cls, v):
        if isinstance(v, str):
            text = v.strip()
            if not text.lstrip("-").isdigit():
                raise ValueError(f"not an integer: {v!r}")
            return int(text)
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError(f"not an integer: {v!r}")
        return v

    @validator("tag")
    def validate_tag(cls, v):
        if not v or not v.strip():
            raise ValueError("tag is required")
        return v

    def to_record(self) -> TimingRecord:
        return TimingRecord(
            tag=self.tag,
            start_time=self.start_time,
            elapsed_time=self.elapsed_time,
            message=self.message,
        )


@dataclass
class ParseResult:
    """Resultado de parseo de una línea."""

    valid: bool
    record: Optional[TimingRecord] = None
    error: Optional[str] = None


def validate_timing_fields(data: dict[str, Any]) -> ParseResult:
    """Valida los campos extraídos de una línea.

    Args:
        data: Diccionario con start/time/tag/message como texto

    Returns:
        ParseResult con el registro validado o el error
    """
    try:
        payload = TimingRecordPayload(**data)
        return ParseResult(valid=True, record=payload.to_record())
    except ValueError as e:
        # pydantic.ValidationError is a ValueError subclass.
        logger.debug("[VALIDATOR] Validation failed: %s", e)
        return ParseResult(valid=False, error=str(e))
