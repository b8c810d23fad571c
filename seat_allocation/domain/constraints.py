"""Domain-level validation rules for seat allocation and runtime settings."""

from __future__ import annotations

import logging
from typing import Optional

from seat_allocation.domain.models import ErrorKind
from seat_allocation.utils.config import Settings


def seat_count_error(count: int) -> Optional[ErrorKind]:
    if count <= 0:
        return ErrorKind.INVALID_CAPACITY
    return None


def release_range_error(range_start: int, range_end: int) -> Optional[ErrorKind]:
    if range_start > range_end:
        return ErrorKind.INVALID_RANGE
    return None


def validate_settings(settings: Settings) -> None:
    if not isinstance(logging.getLevelName(settings.log_level.upper()), int):
        raise ValueError(f"log_level {settings.log_level!r} is not a logging level")
    if not settings.output_suffix:
        raise ValueError("output_suffix must be non-empty")
    if not settings.input_encoding:
        raise ValueError("input_encoding must be non-empty")
