"""Shared utility functions."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return current calendar date in UTC."""
    return utc_now().date()


def ensure_utc(dt: datetime) -> datetime:
    """Normalize datetime to UTC timezone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))
