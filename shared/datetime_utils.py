"""
Date/time helpers: framework-agnostic.

Services take a ``clock`` callable returning an aware UTC datetime so tests
can move time forward without sleeping.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_epoch(value: datetime) -> int:
    """Whole Unix seconds for *value*; naive datetimes are assumed to be UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())
