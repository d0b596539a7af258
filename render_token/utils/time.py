"""UTC time helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], int]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def epoch_millis() -> int:
    """Return current Unix epoch time in integer milliseconds."""
    return int(utc_now().timestamp() * 1000)
