from __future__ import annotations

"""Clock helpers that reduce every notion of "now" to epoch seconds."""

import math
import time
from datetime import datetime, timezone
from typing import Any

SECONDS_PER_DAY = 24 * 60 * 60


def now_seconds() -> int:
    """Current wall-clock time in whole seconds since the epoch."""
    return int(time.time())


def coerce_epoch(value: Any) -> int:
    """Convert ``value`` into epoch seconds.

    Accepts ints, floats, numeric strings and datetimes (naive ones are read as
    UTC). ``None`` and anything unparsable fall back to the current time.
    """
    if value is None:
        return now_seconds()
    if isinstance(value, datetime):
        moment = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
        return int(moment.timestamp())
    if isinstance(value, bool):
        return now_seconds()
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return now_seconds()
        return int(value)
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return now_seconds()


def days_until(deadline: int, now: int) -> int:
    """Whole days left until ``deadline``, rounded up and never negative."""
    remaining = max(0, int(deadline) - int(now))
    return -(-remaining // SECONDS_PER_DAY)


def deadline_from_days(days: int, now: Any = None) -> int:
    """Epoch deadline ``days`` whole days after ``now``."""
    return coerce_epoch(now) + int(days) * SECONDS_PER_DAY


__all__ = ["SECONDS_PER_DAY", "coerce_epoch", "days_until", "deadline_from_days", "now_seconds"]
