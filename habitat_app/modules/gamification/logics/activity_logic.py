"""
Activity Logic - how long a learner has been away.

NO database, NO Flask, NO model dependencies allowed.
"""
import math
from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_since_activity(last_activity_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    """Whole days since the last activity, rounded up. 0 when never active."""
    if last_activity_at is None:
        return 0
    now = _as_utc(now or datetime.now(timezone.utc))
    elapsed = abs((now - _as_utc(last_activity_at)).total_seconds())
    return math.ceil(elapsed / SECONDS_PER_DAY)


def is_at_risk(
    last_activity_at: Optional[datetime],
    now: Optional[datetime] = None,
    after_days: int = 7,
) -> bool:
    """True once a learner has gone ``after_days`` days without completing a unit."""
    return days_since_activity(last_activity_at, now) >= after_days
