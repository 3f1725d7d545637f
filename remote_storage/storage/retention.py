"""
Retention policy helpers.

A file is expired once its last modification is older than
now minus retention_days.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


def validate_retention_days(retention_days: int) -> int:
    """
    Check a retention period.

    Raises:
        ValueError: If retention_days is negative or not an integer
    """
    if isinstance(retention_days, bool) or not isinstance(retention_days, int):
        raise ValueError(f"Retention days must be an integer, got {retention_days!r}")
    if retention_days < 0:
        raise ValueError(f"Retention days must not be negative, got {retention_days}")
    return retention_days


def cutoff_timestamp(retention_days: int, now: Optional[float] = None) -> float:
    """
    POSIX timestamp before which files are expired.

    Args:
        retention_days: Age threshold in days
        now: Reference time (defaults to the current time)
    """
    validate_retention_days(retention_days)
    if now is None:
        now = time.time()
    return now - retention_days * SECONDS_PER_DAY


def cutoff_datetime(retention_days: int, now: Optional[datetime] = None) -> datetime:
    """Timezone-aware (UTC) counterpart of cutoff_timestamp()."""
    validate_retention_days(retention_days)
    if now is None:
        now = datetime.now(timezone.utc)
    return now - timedelta(days=retention_days)


def is_expired(modified: float, cutoff: float) -> bool:
    """True if a file modified at `modified` is older than `cutoff`."""
    return modified < cutoff
