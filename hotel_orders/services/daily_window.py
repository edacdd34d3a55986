"""
Daily Window Calculator

"Today" is always the civil day in the reference timezone
(Asia/Kolkata by default), never the host's local day.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from hotel_orders.core.config import get_settings


@dataclass(frozen=True)
class DayWindow:
    """Half-open interval [start, end) covering one reference-timezone day."""
    start: datetime
    end: datetime

    def __contains__(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@lru_cache()
def reference_timezone() -> tzinfo:
    """Configured reference zone."""
    return ZoneInfo(get_settings().reference_timezone)


def reference_now(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
    """
    Express an instant in the reference timezone.

    Args:
        now: Instant to convert (current time if omitted, naive = UTC)
        tz: Override for the reference zone
    """
    tz = tz or reference_timezone()
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz)


def current_day_window(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> DayWindow:
    """
    Boundaries of the reference day containing `now`.

    Example:
        >>> window = current_day_window(datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc))
        >>> window.start.isoformat()
        '2024-03-02T00:00:00+05:30'
    """
    local = reference_now(now, tz)
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return DayWindow(start=start, end=start + timedelta(days=1))


def is_within_reset_window(
    now: Optional[datetime] = None,
    minutes: int = 5,
    tz: Optional[tzinfo] = None,
) -> bool:
    """True between 00:00 and 00:`minutes` (inclusive) reference time."""
    local = reference_now(now, tz)
    return local.hour == 0 and local.minute <= minutes
