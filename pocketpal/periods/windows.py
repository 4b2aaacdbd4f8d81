"""
Calendar Window Calculator

Pure functions that turn a reference instant into reporting windows
and map timestamps to chart buckets.

All boundaries come from the WALL-CLOCK LOCAL DATE, never UTC:
"today" starts at local midnight, weeks start on Monday at local
midnight, months at local midnight of the 1st.

Every function takes an optional ``tz``. None means the local time of
the running process; passing a tzinfo pins the calculation (tests,
or a user-configured timezone).

Windows are half-open ``[start, end)`` in epoch milliseconds. Ends are
computed as "start of the last day + 24h", so on a DST-change day a
window can be an hour off from the next calendar midnight.
"""

import time as _time
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from pocketpal.models.ledger import MS_PER_DAY, Window


HOUR_LABELS = tuple(f"{hour}:00" for hour in range(24))
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def now_ms() -> int:
    """Current instant in epoch milliseconds."""
    return int(_time.time() * 1000)


def to_local(timestamp: int, tz: Optional[tzinfo] = None) -> datetime:
    """Epoch milliseconds -> local datetime."""
    return datetime.fromtimestamp(timestamp / 1000, tz)


def local_midnight(day: date, tz: Optional[tzinfo] = None) -> int:
    """Epoch milliseconds of 00:00:00.000 local time on ``day``."""
    return round(datetime.combine(day, time.min, tzinfo=tz).timestamp() * 1000)


def days_since_monday(timestamp: int, tz: Optional[tzinfo] = None) -> int:
    """Monday=0 .. Sunday=6."""
    return to_local(timestamp, tz).weekday()


def days_in_month(timestamp: int, tz: Optional[tzinfo] = None) -> int:
    """Length of the month containing ``timestamp`` (28-31)."""
    return _last_day_of_month(to_local(timestamp, tz).date()).day


def _last_day_of_month(day: date) -> date:
    # Day 0 of the next month
    if day.month == 12:
        first_of_next = date(day.year + 1, 1, 1)
    else:
        first_of_next = date(day.year, day.month + 1, 1)
    return first_of_next - timedelta(days=1)


# =============================================================================
# WINDOWS
# =============================================================================

def day_window(now: int, tz: Optional[tzinfo] = None) -> Window:
    """Today: local midnight to local midnight + 24h."""
    start = local_midnight(to_local(now, tz).date(), tz)
    return Window(start=start, end=start + MS_PER_DAY)


def week_window(now: int, tz: Optional[tzinfo] = None) -> Window:
    """This week, Monday 00:00 local time plus 7 x 24h."""
    today = to_local(now, tz).date()
    monday = today - timedelta(days=today.weekday())
    start = local_midnight(monday, tz)
    return Window(start=start, end=start + 7 * MS_PER_DAY)


def month_window(now: int, tz: Optional[tzinfo] = None) -> Window:
    """
    This month: midnight of the 1st to midnight of the last day + 24h.

    The extra day makes the window include the whole of the last day.
    """
    today = to_local(now, tz).date()
    start = local_midnight(today.replace(day=1), tz)
    end = local_midnight(_last_day_of_month(today), tz) + MS_PER_DAY
    return Window(start=start, end=end)


# =============================================================================
# BUCKETS
# =============================================================================

def bucket_of_day(timestamp: int, tz: Optional[tzinfo] = None) -> int:
    """Local hour, 0..23."""
    return to_local(timestamp, tz).hour


def bucket_of_week(timestamp: int, tz: Optional[tzinfo] = None) -> int:
    """Local weekday, Monday=0 .. Sunday=6."""
    return days_since_monday(timestamp, tz)


def bucket_of_month(timestamp: int, tz: Optional[tzinfo] = None) -> int:
    """Local day of month, 1..days_in_month."""
    return to_local(timestamp, tz).day


def month_day_labels(now: int, tz: Optional[tzinfo] = None) -> tuple[str, ...]:
    return tuple(str(day) for day in range(1, days_in_month(now, tz) + 1))
