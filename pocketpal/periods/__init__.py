"""Reporting periods: day/week/month windows and chart buckets."""

from pocketpal.periods.windows import (
    HOUR_LABELS,
    WEEKDAY_LABELS,
    bucket_of_day,
    bucket_of_month,
    bucket_of_week,
    day_window,
    days_in_month,
    days_since_monday,
    local_midnight,
    month_day_labels,
    month_window,
    now_ms,
    to_local,
    week_window,
)

__all__ = [
    "HOUR_LABELS",
    "WEEKDAY_LABELS",
    "bucket_of_day",
    "bucket_of_month",
    "bucket_of_week",
    "day_window",
    "days_in_month",
    "days_since_monday",
    "local_midnight",
    "month_day_labels",
    "month_window",
    "now_ms",
    "to_local",
    "week_window",
]
