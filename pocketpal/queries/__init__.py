"""Aggregation and reporting over ledger transactions."""

from pocketpal.queries.aggregation import (
    sum_by_bucket,
    sum_by_category,
    top_recent,
    total_of,
)
from pocketpal.queries.reports import (
    Period,
    PeriodReport,
    PeriodTotals,
    ReportBuilder,
    format_rupiah,
)

__all__ = [
    "sum_by_bucket",
    "sum_by_category",
    "top_recent",
    "total_of",
    "Period",
    "PeriodReport",
    "PeriodTotals",
    "ReportBuilder",
    "format_rupiah",
]
