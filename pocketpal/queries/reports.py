"""
Report Builder

DESIGN DECISION: Reports are DERIVED, never stored.
Each call takes "now", computes the window, re-queries the ledger and
reduces the raw rows. Call again after a "transaction added" signal to
get fresh numbers.

Report shapes:
- period totals: today / this week / this month (dashboard cards)
- day report: per-hour buckets (24)
- week report: per-weekday buckets, Mon..Sun (7)
- month report: per-day-of-month buckets (28-31)
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from pocketpal.models.ledger import Transaction, Window
from pocketpal.orchestrator import Ledger
from pocketpal.periods import (
    HOUR_LABELS,
    WEEKDAY_LABELS,
    bucket_of_day,
    bucket_of_month,
    bucket_of_week,
    day_window,
    month_day_labels,
    month_window,
    week_window,
)
from pocketpal.queries.aggregation import (
    sum_by_bucket,
    sum_by_category,
    top_recent,
    total_of,
)


class Period(str, Enum):
    """Reporting periods."""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class PeriodTotals(BaseModel):
    """Totals for the three dashboard periods."""
    today: Decimal
    week: Decimal
    month: Decimal


class PeriodReport(BaseModel):
    """Everything one period's report view shows."""

    period: Period
    window: Window
    total: Decimal
    by_category: dict[str, Decimal] = Field(default_factory=dict)
    buckets: list[Decimal] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Transactions in the window, newest first"
    )

    @property
    def is_empty(self) -> bool:
        return not self.transactions


class ReportBuilder:
    """Builds report data from the ledger on demand."""

    def __init__(self, ledger: Ledger):
        self._ledger = ledger

    def _now(self, now: Optional[int]) -> int:
        return self._ledger.now() if now is None else now

    async def period_totals(self, now: Optional[int] = None) -> PeriodTotals:
        now = self._now(now)
        tz = self._ledger.tz

        today = await self._ledger.get_transactions_in_window(day_window(now, tz))
        week = await self._ledger.get_transactions_in_window(week_window(now, tz))
        month = await self._ledger.get_transactions_in_window(month_window(now, tz))

        return PeriodTotals(
            today=total_of(today),
            week=total_of(week),
            month=total_of(month),
        )

    async def day_report(self, now: Optional[int] = None) -> PeriodReport:
        now = self._now(now)
        tz = self._ledger.tz
        window = day_window(now, tz)
        transactions = await self._ledger.get_transactions_in_window(window)
        return self._build(
            Period.TODAY,
            window,
            transactions,
            sum_by_bucket(transactions, lambda ts: bucket_of_day(ts, tz), 24),
            list(HOUR_LABELS),
        )

    async def week_report(self, now: Optional[int] = None) -> PeriodReport:
        now = self._now(now)
        tz = self._ledger.tz
        window = week_window(now, tz)
        transactions = await self._ledger.get_transactions_in_window(window)
        return self._build(
            Period.WEEK,
            window,
            transactions,
            sum_by_bucket(transactions, lambda ts: bucket_of_week(ts, tz), 7),
            list(WEEKDAY_LABELS),
        )

    async def month_report(self, now: Optional[int] = None) -> PeriodReport:
        now = self._now(now)
        tz = self._ledger.tz
        window = month_window(now, tz)
        transactions = await self._ledger.get_transactions_in_window(window)
        # Day-of-month is 1-based; buckets are 0-based
        buckets = sum_by_bucket(
            transactions,
            lambda ts: bucket_of_month(ts, tz) - 1,
            window.days,
        )
        return self._build(
            Period.MONTH,
            window,
            transactions,
            buckets,
            list(month_day_labels(now, tz)),
        )

    async def report(self, period: Period, now: Optional[int] = None) -> PeriodReport:
        if period == Period.TODAY:
            return await self.day_report(now)
        if period == Period.WEEK:
            return await self.week_report(now)
        return await self.month_report(now)

    async def recent(self, n: int = 3) -> list[Transaction]:
        """The ``n`` most recent transactions across the whole ledger."""
        return top_recent(await self._ledger.get_all_transactions(), n)

    @staticmethod
    def _build(
        period: Period,
        window: Window,
        transactions: list[Transaction],
        buckets: list[Decimal],
        labels: list[str],
    ) -> PeriodReport:
        return PeriodReport(
            period=period,
            window=window,
            total=total_of(transactions),
            by_category=sum_by_category(transactions),
            buckets=buckets,
            labels=labels,
            transactions=top_recent(transactions, len(transactions)),
        )


def format_rupiah(amount: Decimal) -> str:
    """
    Format an amount the Indonesian way.

    '.' groups thousands, ',' separates decimals, and a '00' decimal
    part is dropped:

        >>> format_rupiah(Decimal("1500.50"))
        'Rp1.500,50'
        >>> format_rupiah(Decimal("25000"))
        'Rp25.000'
    """
    rounded = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    integer_part, decimal_part = f"{abs(rounded):.2f}".split(".")
    with_thousands = f"{int(integer_part):,}".replace(",", ".")

    if decimal_part == "00":
        return f"{sign}Rp{with_thousands}"
    return f"{sign}Rp{with_thousands},{decimal_part}"
