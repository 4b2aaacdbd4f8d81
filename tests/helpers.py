"""Shared helpers: a fixed timezone and a controllable clock."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from pocketpal.models.ledger import Transaction


# Western Indonesia Time, no DST
WIB = timezone(timedelta(hours=7))


def ms(year: int, month: int, day: int, hour: int = 0, minute: int = 0, tz=WIB) -> int:
    """Epoch milliseconds for a local wall-clock time."""
    return int(datetime(year, month, day, hour, minute, tzinfo=tz).timestamp() * 1000)


def make_tx(
    id: int,
    amount: str,
    category: str = "Food",
    timestamp: int = 0,
    app: Optional[str] = None,
) -> Transaction:
    return Transaction(
        id=id,
        amount=Decimal(amount),
        category=category,
        timestamp=timestamp,
        app=app,
    )


class FakeClock:
    """Callable clock that returns a settable instant."""

    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now
