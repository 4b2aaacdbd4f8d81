"""
Aggregation Engine

Reduces a list of transactions to the numbers the reports show.
Nothing here is cached: every report recomputes from raw rows.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Callable, Iterable, Sequence

from pocketpal.models.ledger import Transaction


ZERO = Decimal("0")


def total_of(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of amounts; 0 for no transactions."""
    return sum((tx.amount for tx in transactions), ZERO)


def sum_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """
    Category name -> summed amount.

    Categories are matched by exact string equality. Categories with
    no transactions are absent rather than zero.
    """
    totals: defaultdict[str, Decimal] = defaultdict(lambda: ZERO)
    for tx in transactions:
        totals[tx.category] += tx.amount
    return dict(totals)


def sum_by_bucket(
    transactions: Iterable[Transaction],
    bucketing_fn: Callable[[int], int],
    bucket_count: int,
) -> list[Decimal]:
    """
    Per-bucket sums, one entry per bucket (zero-filled).

    Args:
        transactions: Transactions to reduce
        bucketing_fn: Maps a timestamp to a 0-based bucket index
        bucket_count: Number of buckets

    Raises:
        ValueError: If ``bucketing_fn`` returns an index outside the buckets
    """
    buckets = [ZERO] * bucket_count
    for tx in transactions:
        index = bucketing_fn(tx.timestamp)
        if not 0 <= index < bucket_count:
            raise ValueError(
                f"Bucket {index} out of range 0..{bucket_count - 1} "
                f"for transaction {tx.id}"
            )
        buckets[index] += tx.amount
    return buckets


def top_recent(transactions: Sequence[Transaction], n: int) -> list[Transaction]:
    """The ``n`` latest transactions by timestamp, newest first.

    The sort is stable, so equal timestamps keep their input order.
    """
    if n <= 0:
        return []
    return sorted(transactions, key=lambda tx: tx.timestamp, reverse=True)[:n]
