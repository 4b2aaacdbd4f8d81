"""
Ledger Schema

Two collections, each with an auto-assigned integer key:

- transactions: indexed by category (non-unique) and timestamp (non-unique)
- categories: indexed by name (unique)

Index names used by callers ("category", "timestamp", "name") map to the
indexed column; the SQL index objects carry prefixed names.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Column,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.types import TypeDecorator


class DecimalText(TypeDecorator):
    """Decimal stored as its exact text form (SQLite has no decimal type)."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: Optional[Decimal], dialect) -> Optional[str]:
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value: Optional[str], dialect) -> Optional[Decimal]:
        if value is None:
            return None
        return Decimal(value)


metadata = MetaData()

transactions = Table(
    "transactions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("amount", DecimalText, nullable=False),
    Column("category", String, nullable=False),
    Column("timestamp", BigInteger, nullable=False),
    Column("notes", Text, nullable=True),
    Column("app", String, nullable=True),
    Index("ix_transactions_category", "category"),
    Index("ix_transactions_timestamp", "timestamp"),
    sqlite_autoincrement=True,
)

categories = Table(
    "categories",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Index("ix_categories_name", "name", unique=True),
    sqlite_autoincrement=True,
)

TABLES = {
    "transactions": transactions,
    "categories": categories,
}

# collection -> index name -> indexed column name
INDEXES = {
    "transactions": {"category": "category", "timestamp": "timestamp"},
    "categories": {"name": "name"},
}
