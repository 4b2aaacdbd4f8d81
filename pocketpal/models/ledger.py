"""
Core Data Models for PocketPal

These models define the shapes of everything stored in, or read back from,
the local ledger:
1. Transactions (one discrete spending event each)
2. Categories (unique names that transactions refer to)
3. Drafts (raw user input before it becomes a transaction)
4. Windows (half-open time ranges used by every report)

DESIGN DECISION: Amounts are Decimal everywhere, never float.
Reports sum many small amounts and binary floats drift (0.1 + 0.2).
The store persists the exact decimal text.

Timestamps are integer epoch milliseconds, matching what reporting
windows are expressed in.
"""

import datetime as dt
import math
from datetime import datetime, time, tzinfo
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


MS_PER_DAY = 24 * 60 * 60 * 1000


# =============================================================================
# ENUMS
# =============================================================================

class PaymentApp(str, Enum):
    """
    Payment channels offered by the "pay with" action.

    A transaction's ``app`` field is a free string; these are the
    values the pay-with flow writes.
    """
    GOPAY = "gopay"
    JENIUS = "jenius"
    BCA = "bca"


# =============================================================================
# STORED ENTITIES
# =============================================================================

class NewTransaction(BaseModel):
    """
    A transaction that has not been stored yet (no id).

    This is what gets handed to the store's insert operation.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    amount: Decimal = Field(
        ...,
        description="Amount in whole + fractional currency units"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category name at time of entry"
    )
    timestamp: int = Field(
        ...,
        description="Epoch milliseconds"
    )
    notes: Optional[str] = Field(
        default=None,
        description="Free-text notes"
    )
    app: Optional[str] = Field(
        default=None,
        description="Payment channel used, if routed through pay-with"
    )

    def to_record(self) -> dict:
        """Plain dict for the storage layer."""
        return self.model_dump()


class Transaction(NewTransaction):
    """
    A stored transaction.

    ``id`` is assigned by the store, increases with insertion order and
    never changes. Note that ``timestamp`` order does NOT follow ``id``
    order: backdated entries get the midnight of their chosen day.
    """

    id: int = Field(
        ...,
        ge=0,
        description="Store-assigned unique id"
    )

    @classmethod
    def from_record(cls, record: dict) -> "Transaction":
        return cls.model_validate(record)


class Category(BaseModel):
    """A spending category. Names are unique across the store."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(..., ge=0)
    name: str = Field(..., min_length=1)

    @classmethod
    def from_record(cls, record: dict) -> "Category":
        return cls.model_validate(record)


# =============================================================================
# USER INPUT
# =============================================================================

class TransactionDraft(BaseModel):
    """
    Raw transaction input as the entry form produces it.

    The amount arrives as text; the date is a calendar date, not an
    instant. ``to_new_transaction`` turns the draft into something
    storable, resolving the timestamp rule:

    - draft dated today -> the exact moment of entry
    - any other date    -> local midnight of that date

    Two backdated entries for the same day therefore share a timestamp.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: str = Field(
        ...,
        min_length=1,
        description="Positive number as text, e.g. '1500.50'"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Chosen category name"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date the spending happened"
    )
    notes: Optional[str] = None
    app: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: str) -> str:
        """Amount must parse as a positive, finite number."""
        try:
            value = Decimal(v)
        except InvalidOperation:
            raise ValueError(f"Amount is not a number: {v!r}")
        if not value.is_finite() or value <= 0:
            raise ValueError(f"Amount must be a positive number, got {v!r}")
        return v

    @field_validator('notes', 'app')
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def decimal_amount(self) -> Decimal:
        return Decimal(self.amount)

    def resolve_timestamp(self, now_ms: int, tz: Optional[tzinfo] = None) -> int:
        """
        Compute the stored timestamp for this draft.

        Args:
            now_ms: The current instant in epoch milliseconds
            tz: Timezone for "local" dates; None means the process's local time

        Returns:
            Epoch milliseconds
        """
        today = datetime.fromtimestamp(now_ms / 1000, tz).date()
        if self.date == today:
            return now_ms
        midnight = datetime.combine(self.date, time.min, tzinfo=tz)
        return int(midnight.timestamp() * 1000)

    def to_new_transaction(self, now_ms: int, tz: Optional[tzinfo] = None) -> NewTransaction:
        return NewTransaction(
            amount=self.decimal_amount,
            category=self.category,
            timestamp=self.resolve_timestamp(now_ms, tz),
            notes=self.notes,
            app=self.app,
        )


# =============================================================================
# REPORTING WINDOWS
# =============================================================================

class Window(BaseModel):
    """
    Half-open time interval ``[start, end)`` in epoch milliseconds.
    """
    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @property
    def width_ms(self) -> int:
        return self.end - self.start

    @property
    def days(self) -> int:
        """Width in whole days, rounded (DST days are 23h or 25h long)."""
        return int(math.floor(self.width_ms / MS_PER_DAY + 0.5))

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp < self.end
