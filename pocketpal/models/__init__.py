"""
Data Models Package

Pydantic models for everything that flows through the ledger:
stored entities, user drafts, reporting windows and audit events.
"""

from pocketpal.models.ledger import (
    MS_PER_DAY,
    Category,
    NewTransaction,
    PaymentApp,
    Transaction,
    TransactionDraft,
    Window,
)
from pocketpal.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "MS_PER_DAY",
    "Category",
    "NewTransaction",
    "PaymentApp",
    "Transaction",
    "TransactionDraft",
    "Window",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
