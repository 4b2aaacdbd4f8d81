"""
Audit Models for PocketPal

Every write against the ledger, and every failure, produces an audit
event. Events go to the structured log; they are not persisted in the
ledger itself.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store lifecycle
    STORE_OPENED = "store_opened"
    SCHEMA_UPGRADED = "schema_upgraded"
    STORE_OPEN_FAILED = "store_open_failed"
    STORE_CLOSED = "store_closed"

    # Categories
    CATEGORIES_SEEDED = "categories_seeded"
    CATEGORY_ADDED = "category_added"
    DUPLICATE_CATEGORY_REJECTED = "duplicate_category_rejected"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    WRITE_FAILED = "write_failed"

    # Change notification
    LISTENER_FAILED = "listener_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """A single audit event."""

    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What the event is about
    collection: Optional[str] = Field(
        default=None,
        description="Collection touched, e.g. 'transactions'"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Id of the record the event relates to"
    )

    description: str
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict[str, Any]:
        """Flatten into keyword arguments for structlog."""
        log = {
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "description": self.description,
            "details": self.details,
            "occurred_at": self.timestamp.isoformat(),
        }
        if self.collection is not None:
            log["collection"] = self.collection
        if self.entity_id is not None:
            log["entity_id"] = self.entity_id
        if self.error_message:
            log["error_message"] = self.error_message
        return log


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(tx_id, "Food", "1500.50")
        event = AuditEventBuilder.write_failed("categories", str(exc))
    """

    @staticmethod
    def store_opened(name: str, version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_OPENED,
            description=f"Ledger store opened: {name}",
            details={"name": name, "schema_version": version},
        )

    @staticmethod
    def schema_upgraded(name: str, old_version: int, new_version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCHEMA_UPGRADED,
            description=f"Schema upgraded from v{old_version} to v{new_version}",
            details={
                "name": name,
                "old_version": old_version,
                "new_version": new_version,
            },
        )

    @staticmethod
    def store_open_failed(name: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_OPEN_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Could not open ledger store: {name}",
            details={"name": name},
            error_message=reason,
        )

    @staticmethod
    def store_closed(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_CLOSED,
            severity=AuditSeverity.DEBUG,
            description=f"Ledger store closed: {name}",
        )

    @staticmethod
    def categories_seeded(names: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORIES_SEEDED,
            collection="categories",
            description=f"Seeded {len(names)} default categories",
            details={"names": names},
        )

    @staticmethod
    def category_added(category_id: int, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_ADDED,
            collection="categories",
            entity_id=category_id,
            description=f"Category added: {name}",
            details={"name": name},
        )

    @staticmethod
    def duplicate_category(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_CATEGORY_REJECTED,
            severity=AuditSeverity.WARNING,
            collection="categories",
            description=f"Category already exists: {name}",
            details={"name": name},
        )

    @staticmethod
    def transaction_added(
        transaction_id: int,
        category: str,
        amount: str,
        app: Optional[str] = None,
    ) -> AuditEvent:
        details = {"category": category, "amount": amount}
        if app:
            details["app"] = app
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            collection="transactions",
            entity_id=transaction_id,
            description=f"Transaction added: {amount} for {category}",
            details=details,
        )

    @staticmethod
    def write_failed(collection: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            collection=collection,
            description=f"Write to {collection} failed",
            error_message=error_message,
        )

    @staticmethod
    def listener_failed(topic: str, listener: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LISTENER_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Listener {listener} failed on {topic}",
            details={"topic": topic, "listener": listener},
            error_message=error_message,
        )
