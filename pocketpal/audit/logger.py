"""
Audit Logger

Every write against the ledger, and every failure, is logged.
This gives a trace of what happened to the local store without
keeping a second copy of the data.

The audit logger:
- Is synchronous (events are only logged, never persisted)
- Emits each event at its own severity
- Never raises: a failure to build or emit an event is itself logged,
  so a committed write is never reported as failed
"""

import logging
from typing import Any, Callable, Optional

import structlog

from pocketpal.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route the structured log to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=level.upper())


class AuditLogger:
    """
    Central audit logging service.

    One instance is shared by the store, the category registry
    and the ledger facade.
    """

    def __init__(self, name: str = "pocketpal"):
        self._logger = structlog.get_logger(name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at its severity."""
        try:
            log_dict = event.to_log_dict()

            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            self._logging_failed(getattr(event, "event_type", None), e)

    def _record(self, build: Callable[..., AuditEvent], *args: Any) -> None:
        try:
            event = build(*args)
        except Exception as e:
            self._logging_failed(build.__name__, e)
            return
        self.log(event)

    def _logging_failed(self, event_type: Any, error: Exception) -> None:
        try:
            self._logger.error("audit_log_failed", event_type=str(event_type), error=str(error))
        except Exception:
            logging.getLogger("pocketpal").exception("audit_log_failed")

    def log_store_opened(self, name: str, version: int) -> None:
        self._record(AuditEventBuilder.store_opened, name, version)

    def log_schema_upgraded(self, name: str, old_version: int, new_version: int) -> None:
        self._record(AuditEventBuilder.schema_upgraded, name, old_version, new_version)

    def log_store_open_failed(self, name: str, reason: str) -> None:
        self._record(AuditEventBuilder.store_open_failed, name, reason)

    def log_store_closed(self, name: str) -> None:
        self._record(AuditEventBuilder.store_closed, name)

    def log_categories_seeded(self, names: list[str]) -> None:
        self._record(AuditEventBuilder.categories_seeded, names)

    def log_category_added(self, category_id: int, name: str) -> None:
        self._record(AuditEventBuilder.category_added, category_id, name)

    def log_duplicate_category(self, name: str) -> None:
        self._record(AuditEventBuilder.duplicate_category, name)

    def log_transaction_added(
        self,
        transaction_id: int,
        category: str,
        amount: str,
        app: Optional[str] = None,
    ) -> None:
        self._record(AuditEventBuilder.transaction_added, transaction_id, category, amount, app)

    def log_write_failed(self, collection: str, error_message: str) -> None:
        self._record(AuditEventBuilder.write_failed, collection, error_message)

    def log_listener_failed(self, topic: str, listener: str, error_message: str) -> None:
        self._record(AuditEventBuilder.listener_failed, topic, listener, error_message)
