"""Audit logging package."""

from pocketpal.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
