"""Configuration package."""

from pocketpal.config.settings import (
    CURRENT_SCHEMA_VERSION,
    DEFAULT_CATEGORIES,
    LedgerSettings,
    get_settings,
)

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "DEFAULT_CATEGORIES",
    "LedgerSettings",
    "get_settings",
]
