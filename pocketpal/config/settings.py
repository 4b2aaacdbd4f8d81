"""
Configuration Management for PocketPal

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every knob the ledger reads (where the database lives, which schema
version this build expects, which categories to seed) is validated
once at startup.
"""

from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CATEGORIES = ("Food", "Transport", "Shopping", "Entertainment", "Other")

# Version 1 had transactions only; version 2 added the categories collection.
CURRENT_SCHEMA_VERSION = 2


class LedgerSettings(BaseSettings):
    """Ledger store, seeding and reporting configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETPAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    database_path: str = Field(
        default="pocketpal.db",
        description="SQLite file holding the ledger (':memory:' for a throwaway store)"
    )
    schema_version: int = Field(
        default=CURRENT_SCHEMA_VERSION,
        ge=1,
        description="Schema version this build expects"
    )
    default_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES),
        description="Categories inserted when the category collection is empty"
    )
    timezone: Optional[str] = Field(
        default=None,
        description="IANA timezone for day/week/month boundaries (unset = process local time)"
    )
    recent_limit: int = Field(
        default=3,
        ge=1,
        le=100,
        description="How many transactions the recent list shows"
    )
    log_level: str = Field(
        default="INFO",
        description="Level for the structured log"
    )

    @field_validator('default_categories')
    @classmethod
    def validate_default_categories(cls, v: list[str]) -> list[str]:
        """Seed names must be non-empty and unique."""
        names = [name.strip() for name in v]
        if any(not name for name in names):
            raise ValueError("Default category names cannot be empty")
        if len(set(names)) != len(names):
            raise ValueError("Default category names must be unique")
        return names

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        try:
            ZoneInfo(v)
        except ZoneInfoNotFoundError:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def tzinfo(self) -> Optional[ZoneInfo]:
        """Timezone object, or None to use the process's local time."""
        return ZoneInfo(self.timezone) if self.timezone else None


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
