"""
Storage Services Package

Provides the abstract ledger store interface, its error taxonomy and
the SQLite implementation.
"""

from pocketpal.services.storage.interface import (
    DuplicateCategory,
    DuplicateKey,
    LedgerStoreInterface,
    Record,
    SchemaConflict,
    StorageError,
    StorageUnavailable,
    WriteFailed,
)
from pocketpal.services.storage.sqlite_store import MEMORY, SQLiteLedgerStore

__all__ = [
    # Interfaces
    "LedgerStoreInterface",
    "Record",
    # Exceptions
    "DuplicateCategory",
    "DuplicateKey",
    "SchemaConflict",
    "StorageError",
    "StorageUnavailable",
    "WriteFailed",
    # SQLite implementation
    "MEMORY",
    "SQLiteLedgerStore",
]
