"""Services package."""

from pocketpal.services.categories import CategoryRegistry
from pocketpal.services.notifications import (
    CATEGORY_ADDED,
    TRANSACTION_ADDED,
    ChangeNotifier,
)
from pocketpal.services.storage import (
    DuplicateCategory,
    DuplicateKey,
    LedgerStoreInterface,
    SchemaConflict,
    SQLiteLedgerStore,
    StorageError,
    StorageUnavailable,
    WriteFailed,
)

__all__ = [
    # Categories
    "CategoryRegistry",
    # Change notification
    "CATEGORY_ADDED",
    "TRANSACTION_ADDED",
    "ChangeNotifier",
    # Storage
    "DuplicateCategory",
    "DuplicateKey",
    "LedgerStoreInterface",
    "SchemaConflict",
    "SQLiteLedgerStore",
    "StorageError",
    "StorageUnavailable",
    "WriteFailed",
]
