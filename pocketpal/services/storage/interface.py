"""
Abstract Ledger Store Interface

DESIGN DECISION: Business logic talks to an abstract keyed store.
This allows us to:
1. Keep the category registry and ledger facade free of SQL
2. Use an in-memory SQLite database in tests
3. Swap the storage engine without touching reporting code

The store knows about collections of plain records, auto-assigned
integer keys and secondary indexes. It does not know what a
transaction or a category is.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


Record = dict[str, Any]


class LedgerStoreInterface(ABC):
    """
    Abstract interface for the durable keyed store.

    Every operation is async and may suspend on I/O. Operations on a
    single collection are serialized; nothing is atomic across
    collections.
    """

    @abstractmethod
    async def open(self) -> None:
        """
        Open or create the store, upgrading its schema if needed.

        Raises:
            StorageUnavailable: If the store cannot be opened
            SchemaConflict: If the persisted schema is newer than ours,
                or another session holds the schema lock
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the store. Any later call raises StorageUnavailable."""
        pass

    @abstractmethod
    async def insert(self, collection: str, record: Mapping[str, Any]) -> int:
        """
        Insert a record and return its newly assigned id.

        The record is durable before this returns.

        Raises:
            DuplicateKey: If a unique index rejects the record
            WriteFailed: On any other I/O error (nothing was stored)
            StorageUnavailable: If the store is not open
        """
        pass

    @abstractmethod
    async def query_by_index_range(
        self,
        collection: str,
        index_name: str,
        lower: Optional[Any] = None,
        upper: Optional[Any] = None,
        include_lower: bool = True,
        include_upper: bool = True,
    ) -> list[Record]:
        """
        Get all records whose indexed field falls between the bounds.

        Args:
            collection: Collection name
            index_name: Secondary index to range over
            lower: Lower bound, or None for unbounded
            upper: Upper bound, or None for unbounded
            include_lower: Whether a value equal to ``lower`` matches
            include_upper: Whether a value equal to ``upper`` matches

        Returns:
            Matching records in ascending index-key order
        """
        pass

    @abstractmethod
    async def get_all(self, collection: str) -> list[Record]:
        """
        Get every record in a collection, in insertion order.
        """
        pass

    @abstractmethod
    async def count(self, collection: str) -> int:
        """Number of records in a collection."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailable(StorageError):
    """The store could not be opened, or is not open."""
    pass


class SchemaConflict(StorageError):
    """The persisted schema is incompatible with the requested version."""

    def __init__(self, message: str, persisted_version: Optional[int] = None, requested_version: Optional[int] = None):
        super().__init__(message)
        self.persisted_version = persisted_version
        self.requested_version = requested_version


class WriteFailed(StorageError):
    """An insert failed; the record was not stored."""

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(message)
        self.collection = collection


class DuplicateKey(StorageError):
    """A unique index rejected the record."""

    def __init__(self, message: str, collection: Optional[str] = None, index_name: Optional[str] = None):
        super().__init__(message)
        self.collection = collection
        self.index_name = index_name


class DuplicateCategory(DuplicateKey):
    """A category with this name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Category already exists: {name}", collection="categories", index_name="name")
        self.name = name
