"""
SQLite Ledger Store

DESIGN DECISION: A single local SQLite file is the storage engine because:
1. The ledger is personal, single-user and single-writer
2. SQLite gives durable commits and real secondary indexes
3. No server to set up; the file can be copied as a backup

TRADEOFFS:
- Calls into SQLAlchemy are synchronous; the async methods exist so
  callers are written against an awaitable contract and other engines
  can be dropped in later
- One asyncio.Lock per collection serializes operations on that
  collection; there is no cross-collection transaction

The schema version lives in SQLite's ``PRAGMA user_version``.
"""

import asyncio
from typing import Any, Mapping, Optional

from sqlalchemy import create_engine, func, inspect, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import ColumnElement

from pocketpal.audit import AuditLogger
from pocketpal.services.storage.interface import (
    DuplicateKey,
    LedgerStoreInterface,
    Record,
    SchemaConflict,
    StorageError,
    StorageUnavailable,
    WriteFailed,
)
from pocketpal.services.storage.schema import INDEXES, TABLES, metadata


MEMORY = ":memory:"


def _is_locked(exc: OperationalError) -> bool:
    return "locked" in str(exc.orig).lower()


def _is_unique_violation(exc: IntegrityError) -> bool:
    return "unique" in str(exc.orig).lower()


class SQLiteLedgerStore(LedgerStoreInterface):
    """
    SQLite implementation of the ledger store.

    Usage:
        store = SQLiteLedgerStore("pocketpal.db", schema_version=2)
        await store.open()
        new_id = await store.insert("categories", {"name": "Food"})
    """

    def __init__(
        self,
        name: str,
        schema_version: int,
        audit_logger: Optional[AuditLogger] = None,
        busy_timeout: float = 5.0,
    ):
        """
        Args:
            name: Path of the SQLite file, or ':memory:'
            schema_version: Schema version this build expects
            audit_logger: Where store events are logged
            busy_timeout: Seconds to wait on a lock held by another session
        """
        self._name = name
        self._schema_version = schema_version
        self._audit = audit_logger or AuditLogger()
        self._busy_timeout = busy_timeout
        self._engine: Optional[Engine] = None
        self._locks = {collection: asyncio.Lock() for collection in TABLES}

    @property
    def name(self) -> str:
        return self._name

    @property
    def schema_version(self) -> int:
        return self._schema_version

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def __aenter__(self) -> "SQLiteLedgerStore":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _create_engine(self) -> Engine:
        if self._name == MEMORY:
            # One shared connection, otherwise every checkout sees a new empty database
            return create_engine(
                "sqlite://",
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        return create_engine(
            f"sqlite:///{self._name}",
            connect_args={"timeout": self._busy_timeout},
        )

    @staticmethod
    def _read_version(conn: Connection) -> int:
        return int(conn.exec_driver_sql("PRAGMA user_version").scalar() or 0)

    @staticmethod
    def _write_version(conn: Connection, version: int) -> None:
        # PRAGMA does not accept bound parameters
        conn.exec_driver_sql(f"PRAGMA user_version = {int(version)}")

    @staticmethod
    def _upgrade(conn: Connection) -> None:
        """
        Create any missing collection, then any missing index.

        Existing rows are never touched.
        """
        existing_tables = set(inspect(conn).get_table_names())
        metadata.create_all(conn, checkfirst=True)

        inspector = inspect(conn)
        for table_name in existing_tables & set(TABLES):
            present = {ix["name"] for ix in inspector.get_indexes(table_name)}
            for index in TABLES[table_name].indexes:
                if index.name not in present:
                    index.create(conn)

    async def open(self) -> None:
        if self._engine is not None:
            return

        engine = self._create_engine()
        try:
            with engine.begin() as conn:
                persisted = self._read_version(conn)
                if persisted > self._schema_version:
                    raise SchemaConflict(
                        f"Store {self._name} is at schema v{persisted}, "
                        f"this build expects v{self._schema_version}",
                        persisted_version=persisted,
                        requested_version=self._schema_version,
                    )
                if persisted < self._schema_version:
                    self._upgrade(conn)
                    self._write_version(conn, self._schema_version)
                    self._audit.log_schema_upgraded(self._name, persisted, self._schema_version)
        except SchemaConflict as e:
            engine.dispose()
            self._audit.log_store_open_failed(self._name, str(e))
            raise
        except OperationalError as e:
            engine.dispose()
            self._audit.log_store_open_failed(self._name, str(e))
            if _is_locked(e):
                raise SchemaConflict(
                    f"Store {self._name} is locked by another session",
                    requested_version=self._schema_version,
                ) from e
            raise StorageUnavailable(f"Cannot open store {self._name}: {e.orig}") from e
        except SQLAlchemyError as e:
            engine.dispose()
            self._audit.log_store_open_failed(self._name, str(e))
            raise StorageUnavailable(f"Cannot open store {self._name}: {e}") from e

        self._engine = engine
        self._audit.log_store_opened(self._name, self._schema_version)

    async def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._audit.log_store_closed(self._name)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_open(self) -> Engine:
        if self._engine is None:
            raise StorageUnavailable(f"Store {self._name} is not open")
        return self._engine

    @staticmethod
    def _table(collection: str):
        try:
            return TABLES[collection]
        except KeyError:
            raise StorageError(f"Unknown collection: {collection}")

    @staticmethod
    def _index_column(collection: str, index_name: str) -> ColumnElement:
        table = SQLiteLedgerStore._table(collection)
        try:
            column_name = INDEXES[collection][index_name]
        except KeyError:
            raise StorageError(f"Unknown index {index_name!r} on {collection}")
        return table.c[column_name]

    async def _fetch(self, collection: str, stmt) -> list[Record]:
        engine = self._require_open()
        async with self._locks[collection]:
            try:
                with engine.connect() as conn:
                    rows = conn.execute(stmt).all()
            except SQLAlchemyError as e:
                raise StorageError(f"Read from {collection} failed: {e}") from e
        return [dict(row._mapping) for row in rows]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def insert(self, collection: str, record: Mapping[str, Any]) -> int:
        table = self._table(collection)
        engine = self._require_open()

        values = {key: value for key, value in record.items() if key != "id"}
        unknown = set(values) - set(table.c.keys())
        if unknown:
            raise StorageError(f"Unknown fields for {collection}: {sorted(unknown)}")

        async with self._locks[collection]:
            try:
                with engine.begin() as conn:
                    result = conn.execute(table.insert().values(**values))
                    new_id = result.inserted_primary_key[0]
            except IntegrityError as e:
                if _is_unique_violation(e):
                    raise DuplicateKey(
                        f"Duplicate key in {collection}: {e.orig}",
                        collection=collection,
                    ) from e
                self._audit.log_write_failed(collection, str(e.orig))
                raise WriteFailed(f"Insert into {collection} failed: {e.orig}", collection=collection) from e
            except SQLAlchemyError as e:
                self._audit.log_write_failed(collection, str(e))
                raise WriteFailed(f"Insert into {collection} failed: {e}", collection=collection) from e

        return int(new_id)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def query_by_index_range(
        self,
        collection: str,
        index_name: str,
        lower: Optional[Any] = None,
        upper: Optional[Any] = None,
        include_lower: bool = True,
        include_upper: bool = True,
    ) -> list[Record]:
        table = self._table(collection)
        column = self._index_column(collection, index_name)

        stmt = select(table)
        if lower is not None:
            stmt = stmt.where(column >= lower if include_lower else column > lower)
        if upper is not None:
            stmt = stmt.where(column <= upper if include_upper else column < upper)
        stmt = stmt.order_by(column, table.c.id)

        return await self._fetch(collection, stmt)

    async def get_all(self, collection: str) -> list[Record]:
        table = self._table(collection)
        return await self._fetch(collection, select(table).order_by(table.c.id))

    async def count(self, collection: str) -> int:
        table = self._table(collection)
        rows = await self._fetch(collection, select(func.count().label("n")).select_from(table))
        return int(rows[0]["n"])
