"""
Ledger Orchestrator for PocketPal

This module ties the store, the category registry and the change
notifier together behind the operations the rest of the app uses:

1. Write path: draft -> timestamp rule -> store insert -> notify
2. Read path: window -> index range query -> Transaction models

DESIGN DECISION: The ledger owns its notifier. There is no global
event bus; whoever holds the ledger can subscribe to it.

Subscribers are only notified after the insert has committed, so a
re-read triggered by the signal always sees the new row.
"""

from datetime import tzinfo
from typing import Callable, Optional

from pocketpal.audit import AuditLogger, configure_logging
from pocketpal.config import LedgerSettings, get_settings
from pocketpal.models.ledger import Category, Transaction, TransactionDraft, Window
from pocketpal.periods import now_ms
from pocketpal.services.categories import CategoryRegistry
from pocketpal.services.notifications import (
    CATEGORY_ADDED,
    TRANSACTION_ADDED,
    ChangeNotifier,
    Listener,
)
from pocketpal.services.storage import LedgerStoreInterface, SQLiteLedgerStore


TRANSACTIONS = "transactions"


class Ledger:
    """
    The local transaction ledger.

    Usage:
        ledger = await create_ledger()
        unsubscribe = ledger.subscribe(refresh_dashboard)
        await ledger.add_transaction(TransactionDraft(amount="15000", category="Food", date=today))
    """

    def __init__(
        self,
        store: LedgerStoreInterface,
        notifier: Optional[ChangeNotifier] = None,
        registry: Optional[CategoryRegistry] = None,
        clock: Callable[[], int] = now_ms,
        tz: Optional[tzinfo] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            store: An opened ledger store
            notifier: Change notifier (a private one is created if omitted)
            registry: Category registry (created over ``store`` if omitted)
            clock: Returns "now" in epoch milliseconds
            tz: Timezone for local dates; None means process local time
            audit_logger: Where ledger events are logged
        """
        self._audit = audit_logger or AuditLogger()
        self._store = store
        self._notifier = notifier or ChangeNotifier(self._audit)
        self._registry = registry or CategoryRegistry(store, audit_logger=self._audit)
        self._clock = clock
        self._tz = tz

    @property
    def store(self) -> LedgerStoreInterface:
        return self._store

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def categories(self) -> CategoryRegistry:
        return self._registry

    @property
    def tz(self) -> Optional[tzinfo]:
        return self._tz

    def now(self) -> int:
        return self._clock()

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def add_transaction(self, draft: TransactionDraft) -> int:
        """
        Store a transaction from a validated draft.

        Returns:
            The new transaction's id

        Raises:
            WriteFailed: If the insert failed (nothing was stored)
            StorageUnavailable: If the store is not open
        """
        new_tx = draft.to_new_transaction(self._clock(), self._tz)
        tx_id = await self._store.insert(TRANSACTIONS, new_tx.to_record())

        self._audit.log_transaction_added(tx_id, new_tx.category, str(new_tx.amount), new_tx.app)
        await self._notifier.publish(TRANSACTION_ADDED)
        return tx_id

    async def get_transactions_in_range(self, start: int, end: int) -> list[Transaction]:
        """Transactions with ``start <= timestamp < end``, oldest first."""
        records = await self._store.query_by_index_range(
            TRANSACTIONS,
            "timestamp",
            lower=start,
            upper=end,
            include_lower=True,
            include_upper=False,
        )
        return [Transaction.from_record(record) for record in records]

    async def get_transactions_in_window(self, window: Window) -> list[Transaction]:
        return await self.get_transactions_in_range(window.start, window.end)

    async def get_transactions_by_category(self, category: str) -> list[Transaction]:
        records = await self._store.query_by_index_range(
            TRANSACTIONS,
            "category",
            lower=category,
            upper=category,
        )
        return [Transaction.from_record(record) for record in records]

    async def get_all_transactions(self) -> list[Transaction]:
        """Every transaction, in insertion order."""
        records = await self._store.get_all(TRANSACTIONS)
        return [Transaction.from_record(record) for record in records]

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def get_categories(self) -> list[Category]:
        return await self._registry.list_categories()

    async def add_category(self, name: str) -> int:
        """
        Raises:
            DuplicateCategory: If the name already exists
        """
        category_id = await self._registry.add_category(name)
        await self._notifier.publish(CATEGORY_ADDED)
        return category_id

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def subscribe(self, handler: Listener) -> Callable[[], None]:
        """Listen for "transaction added". Returns an unsubscribe callable."""
        return self._notifier.subscribe(TRANSACTION_ADDED, handler)

    def unsubscribe(self, handler: Listener) -> None:
        self._notifier.unsubscribe(TRANSACTION_ADDED, handler)

    async def close(self) -> None:
        await self._store.close()


async def create_ledger(
    settings: Optional[LedgerSettings] = None,
    clock: Callable[[], int] = now_ms,
) -> Ledger:
    """
    Factory function to open the store and return a ready ledger.

    Opens (and if needed upgrades) the store, then seeds the default
    categories. Call once per session.

    Raises:
        StorageUnavailable: If the store cannot be opened
        SchemaConflict: If the store's schema is incompatible
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    audit_logger = AuditLogger()

    store = SQLiteLedgerStore(
        settings.database_path,
        schema_version=settings.schema_version,
        audit_logger=audit_logger,
    )
    await store.open()

    registry = CategoryRegistry(
        store,
        defaults=settings.default_categories,
        audit_logger=audit_logger,
    )
    await registry.ensure_seeded()

    return Ledger(
        store,
        registry=registry,
        clock=clock,
        tz=settings.tzinfo,
        audit_logger=audit_logger,
    )
