"""Tests for the ledger facade."""

import pytest
from datetime import date
from decimal import Decimal

from pocketpal.config import DEFAULT_CATEGORIES, LedgerSettings
from pocketpal.models.audit import AuditEventBuilder
from pocketpal.models.ledger import TransactionDraft
from pocketpal.orchestrator import Ledger, create_ledger
from pocketpal.periods import bucket_of_week, week_window
from pocketpal.queries.aggregation import sum_by_bucket, sum_by_category
from pocketpal.services.notifications import CATEGORY_ADDED
from pocketpal.services.storage import (
    MEMORY,
    DuplicateCategory,
    SQLiteLedgerStore,
    WriteFailed,
)
from tests.helpers import WIB, FakeClock, ms


def draft(amount: str, category: str = "Food", on: date = date(2024, 6, 12), **kwargs) -> TransactionDraft:
    return TransactionDraft(amount=amount, category=category, date=on, **kwargs)


class FailingStore(SQLiteLedgerStore):
    """In-memory store whose transaction inserts always fail."""

    async def insert(self, collection, record):
        if collection == "transactions":
            raise WriteFailed("disk full", collection=collection)
        return await super().insert(collection, record)


class TestAddTransaction:

    @pytest.mark.asyncio
    async def test_add_then_read_back(self, ledger, clock):
        tx_id = await ledger.add_transaction(draft("1500.50", notes="Lunch", app="gopay"))

        [tx] = await ledger.get_all_transactions()
        assert tx.id == tx_id
        assert tx.amount == Decimal("1500.50")
        assert tx.category == "Food"
        assert tx.timestamp == clock.now
        assert tx.notes == "Lunch"
        assert tx.app == "gopay"

    @pytest.mark.asyncio
    async def test_ids_are_fresh(self, ledger):
        first = await ledger.add_transaction(draft("1"))
        second = await ledger.add_transaction(draft("2"))
        assert second > first

    @pytest.mark.asyncio
    async def test_backdated_draft_is_stamped_at_midnight(self, ledger):
        await ledger.add_transaction(draft("100", on=date(2024, 6, 1)))
        [tx] = await ledger.get_all_transactions()
        assert tx.timestamp == ms(2024, 6, 1)

    @pytest.mark.asyncio
    async def test_unknown_category_is_accepted(self, ledger):
        """Transactions reference categories by name only."""
        await ledger.add_transaction(draft("100", category="Gifts"))
        assert [tx.category for tx in await ledger.get_all_transactions()] == ["Gifts"]

    @pytest.mark.asyncio
    async def test_subscriber_sees_committed_row(self, ledger):
        seen = []

        async def on_change():
            seen.append(len(await ledger.get_all_transactions()))

        ledger.subscribe(on_change)
        await ledger.add_transaction(draft("100"))
        await ledger.add_transaction(draft("200"))
        assert seen == [1, 2]

    @pytest.mark.asyncio
    async def test_unsubscribed_listener_is_not_called(self, ledger):
        calls = []
        unsubscribe = ledger.subscribe(lambda: calls.append(1))
        await ledger.add_transaction(draft("100"))
        unsubscribe()
        await ledger.add_transaction(draft("100"))
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_fail_the_write(self, ledger):
        def broken():
            raise RuntimeError("listener bug")

        ledger.subscribe(broken)
        await ledger.add_transaction(draft("100"))
        assert len(await ledger.get_all_transactions()) == 1

    @pytest.mark.asyncio
    async def test_failed_write_emits_no_signal(self, clock):
        store = FailingStore(MEMORY, schema_version=2)
        await store.open()
        try:
            ledger = Ledger(store, clock=clock, tz=WIB)
            calls = []
            ledger.subscribe(lambda: calls.append(1))

            with pytest.raises(WriteFailed):
                await ledger.add_transaction(draft("100"))
            assert calls == []
            assert await ledger.get_all_transactions() == []
        finally:
            await store.close()


class TestQueries:

    @pytest.mark.asyncio
    async def test_range_is_half_open(self, ledger, clock):
        for hour in (9, 10, 11):
            clock.now = ms(2024, 6, 12, hour)
            await ledger.add_transaction(draft(str(hour)))

        txs = await ledger.get_transactions_in_range(ms(2024, 6, 12, 9), ms(2024, 6, 12, 11))
        assert [tx.amount for tx in txs] == [Decimal("9"), Decimal("10")]

    @pytest.mark.asyncio
    async def test_range_is_ordered_by_timestamp(self, ledger, clock):
        await ledger.add_transaction(draft("1"))
        await ledger.add_transaction(draft("2", on=date(2024, 6, 1)))

        txs = await ledger.get_transactions_in_range(0, ms(2025, 1, 1))
        assert [tx.amount for tx in txs] == [Decimal("2"), Decimal("1")]

    @pytest.mark.asyncio
    async def test_by_category(self, ledger):
        await ledger.add_transaction(draft("1500.50", "Food"))
        await ledger.add_transaction(draft("7000", "Transport"))
        await ledger.add_transaction(draft("2000", "Food"))

        food = await ledger.get_transactions_by_category("Food")
        assert [tx.amount for tx in food] == [Decimal("1500.50"), Decimal("2000")]
        assert await ledger.get_transactions_by_category("Shopping") == []

    @pytest.mark.asyncio
    async def test_food_total_scenario(self, ledger):
        await ledger.add_transaction(draft("1500.50", "Food"))
        await ledger.add_transaction(draft("2000", "Food"))

        totals = sum_by_category(await ledger.get_all_transactions())
        assert totals == {"Food": Decimal("3500.50")}

    @pytest.mark.asyncio
    async def test_week_buckets_through_the_ledger(self, ledger, clock):
        entries = [
            (ms(2024, 6, 10, 8, 0), date(2024, 6, 10), "10000"),
            (ms(2024, 6, 12, 12, 0), date(2024, 6, 12), "25000"),
            (ms(2024, 6, 16, 23, 0), date(2024, 6, 16), "5000"),
        ]
        for now, on, amount in entries:
            clock.now = now
            await ledger.add_transaction(draft(amount, on=on))
        # Outside the week
        clock.now = ms(2024, 6, 17, 0, 0)
        await ledger.add_transaction(draft("999", on=date(2024, 6, 17)))

        window = week_window(ms(2024, 6, 12, 15, 0), WIB)
        txs = await ledger.get_transactions_in_window(window)
        buckets = sum_by_bucket(txs, lambda ts: bucket_of_week(ts, WIB), 7)
        assert buckets == [Decimal(v) for v in (10000, 0, 25000, 0, 0, 0, 5000)]


class TestCategories:

    @pytest.mark.asyncio
    async def test_seeded_categories(self, ledger):
        assert [c.name for c in await ledger.get_categories()] == list(DEFAULT_CATEGORIES)

    @pytest.mark.asyncio
    async def test_add_category_publishes(self, ledger):
        calls = []
        ledger.notifier.subscribe(CATEGORY_ADDED, lambda: calls.append(1))

        await ledger.add_category("Rent")
        assert calls == [1]
        assert [c.name for c in await ledger.get_categories()][-1] == "Rent"

    @pytest.mark.asyncio
    async def test_duplicate_category_publishes_nothing(self, ledger):
        calls = []
        ledger.notifier.subscribe(CATEGORY_ADDED, lambda: calls.append(1))

        with pytest.raises(DuplicateCategory):
            await ledger.add_category("Food")
        assert calls == []


class TestLoggingNeverFailsAWrite:
    """A committed write is reported as a success whatever the audit log does."""

    LONG_NAME = "C" * 600

    @pytest.mark.asyncio
    async def test_long_category_transaction(self, ledger):
        calls = []
        ledger.subscribe(lambda: calls.append(1))

        tx_id = await ledger.add_transaction(draft("1500", category=self.LONG_NAME))

        [tx] = await ledger.get_all_transactions()
        assert tx.id == tx_id
        assert tx.category == self.LONG_NAME
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_long_category_name(self, ledger):
        calls = []
        ledger.notifier.subscribe(CATEGORY_ADDED, lambda: calls.append(1))

        category_id = await ledger.add_category(self.LONG_NAME)

        matching = [c for c in await ledger.get_categories() if c.name == self.LONG_NAME]
        assert [c.id for c in matching] == [category_id]
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_broken_audit_builder(self, ledger, monkeypatch):
        def broken(*args):
            raise RuntimeError("cannot build event")

        monkeypatch.setattr(AuditEventBuilder, "transaction_added", staticmethod(broken))
        calls = []
        ledger.subscribe(lambda: calls.append(1))

        tx_id = await ledger.add_transaction(draft("100"))
        assert [tx.id for tx in await ledger.get_all_transactions()] == [tx_id]
        assert calls == [1]


class TestCreateLedger:

    @pytest.mark.asyncio
    async def test_opens_and_seeds(self, tmp_path):
        settings = LedgerSettings(database_path=str(tmp_path / "ledger.db"))
        ledger = await create_ledger(settings, clock=FakeClock(ms(2024, 6, 12, 15, 0)))
        try:
            assert ledger.store.is_open
            assert len(await ledger.get_categories()) == len(DEFAULT_CATEGORIES)
        finally:
            await ledger.close()
        assert not ledger.store.is_open

    @pytest.mark.asyncio
    async def test_second_session_keeps_data_and_does_not_reseed(self, tmp_path):
        settings = LedgerSettings(database_path=str(tmp_path / "ledger.db"), timezone="Asia/Jakarta")
        clock = FakeClock(ms(2024, 6, 12, 15, 0))

        ledger = await create_ledger(settings, clock=clock)
        await ledger.add_transaction(draft("1500.50"))
        await ledger.close()

        ledger = await create_ledger(settings, clock=clock)
        try:
            [tx] = await ledger.get_all_transactions()
            assert tx.timestamp == clock.now
            assert len(await ledger.get_categories()) == len(DEFAULT_CATEGORIES)
        finally:
            await ledger.close()

    @pytest.mark.asyncio
    async def test_custom_seed_list(self, tmp_path):
        settings = LedgerSettings(
            database_path=str(tmp_path / "ledger.db"),
            default_categories=["Coffee", "Books"],
        )
        ledger = await create_ledger(settings)
        try:
            assert [c.name for c in await ledger.get_categories()] == ["Coffee", "Books"]
        finally:
            await ledger.close()
