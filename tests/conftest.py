"""
Pytest configuration.

Every test gets its own in-memory ledger and a clean settings cache,
so nothing leaks between tests through the environment or a shared
database file.
"""

import os

import pytest
import pytest_asyncio

from pocketpal.config import get_settings
from pocketpal.orchestrator import Ledger
from pocketpal.services.categories import CategoryRegistry
from pocketpal.services.storage import MEMORY, SQLiteLedgerStore
from tests.helpers import WIB, FakeClock, ms


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Ignore any POCKETPAL_* variables or .env file from the developer's shell."""
    for key in list(os.environ):
        if key.startswith("POCKETPAL_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def store():
    """An opened, empty in-memory store at the current schema version."""
    store = SQLiteLedgerStore(MEMORY, schema_version=2)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def clock() -> FakeClock:
    # Wednesday 12 June 2024, 15:00 WIB
    return FakeClock(ms(2024, 6, 12, 15, 0))


@pytest_asyncio.fixture
async def ledger(store, clock) -> Ledger:
    """A seeded ledger on the in-memory store, pinned to WIB and the fake clock."""
    registry = CategoryRegistry(store)
    await registry.ensure_seeded()
    return Ledger(store, registry=registry, clock=clock, tz=WIB)
