"""
Category Registry

Keeps category names unique and seeds the default set exactly once.

DESIGN DECISION: Seeding is check-then-insert, one insert per name.
That is only safe because the ledger has a single writer per session
and ``ensure_seeded`` is called once at startup. A multi-writer store
would need an atomic insert-if-absent instead.
"""

from typing import Optional, Sequence

from pocketpal.audit import AuditLogger
from pocketpal.config import DEFAULT_CATEGORIES
from pocketpal.models.ledger import Category
from pocketpal.services.storage import (
    DuplicateCategory,
    DuplicateKey,
    LedgerStoreInterface,
)


COLLECTION = "categories"


class CategoryRegistry:
    """Category reads and writes on top of the ledger store."""

    def __init__(
        self,
        store: LedgerStoreInterface,
        defaults: Sequence[str] = DEFAULT_CATEGORIES,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._defaults = tuple(defaults)
        self._audit = audit_logger or AuditLogger()

    @property
    def defaults(self) -> tuple[str, ...]:
        return self._defaults

    async def ensure_seeded(self) -> list[int]:
        """
        Insert the default categories if there are no categories yet.

        Returns:
            Ids of the inserted categories (empty if already seeded)
        """
        existing = await self._store.get_all(COLLECTION)
        if existing:
            return []

        ids = []
        for name in self._defaults:
            ids.append(await self._store.insert(COLLECTION, {"name": name}))
        self._audit.log_categories_seeded(list(self._defaults))
        return ids

    async def list_categories(self) -> list[Category]:
        """All categories in insertion order."""
        records = await self._store.get_all(COLLECTION)
        return [Category.from_record(record) for record in records]

    async def add_category(self, name: str) -> int:
        """
        Add a category.

        Args:
            name: Category name; surrounding whitespace is stripped

        Returns:
            The new category's id

        Raises:
            ValueError: If the name is empty
            DuplicateCategory: If the name already exists
            WriteFailed: On storage I/O failure
        """
        name = name.strip()
        if not name:
            raise ValueError("Category name cannot be empty")

        try:
            category_id = await self._store.insert(COLLECTION, {"name": name})
        except DuplicateKey as e:
            self._audit.log_duplicate_category(name)
            raise DuplicateCategory(name) from e

        self._audit.log_category_added(category_id, name)
        return category_id
