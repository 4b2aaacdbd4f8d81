"""
Change Notification

A small publish/subscribe channel owned by the ledger. After a write
has committed, the ledger publishes a payload-free signal; every
subscriber re-reads whatever it needs from the store.

Signals never carry deltas, so a subscriber that falls behind only
has to re-read once to catch up. The notifier does not coalesce.
"""

import inspect
from typing import Awaitable, Callable, Dict, List, Optional, Union

from pocketpal.audit import AuditLogger


TRANSACTION_ADDED = "TRANSACTION_ADDED"
CATEGORY_ADDED = "CATEGORY_ADDED"

Listener = Callable[[], Union[None, Awaitable[None]]]


class ChangeNotifier:
    """Topic -> listeners registry with ordered, fault-isolated delivery."""

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._subscribers: Dict[str, List[Listener]] = {}
        self._audit = audit_logger or AuditLogger()

    def subscribe(self, name: str, handler: Listener) -> Callable[[], None]:
        """
        Register a listener for a topic.

        Returns:
            A callable that unsubscribes this listener
        """
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)
        return lambda: self.unsubscribe(name, handler)

    def unsubscribe(self, name: str, handler: Listener) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)

    def listener_count(self, name: str) -> int:
        return len(self._subscribers.get(name, []))

    async def publish(self, name: str) -> int:
        """
        Call every listener of a topic, in subscription order.

        Coroutine listeners are awaited. A listener that raises is
        logged and skipped; the remaining listeners still run.

        Returns:
            Number of listeners that completed without error
        """
        delivered = 0
        # Copy so a listener may unsubscribe itself while being called
        for handler in list(self._subscribers.get(name, [])):
            try:
                result = handler()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._audit.log_listener_failed(
                    name,
                    getattr(handler, "__name__", repr(handler)),
                    str(e),
                )
                continue
            delivered += 1
        return delivered
