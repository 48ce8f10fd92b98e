# Overview: In-process recent-order store with change listeners, owned by the app factory.

from __future__ import annotations

import copy
import logging
import threading
from typing import Callable

from ..view_models import CanonicalOrder

logger = logging.getLogger(__name__)

Listener = Callable[[list[CanonicalOrder]], None]


class OrderStore:
    """
    Newest-first list of orders created in this process, with subscribers.

    Readers always get copies; the store's own list is never handed out.
    Listeners are called after every change with the current snapshot. A
    listener that raises is logged and skipped; the rest still run.
    """

    def __init__(self, max_orders: int | None = None):
        self._orders: list[CanonicalOrder] = []
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()
        self._max_orders = max_orders

    def get(self) -> list[CanonicalOrder]:
        with self._lock:
            return copy.deepcopy(self._orders)

    def get_by_id(self, order_id: str) -> CanonicalOrder | None:
        with self._lock:
            for order in self._orders:
                if order.id == order_id:
                    return copy.deepcopy(order)
        return None

    def count(self) -> int:
        with self._lock:
            return len(self._orders)

    def add(self, order: CanonicalOrder) -> None:
        with self._lock:
            # Re-adding an id replaces the earlier entry
            self._orders = [existing for existing in self._orders if existing.id != order.id]
            self._orders.insert(0, copy.deepcopy(order))
            if self._max_orders is not None:
                del self._orders[self._max_orders:]
        self._notify()

    def replace(self, order: CanonicalOrder) -> bool:
        """Swap in a newer version of a stored order, keeping its position."""
        with self._lock:
            for index, existing in enumerate(self._orders):
                if existing.id == order.id:
                    self._orders[index] = copy.deepcopy(order)
                    break
            else:
                return False
        self._notify()
        return True

    def clear(self) -> None:
        with self._lock:
            self._orders = []
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it again."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self.get())
            except Exception:
                logger.exception("Order store listener %r failed", listener)
