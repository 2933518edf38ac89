"""
Purpose: Storage boundary for orders.
What it does:
- OrderRepository: the interface the state machine and adapter depend on
- InMemoryOrderRepository: dict-backed implementation with the same
  optimistic version check the ORM implementation performs

put(order, expected_version) is a compare-and-set: it only succeeds when the
stored version still equals `expected_version`, then stores the order with
version + 1. Anything else is a Conflict.

Rule: Repository owns versions, the state machine owns transitions.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Protocol

from common.errors import Conflict, NotFound
from .models import Order, OrderStatus, utcnow


class OrderRepository(Protocol):
    def get(self, order_id: str) -> Optional[Order]:
        ...

    def put(self, order: Order, expected_version: Optional[int]) -> Order:
        """
        Store `order`. `expected_version=None` means "must not exist yet".
        Returns the stored snapshot (with its new version).
        """
        ...

    def list(self, *, status: Optional[OrderStatus] = None) -> List[Order]:
        ...


@dataclass
class InMemoryOrderRepository:
    """
    In-memory order store. Snapshots in and out are deep copies so callers can
    never reach the stored objects.
    """
    _orders: Dict[str, Order] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, order_id: str) -> Optional[Order]:
        with self._lock:
            order = self._orders.get(order_id)
            return copy.deepcopy(order) if order else None

    def require(self, order_id: str) -> Order:
        order = self.get(order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")
        return order

    def put(self, order: Order, expected_version: Optional[int]) -> Order:
        with self._lock:
            stored = self._orders.get(order.id)

            if expected_version is None:
                if stored is not None:
                    raise Conflict(f"Order {order.id} already exists")
            elif stored is None:
                raise NotFound(f"Order {order.id} not found")
            elif stored.version != expected_version:
                raise Conflict(
                    f"Order {order.id} was modified concurrently "
                    f"(expected version {expected_version}, found {stored.version})"
                )

            new_version = 1 if stored is None else stored.version + 1
            saved = replace(copy.deepcopy(order), version=new_version, updated_at=utcnow())
            self._orders[order.id] = saved
            return copy.deepcopy(saved)

    def list(self, *, status: Optional[OrderStatus] = None) -> List[Order]:
        with self._lock:
            orders = [copy.deepcopy(order) for order in self._orders.values()]
        if status is not None:
            orders = [order for order in orders if order.status == status]
        return orders
