"""Thread-safe binary heap priority queues of orders."""

from __future__ import annotations

import threading
from enum import IntEnum
from typing import Callable, Generic, Optional, TypeVar

from dalalstreet.helpers import is_market
from dalalstreet.orders import Order, OrderType

O = TypeVar("O", bound=Order)


class PQType(IntEnum):
    """Ordering of a priority queue."""

    MAXPQ = 0
    MINPQ = 1


class _Item:
    """A queued order with the price and quantity it had when pushed."""

    __slots__ = ("order", "price", "stock_quantity")

    def __init__(self, order: Order):
        self.order = order
        self.price = order.price
        self.stock_quantity = order.stock_quantity

    @property
    def order_type(self) -> OrderType:
        return self.order.order_type

    @property
    def created_at(self) -> str:
        return self.order.created_at


def bid_comparator(order1, order2) -> bool:
    """True if order1 has lower priority than order2 in a max-ordered queue.

    Market and active stoploss orders come first, older ones before newer;
    otherwise higher price wins, then higher quantity.
    """
    m1, m2 = is_market(order1.order_type), is_market(order2.order_type)
    if m1 and m2:
        return order2.created_at < order1.created_at
    if m1:
        return False
    if m2:
        return True
    if order1.price == order2.price:
        return order2.stock_quantity > order1.stock_quantity
    return order1.price < order2.price


def ask_comparator(order1, order2) -> bool:
    """True if order1 has lower priority than order2 in a min-ordered queue.

    Market and active stoploss orders come first, older ones before newer;
    otherwise lower price wins, then higher quantity.
    """
    m1, m2 = is_market(order1.order_type), is_market(order2.order_type)
    if m1 and m2:
        return order2.created_at < order1.created_at
    if m1:
        return False
    if m2:
        return True
    if order1.price == order2.price:
        return order2.stock_quantity > order1.stock_quantity
    return order1.price > order2.price


class OrderPQueue(Generic[O]):
    """Priority queue of orders, safe for use from several threads."""

    def __init__(self, pq_type: PQType = PQType.MAXPQ):
        self.pq_type = PQType(pq_type)
        self.comparator: Callable[[object, object], bool] = (
            bid_comparator if self.pq_type == PQType.MAXPQ else ask_comparator
        )
        self._items: list[_Item] = []
        self._lock = threading.Lock()

    def _less(self, i: int, j: int) -> bool:
        return self.comparator(self._items[i], self._items[j])

    def _swap(self, i: int, j: int) -> None:
        self._items[i], self._items[j] = self._items[j], self._items[i]

    def _swim(self, k: int) -> None:
        while k > 0:
            parent = (k - 1) // 2
            if not self._less(parent, k):
                break
            self._swap(parent, k)
            k = parent

    def _sink(self, k: int) -> None:
        n = len(self._items)
        while 2 * k + 1 < n:
            j = 2 * k + 1
            if j + 1 < n and self._less(j, j + 1):
                j += 1
            if not self._less(k, j):
                break
            self._swap(k, j)
            k = j

    def push(self, order: O) -> None:
        """Add an order, ranked by its current price and quantity."""
        with self._lock:
            self._items.append(_Item(order))
            self._swim(len(self._items) - 1)

    def pop(self) -> Optional[O]:
        """Remove and return the highest-priority order, or None if empty."""
        with self._lock:
            if not self._items:
                return None
            top = self._items[0]
            last = self._items.pop()
            if self._items:
                self._items[0] = last
                self._sink(0)
            return top.order

    def head(self) -> Optional[O]:
        """The highest-priority order without removing it, or None if empty."""
        with self._lock:
            return self._items[0].order if self._items else None

    def empty(self) -> bool:
        """Whether the queue holds no orders."""
        with self._lock:
            return not self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)