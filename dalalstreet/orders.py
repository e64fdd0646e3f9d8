"""Ask and bid orders, and an in-memory store of them."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Generic, TypeVar

from dalalstreet.constants import MY_ASK_COUNT, MY_BID_COUNT

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class OrderType(IntEnum):
    """Kind of an order."""

    LIMIT = 0
    MARKET = 1
    STOPLOSS = 2
    STOPLOSS_ACTIVE = 3

    def __str__(self) -> str:
        return _ORDER_TYPE_NAMES[self]


_ORDER_TYPE_NAMES = {
    OrderType.LIMIT: "Limit",
    OrderType.MARKET: "Market",
    OrderType.STOPLOSS: "StopLoss",
    OrderType.STOPLOSS_ACTIVE: "StopLossActive",
}
_ORDER_TYPES_BY_NAME = {name: ot for ot, name in _ORDER_TYPE_NAMES.items()}

# Names used when an order is serialised; an active stoploss has no entry
# and falls back to the zero value, LIMIT.
_EXPORT_NAMES = {
    OrderType.LIMIT: "LIMIT",
    OrderType.MARKET: "MARKET",
    OrderType.STOPLOSS: "STOPLOSS",
}


def parse_order_type(value: str | bytes) -> OrderType:
    """Parse a stored order type name such as ``"Limit"``."""
    text = value.decode() if isinstance(value, (bytes, bytearray)) else value
    try:
        return _ORDER_TYPES_BY_NAME[text]
    except KeyError:
        raise ValueError(f"Invalid value for OrderType. Got {text}") from None


class AlreadyClosedError(Exception):
    """Raised when closing an order that is already closed."""

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order#{order_id} is already closed. Cannot cancel now.")


@dataclass(eq=False)
class Order:
    """Fields common to asks and bids."""

    user_id: int = 0
    stock_id: int = 0
    order_type: OrderType = OrderType.LIMIT
    stock_quantity: int = 0
    price: int = 0
    created_at: str = ""
    id: int = 0
    stock_quantity_fulfilled: int = 0
    is_closed: bool = False
    updated_at: str = ""
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def unfulfilled(self) -> int:
        """Quantity still to be traded."""
        return self.stock_quantity - self.stock_quantity_fulfilled

    def trigger_stoploss(self) -> bool:
        """Turn a stoploss order into an active stoploss.

        Returns True if the order changed; other order types are left alone.
        """
        with self.lock:
            if self.order_type != OrderType.STOPLOSS:
                logger.error(
                    "Called trigger_stoploss on order of type %s", self.order_type
                )
                return False
            self.order_type = OrderType.STOPLOSS_ACTIVE
            self.updated_at = _now_iso()
        return True

    def close(self) -> None:
        """Mark the order closed; raises AlreadyClosedError if it was."""
        with self.lock:
            if self.is_closed:
                raise AlreadyClosedError(self.id)
            self.is_closed = True
            self.updated_at = _now_iso()

    def to_dict(self) -> dict:
        """Serialisable view of the order."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "stock_id": self.stock_id,
            "price": self.price,
            "order_type": _EXPORT_NAMES.get(self.order_type, "LIMIT"),
            "stock_quantity": self.stock_quantity,
            "stock_quantity_fulfilled": self.stock_quantity_fulfilled,
            "is_closed": self.is_closed,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(eq=False)
class Ask(Order):
    """A sell order."""


@dataclass(eq=False)
class Bid(Order):
    """A buy order."""


O = TypeVar("O", bound=Order)


class OrderStore(Generic[O]):
    """Thread-safe store of orders of one kind, keyed by id."""

    def __init__(self, page_size: int = MY_ASK_COUNT):
        self._orders: dict[int, O] = {}
        self._next_id = 1
        self._page_size = page_size
        self._lock = threading.Lock()

    @classmethod
    def for_bids(cls) -> "OrderStore[Bid]":
        return cls(page_size=MY_BID_COUNT)

    def add(self, order: O) -> O:
        """Store a new order, stamping its times and assigning an id if it has none."""
        order.created_at = _now_iso()
        order.updated_at = order.created_at
        with self._lock:
            if order.id == 0:
                order.id = self._next_id
            self._next_id = max(self._next_id, order.id + 1)
            self._orders[order.id] = order
        return order

    def get(self, order_id: int) -> O:
        """Return the order with this id; raises KeyError if there is none."""
        with self._lock:
            try:
                return self._orders[order_id]
            except KeyError:
                raise KeyError(f"Order with id {order_id} does not exist") from None

    def all_open(self) -> list[O]:
        """Every order not yet closed, by id."""
        with self._lock:
            return [o for _, o in sorted(self._orders.items()) if not o.is_closed]

    def open_orders(self, user_id: int) -> list[O]:
        """A user's open orders, by id."""
        return [o for o in self.all_open() if o.user_id == user_id]

    def closed_orders(self, user_id: int, last_id: int, count: int) -> tuple[bool, list[O]]:
        """A page of a user's closed orders, newest first.

        A zero count means the default page size; larger counts are capped at it.
        A non-zero last_id restricts the page to ids no greater than it.
        Returns whether more may exist, and the page.
        """
        count = self._page_size if count == 0 else min(count, self._page_size)
        with self._lock:
            matching = [
                o
                for oid, o in sorted(self._orders.items(), reverse=True)
                if o.user_id == user_id
                and o.is_closed
                and (last_id == 0 or oid <= last_id)
            ]
        page = matching[:count]
        return len(page) >= count, page