"""Serialises incoming orders for one stock onto a single matching thread."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional

from dalalstreet.orderbook import OrderBook
from dalalstreet.orders import Ask, Bid, Order, OrderType

logger = logging.getLogger(__name__)

StockPrice = Callable[[int], int]

_Job = tuple[Callable[[Order], None], Order, threading.Event]


class OrderDispatcher:
    """Feeds new orders for one stock to its order book, one at a time.

    Stoplosses whose trigger price has not yet been reached are parked in the
    book's stoploss queues directly; every other order is handed to the
    matching thread. While the thread runs, adding an order returns once the
    order has been matched or queued. Orders added while it is not running
    wait and are processed when matching starts.
    """

    def __init__(self, book: OrderBook, stock_price: StockPrice):
        self.book = book
        self._stock_price = stock_price
        self._incoming: "queue.Queue[Optional[_Job]]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def _submit(self, order: Order, process: Callable[[Order], None]) -> None:
        done = threading.Event()
        with self._lock:
            self._incoming.put((process, order, done))
            running = self._worker is not None
        if running:
            done.wait()

    def _run(self) -> None:
        while True:
            job = self._incoming.get()
            if job is None:
                return
            process, order, done = job
            try:
                process(order)
            except Exception:
                logger.exception("Failed to process order %d", order.id)
            finally:
                done.set()

    def add_ask_order(self, ask: Ask) -> None:
        """Place a new ask; it must not be partially filled."""
        if ask.order_type == OrderType.STOPLOSS:
            logger.debug("Adding stoploss ask %d", ask.id)
            if self._stock_price(ask.stock_id) <= ask.price:
                ask.trigger_stoploss()
                self._submit(ask, self.book.process_ask)
            else:
                self.book.ask_stoploss.push(ask)
            return
        self._submit(ask, self.book.process_ask)

    def add_bid_order(self, bid: Bid) -> None:
        """Place a new bid; it must not be partially filled."""
        if bid.order_type == OrderType.STOPLOSS:
            logger.debug("Adding stoploss bid %d", bid.id)
            if self._stock_price(bid.stock_id) >= bid.price:
                bid.trigger_stoploss()
                self._submit(bid, self.book.process_bid)
            else:
                self.book.bid_stoploss.push(bid)
            return
        self._submit(bid, self.book.process_bid)

    def cancel_ask_order(self, ask: Ask) -> None:
        """Remove a cancelled ask's open quantity from the depth."""
        self.book.cancel_ask_order(ask)

    def cancel_bid_order(self, bid: Bid) -> None:
        """Remove a cancelled bid's open quantity from the depth."""
        self.book.cancel_bid_order(bid)

    def start_stock_matching(self) -> None:
        """Match the orders already in the book, then start the matching thread.

        Returns once existing orders have been cleared. Raises RuntimeError if
        matching is already running.
        """
        with self._lock:
            if self._worker is not None:
                raise RuntimeError(f"Matching already running for stock {self.book.stock_id}")
            logger.info(
                "Starting stock %d with %d asks and %d bids",
                self.book.stock_id,
                len(self.book.asks),
                len(self.book.bids),
            )
            self.book.clear_existing_orders()
            worker = threading.Thread(
                target=self._run, name=f"matching-{self.book.stock_id}", daemon=True
            )
            self._worker = worker
            worker.start()

    def stop(self) -> None:
        """Stop the matching thread after the orders already handed to it."""
        with self._lock:
            worker = self._worker
            if worker is None:
                return
            self._worker = None
            self._incoming.put(None)
        worker.join()