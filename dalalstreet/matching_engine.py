"""The exchange's matching engine: one order book per stock."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Mapping

from dalalstreet.dispatcher import OrderDispatcher
from dalalstreet.orderbook import FillOrder, MarketDepthStream, OrderBook, Trade
from dalalstreet.orders import Ask, Bid

logger = logging.getLogger(__name__)


class MatchingEngine:
    """Routes orders to the order book of their stock."""

    def __init__(self, dispatchers: Mapping[int, OrderDispatcher]):
        self._dispatchers = dict(dispatchers)
        self.order_books: dict[int, OrderBook] = {
            sid: d.book for sid, d in self._dispatchers.items()
        }

    def _for(self, stock_id: int) -> OrderDispatcher:
        try:
            return self._dispatchers[stock_id]
        except KeyError:
            raise KeyError(f"No order book for stock {stock_id}") from None

    def add_ask_order(self, ask: Ask) -> None:
        """Place an ask in its stock's order book."""
        self._for(ask.stock_id).add_ask_order(ask)

    def add_bid_order(self, bid: Bid) -> None:
        """Place a bid in its stock's order book."""
        self._for(bid.stock_id).add_bid_order(bid)

    def cancel_ask_order(self, ask: Ask) -> None:
        """Remove a cancelled ask from its stock's order book."""
        self._for(ask.stock_id).cancel_ask_order(ask)

    def cancel_bid_order(self, bid: Bid) -> None:
        """Remove a cancelled bid from its stock's order book."""
        self._for(bid.stock_id).cancel_bid_order(bid)

    def stop(self) -> None:
        """Stop matching for every stock."""
        for dispatcher in self._dispatchers.values():
            dispatcher.stop()

    def __enter__(self) -> "MatchingEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


def create_matching_engine(
    stock_ids: Iterable[int],
    open_asks: Iterable[Ask],
    open_bids: Iterable[Bid],
    old_transactions: Mapping[int, Iterable[Trade]],
    depth_for: Callable[[int], MarketDepthStream],
    fill_order: FillOrder,
    stock_price: Callable[[int], int],
) -> MatchingEngine:
    """Build an order book per stock, load open orders and start matching.

    old_transactions maps a stock id to its recent trades. Returns once every
    book has cleared the orders it was loaded with. Raises KeyError for an
    open order of an unknown stock.
    """
    dispatchers: dict[int, OrderDispatcher] = {}
    for stock_id in stock_ids:
        book = OrderBook(stock_id, depth_for(stock_id), fill_order, stock_price)
        book.load_old_transactions(old_transactions.get(stock_id, ()))
        dispatchers[stock_id] = OrderDispatcher(book, stock_price)

    def book_of(stock_id: int) -> OrderBook:
        try:
            return dispatchers[stock_id].book
        except KeyError:
            raise KeyError(f"No order book for stock {stock_id}") from None

    for ask in open_asks:
        book_of(ask.stock_id).load_old_ask(ask)
    for bid in open_bids:
        book_of(bid.stock_id).load_old_bid(bid)

    starters = [
        threading.Thread(target=d.start_stock_matching) for d in dispatchers.values()
    ]
    for starter in starters:
        starter.start()
    for starter in starters:
        starter.join()

    logger.info("Started matching engine")
    return MatchingEngine(dispatchers)