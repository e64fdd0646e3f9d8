"""Order book for a single stock: matching, trades, stoplosses and market depth."""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from dalalstreet.helpers import get_trade_price_and_qty, is_market, is_order_matching
from dalalstreet.orders import Ask, Bid, OrderType
from dalalstreet.pqueue import OrderPQueue, PQType

logger = logging.getLogger(__name__)


class FillStatus(Enum):
    """Outcome of an attempt to fill one side of a trade."""

    DONE = "done"
    UNDONE = "undone"
    ALREADY_CLOSED = "already_closed"


@dataclass(frozen=True)
class Trade:
    """A completed trade: the price, the (positive) quantity and when it happened."""

    price: int
    quantity: int
    created_at: str = ""


FillOrder = Callable[[Ask, Bid, int, int], "tuple[FillStatus, FillStatus, Optional[Trade]]"]
StockPrice = Callable[[int], int]


class MarketDepthStream:
    """Open quantity per price on each side of a stock's book, and recent trades.

    Market orders carry no meaningful price, so their quantity is kept as one
    total per side.
    """

    def __init__(self, stock_id: int = 0, max_trades: int = 20):
        self.stock_id = stock_id
        self.ask_depth: dict[int, int] = {}
        self.bid_depth: dict[int, int] = {}
        self.market_ask_quantity = 0
        self.market_bid_quantity = 0
        self.latest_trades: deque[Trade] = deque(maxlen=max_trades)
        self._lock = threading.Lock()

    def add_order(self, is_market: bool, is_ask: bool, price: int, quantity: int) -> None:
        """Record open quantity placed on one side of the book."""
        with self._lock:
            if is_market:
                if is_ask:
                    self.market_ask_quantity += quantity
                else:
                    self.market_bid_quantity += quantity
                return
            book = self.ask_depth if is_ask else self.bid_depth
            book[price] = book.get(price, 0) + quantity

    def close_order(self, is_market: bool, is_ask: bool, price: int, quantity: int) -> None:
        """Remove open quantity from one side of the book, never going below zero."""
        with self._lock:
            if is_market:
                if is_ask:
                    self.market_ask_quantity = self._reduced(self.market_ask_quantity, quantity)
                else:
                    self.market_bid_quantity = self._reduced(self.market_bid_quantity, quantity)
                return
            book = self.ask_depth if is_ask else self.bid_depth
            remaining = self._reduced(book.get(price, 0), quantity)
            if remaining:
                book[price] = remaining
            else:
                book.pop(price, None)

    def add_trade(self, price: int, quantity: int, created_at: str) -> None:
        """Record a trade among the latest trades."""
        with self._lock:
            self.latest_trades.append(Trade(price, quantity, created_at))

    def _reduced(self, current: int, quantity: int) -> int:
        if quantity > current:
            logger.warning(
                "Closing %d from depth holding %d for stock %d",
                quantity,
                current,
                self.stock_id,
            )
            return 0
        return current - quantity


class OrderBook:
    """Matches asks against bids for one stock.

    fill_order(ask, bid, price, quantity) carries out a trade: it updates the
    orders' fulfilled quantities and closed flags and returns the status of
    each side plus the Trade made, or None if no trade happened.
    stock_price(stock_id) gives the current price, used when two market
    orders meet.
    """

    def __init__(
        self,
        stock_id: int,
        depth: MarketDepthStream,
        fill_order: FillOrder,
        stock_price: StockPrice,
    ):
        self.stock_id = stock_id
        self.depth = depth
        self._fill_order = fill_order
        self._stock_price = stock_price
        self.asks: OrderPQueue[Ask] = OrderPQueue(PQType.MINPQ)
        self.bids: OrderPQueue[Bid] = OrderPQueue(PQType.MAXPQ)
        # Stoplosses trigger the opposite way round to limit and market orders.
        self.ask_stoploss: OrderPQueue[Ask] = OrderPQueue(PQType.MAXPQ)
        self.bid_stoploss: OrderPQueue[Bid] = OrderPQueue(PQType.MINPQ)

    def _add_ask_to_depth(self, ask: Ask) -> None:
        self.depth.add_order(is_market(ask.order_type), True, ask.price, ask.unfulfilled())

    def _add_bid_to_depth(self, bid: Bid) -> None:
        self.depth.add_order(is_market(bid.order_type), False, bid.price, bid.unfulfilled())

    def load_old_transactions(self, txs: Iterable[Trade]) -> None:
        """Replay past trades into the depth's trade history."""
        for tx in txs:
            self.depth.add_trade(tx.price, tx.quantity, tx.created_at)

    def load_old_ask(self, ask: Ask) -> None:
        """Queue a previously placed ask; stoplosses wait without touching the depth."""
        if ask.order_type == OrderType.STOPLOSS:
            logger.debug("Adding stoploss ask %d to the queue", ask.id)
            self.ask_stoploss.push(ask)
            return
        self.asks.push(ask)
        self._add_ask_to_depth(ask)

    def load_old_bid(self, bid: Bid) -> None:
        """Queue a previously placed bid; stoplosses wait without touching the depth."""
        if bid.order_type == OrderType.STOPLOSS:
            logger.debug("Adding stoploss bid %d to the queue", bid.id)
            self.bid_stoploss.push(bid)
            return
        self.bids.push(bid)
        self._add_bid_to_depth(bid)

    def cancel_ask_order(self, ask: Ask) -> None:
        """Remove a cancelled ask's open quantity from the depth.

        The order stays queued and is dropped when it next comes up for trading.
        """
        if ask.order_type == OrderType.STOPLOSS:
            return
        self.depth.close_order(is_market(ask.order_type), True, ask.price, ask.unfulfilled())

    def cancel_bid_order(self, bid: Bid) -> None:
        """Remove a cancelled bid's open quantity from the depth.

        The order stays queued and is dropped when it next comes up for trading.
        """
        if bid.order_type == OrderType.STOPLOSS:
            return
        self.depth.close_order(is_market(bid.order_type), False, bid.price, bid.unfulfilled())

    def _top_matching_bid(self, ask: Ask) -> tuple[Optional[Bid], Callable[[], None]]:
        """The best bid matching this ask, skipping the ask owner's own bids.

        The bid stays queued. The returned callable puts the skipped bids back.
        """
        skipped: list[Bid] = []
        top = self.bids.head()
        while top is not None and top.user_id == ask.user_id:
            skipped.append(self.bids.pop())
            top = self.bids.head()

        def add_back() -> None:
            for bid in skipped:
                self.bids.push(bid)

        if top is None or not is_order_matching(ask, top):
            add_back()
            return None, lambda: None
        return top, add_back

    def _top_matching_ask(self, bid: Bid) -> tuple[Optional[Ask], Callable[[], None]]:
        """The best ask matching this bid, skipping the bid owner's own asks.

        The ask stays queued. The returned callable puts the skipped asks back.
        """
        skipped: list[Ask] = []
        top = self.asks.head()
        while top is not None and top.user_id == bid.user_id:
            skipped.append(self.asks.pop())
            top = self.asks.head()

        def add_back() -> None:
            for ask in skipped:
                self.asks.push(ask)

        if top is None or not is_order_matching(top, bid):
            add_back()
            return None, lambda: None
        return top, add_back

    def process_ask(self, ask: Ask) -> None:
        """Trade an incoming ask against queued bids; queue whatever is left."""
        ask_done = False
        bid, add_back = self._top_matching_bid(ask)
        while bid is not None:
            ask_done, bid_done = self.make_trade(ask, bid, True, False)
            if bid_done:
                self.bids.pop()
            add_back()
            if not ask_done and not bid_done:
                logger.error("make_trade reported neither the ask nor the bid done")
                return
            if ask_done:
                return
            bid, add_back = self._top_matching_bid(ask)

        if not ask_done:
            self.asks.push(ask)
            self._add_ask_to_depth(ask)

    def process_bid(self, bid: Bid) -> None:
        """Trade an incoming bid against queued asks; queue whatever is left."""
        bid_done = False
        ask, add_back = self._top_matching_ask(bid)
        while ask is not None:
            ask_done, bid_done = self.make_trade(ask, bid, False, True)
            if ask_done:
                self.asks.pop()
            add_back()
            if not ask_done and not bid_done:
                logger.error("make_trade reported neither the ask nor the bid done")
                return
            if bid_done:
                return
            ask, add_back = self._top_matching_ask(bid)

        if not bid_done:
            self.bids.push(bid)
            self._add_bid_to_depth(bid)

    def make_trade(
        self, ask: Ask, bid: Bid, incoming_ask: bool, incoming_bid: bool
    ) -> tuple[bool, bool]:
        """Trade an ask against a bid and update the depth for queued orders.

        An incoming order has not been queued or added to the depth, so the
        depth is only adjusted for the other side(s). Returns whether the ask
        and whether the bid are finished and may be dropped from their queue;
        the caller handles the queues.
        """
        both_market = is_market(ask.order_type) and is_market(bid.order_type)
        stock_price = self._stock_price(ask.stock_id) if both_market else 0
        price, quantity = get_trade_price_and_qty(ask, bid, stock_price)
        ask_status, bid_status, trade = self._fill_order(ask, bid, price, quantity)

        if trade is not None:
            logger.info(
                "Trade made between ask %d and bid %d at price %d", ask.id, bid.id, trade.price
            )
            self.depth.add_trade(trade.price, trade.quantity, trade.created_at)
            if not incoming_bid:
                self.depth.close_order(is_market(bid.order_type), False, bid.price, trade.quantity)
            if not incoming_ask:
                self.depth.close_order(is_market(ask.order_type), True, ask.price, trade.quantity)
            self.trigger_stop_losses(trade)
        else:
            # An already-closed order was cancelled; its cancellation updates the depth.
            if not incoming_bid and bid_status != FillStatus.ALREADY_CLOSED:
                self.depth.close_order(
                    is_market(bid.order_type), False, bid.price, bid.unfulfilled()
                )
            if not incoming_ask and ask_status != FillStatus.ALREADY_CLOSED:
                self.depth.close_order(
                    is_market(ask.order_type), True, ask.price, ask.unfulfilled()
                )

        return ask_status != FillStatus.UNDONE, bid_status != FillStatus.UNDONE

    def trigger_stop_losses(self, trade: Trade) -> None:
        """Activate the stoplosses that the trade's price has crossed.

        Ask stoplosses at or above the price and bid stoplosses at or below it
        become active market orders in the regular queues.
        """
        top_ask = self.ask_stoploss.head()
        while top_ask is not None and trade.price <= top_ask.price:
            top_ask = self.ask_stoploss.pop()
            if not top_ask.trigger_stoploss():
                logger.error("Could not activate stoploss ask %d", top_ask.id)
            self.asks.push(top_ask)
            self.depth.add_order(True, True, top_ask.price, top_ask.stock_quantity)
            top_ask = self.ask_stoploss.head()

        top_bid = self.bid_stoploss.head()
        while top_bid is not None and trade.price >= top_bid.price:
            top_bid = self.bid_stoploss.pop()
            if not top_bid.trigger_stoploss():
                logger.error("Could not activate stoploss bid %d", top_bid.id)
            self.bids.push(top_bid)
            self.depth.add_order(True, False, top_bid.price, top_bid.stock_quantity)
            top_bid = self.bid_stoploss.head()

    def clear_existing_orders(self) -> None:
        """Trade queued bids against queued asks until no more match."""
        if self.bids.head() is None:
            return

        bid_top = self.bids.pop()
        ask_top, add_back = self._top_matching_ask(bid_top)

        while bid_top is not None and ask_top is not None:
            ask_done, bid_done = self.make_trade(ask_top, bid_top, False, False)
            add_back()
            if not ask_done and not bid_done:
                logger.error("make_trade reported neither the ask nor the bid done")
                return
            if ask_done:
                self.asks.pop()
            if bid_done:
                bid_top = self.bids.pop()
            if bid_top is not None:
                ask_top, add_back = self._top_matching_ask(bid_top)

        if bid_top is not None:
            self.bids.push(bid_top)