"""Rules shared by the matching engine for pairing and pricing orders."""

from __future__ import annotations

from dalalstreet.orders import Ask, Bid, OrderType


def is_market(order_type: OrderType) -> bool:
    """True for orders that trade at whatever price is available."""
    return order_type in (OrderType.MARKET, OrderType.STOPLOSS_ACTIVE)


def is_order_matching(ask: Ask, bid: Bid) -> bool:
    """Whether a trade between this ask and this bid is possible."""
    if is_market(bid.order_type) or is_market(ask.order_type):
        return True
    return bid.price >= ask.price


def get_trade_price_and_qty(ask: Ask, bid: Bid, stock_price: int) -> tuple[int, int]:
    """Price and quantity at which this ask and bid would trade.

    stock_price is the stock's current price, used when both orders are market orders.
    """
    quantity = min(ask.unfulfilled(), bid.unfulfilled())

    ask_market = is_market(ask.order_type)
    bid_market = is_market(bid.order_type)
    if ask_market and bid_market:
        price = stock_price
    elif ask_market:
        price = bid.price
    elif bid_market:
        price = ask.price
    elif ask.created_at < bid.created_at:
        price = ask.price
    else:
        price = bid.price
    return price, quantity