# dalalstreet

The trading core of a stock-market game. It matches buy orders (bids)
against sell orders (asks) for each stock, keeps market depth up to date,
activates stop-loss orders when a trade crosses their price, ranks players on
a daily leaderboard and analyses the graph of trades between players.

It uses only the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `dalalstreet.constants`: game limits and page sizes, such as
  `STARTING_CASH`, `MY_ASK_COUNT`, `MY_BID_COUNT` and `LEADERBOARD_COUNT`.
- `dalalstreet.orders`: the `Ask` and `Bid` orders (both `Order`s), with
  `unfulfilled`, `trigger_stoploss`, `close` and `to_dict`; `OrderType`
  (`LIMIT`, `MARKET`, `STOPLOSS`, `STOPLOSS_ACTIVE`, whose string forms are
  `Limit`, `Market`, `StopLoss` and `StopLossActive`); `parse_order_type`,
  which raises `ValueError` for an unknown name; `AlreadyClosedError`, raised
  when closing an order twice; and `OrderStore`, a thread-safe in-memory store
  with `add`, `get`, `all_open`, `open_orders` and paged `closed_orders`
  (newest first, page size capped at the default).
- `dalalstreet.gamestate`: `GameState` updates (market open or closed,
  dividends, OTP verification, bankruptcy, user blocks, referral and reward
  credits, daily challenge status) and their dictionary form through
  `GameState.to_dict`, which raises `ValueError` if the payload for the update
  type is missing.
- `dalalstreet.helpers`: `is_market`, `is_order_matching` and
  `get_trade_price_and_qty`.
- `dalalstreet.pqueue`: `OrderPQueue`, a thread-safe binary heap with `push`,
  `pop`, `head`, `empty` and `len()`. `PQType.MAXPQ` orders it by
  `bid_comparator` (higher price first), `PQType.MINPQ` by `ask_comparator`
  (lower price first). In both, market and active stop-loss orders come first,
  oldest first, and at equal price the larger quantity comes first.
- `dalalstreet.orderbook`: `OrderBook` for one stock, with its
  `MarketDepthStream` (open quantity per price on each side, market-order
  totals and the latest trades), `Trade` and `FillStatus`.
- `dalalstreet.dispatcher`: `OrderDispatcher`, which parks untriggered
  stop-losses and hands every other new order to a single worker thread per
  stock, in arrival order. `start_stock_matching` clears the orders already in
  the book before starting the thread; `stop` ends it.
- `dalalstreet.matching_engine`: `MatchingEngine`, which routes orders to the
  book of their stock, and `create_matching_engine`, which builds and starts
  one book per stock. The engine is also a context manager that stops
  matching on exit.
- `dalalstreet.leaderboard`: `end_of_day_values`,
  `compute_daily_leaderboard` (gains since the last close; equal totals share
  a rank) and `get_daily_leaderboard` (a page, the user's own row and the row
  count; raises `LookupError` if the user has no row).
- `dalalstreet.graphs`: `strongly_connected_components` and
  `degree_one_volumes` over the trades between players, given as `TradeEdge`s.

## Example

```python
from dalalstreet.orders import Bid, OrderType
from dalalstreet.pqueue import OrderPQueue, PQType

bids = OrderPQueue(PQType.MAXPQ)
bids.push(Bid(user_id=2, stock_id=1, order_type=OrderType.LIMIT,
              stock_quantity=5, price=100, created_at="2017-12-29T01:00:00Z"))
bids.push(Bid(user_id=2, stock_id=1, order_type=OrderType.LIMIT,
              stock_quantity=2, price=800, created_at="2017-12-29T02:00:00Z"))
print(bids.pop().price)  # 800
```

## Running the matching engine

`create_matching_engine` is given the stock ids, the open asks and bids, a
mapping from stock id to its recent `Trade`s, a function returning a
`MarketDepthStream` for a stock, a `fill_order(ask, bid, price, quantity)`
function that carries out a trade and returns `(ask_status, bid_status,
trade_or_None)`, and a function returning a stock's current price. Orders then
go in through `add_ask_order` and `add_bid_order`, and cancellations through
`cancel_ask_order` and `cancel_bid_order`. Call `stop`, or use the engine in a
`with` block, when you are done.

## What this package does not do

It keeps no persistent storage: orders, users, cash and holdings live only in
memory, and settling a trade is left to the `fill_order` function you supply.
It has no server, no network API, no push notifications and no command-line
program; it is a library to build those on.