"""Limits and defaults used throughout the exchange."""

SHORT_SELL_BORROW_LIMIT = 50
BID_LIMIT = 50
ASK_LIMIT = 50
BUY_LIMIT = 30
MINIMUM_CASH_LIMIT = 0
BUY_FROM_EXCHANGE_LIMIT = 20
ORDER_PRICE_WINDOW = 20
MINIMUM_ORDER_PRICE = 10
ORDER_FEE_PERCENT = 3
STOCK_AVERAGE_PERCENT = 1
MAX_AVERAGE_STOCK_COUNT = 3

STARTING_CASH = 200000

MORTGAGE_RETRIEVE_RATE = 90
MORTGAGE_DEPOSIT_RATE = 80

MARKET_EVENT_COUNT = 10
MY_ASK_COUNT = 10
MY_BID_COUNT = 10
GET_NOTIFICATION_COUNT = 10
GET_TRANSACTION_COUNT = 10
LEADERBOARD_COUNT = 10