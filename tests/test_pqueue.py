import random
import threading

from dalalstreet.orders import Ask, Bid, OrderType
from dalalstreet.pqueue import OrderPQueue, PQType, ask_comparator, bid_comparator


def make_ask(user_id, stock_id, ot, qty, price, placed_at):
    return Ask(user_id=user_id, stock_id=stock_id, order_type=ot,
               stock_quantity=qty, price=price, created_at=placed_at)


def make_bid(user_id, stock_id, ot, qty, price, placed_at):
    return Bid(user_id=user_id, stock_id=stock_id, order_type=ot,
               stock_quantity=qty, price=price, created_at=placed_at)


CASES = [
    (OrderType.LIMIT, 5, 100, "2017-12-29T01:00:00Z"),
    (OrderType.LIMIT, 2, 800, "2017-12-29T02:00:00Z"),
    (OrderType.MARKET, 3, 500, "2017-12-29T03:00:00Z"),
    (OrderType.STOPLOSS_ACTIVE, 11, 400, "2017-12-29T04:00:00Z"),
    (OrderType.LIMIT, 10, 100, "2017-12-29T05:00:00Z"),
]


def test_bid_queue_init():
    pq = OrderPQueue(PQType.MAXPQ)
    assert len(pq) == 0
    assert pq.empty() is True
    assert pq.comparator is bid_comparator


def test_ask_queue_init():
    pq = OrderPQueue(PQType.MINPQ)
    assert len(pq) == 0
    assert pq.comparator is ask_comparator


def _drain(pq):
    out = []
    while True:
        o = pq.pop()
        if o is None:
            return out
        out.append(o)


def test_bid_push_and_pop_protects_max_order():
    pq = OrderPQueue(PQType.MAXPQ)
    for ot, qty, price, at in CASES:
        pq.push(make_bid(2, 1, ot, qty, price, at))
    popped = _drain(pq)
    assert [b.price for b in popped] == [500, 400, 800, 100, 100]
    assert [b.stock_quantity for b in popped] == [3, 11, 2, 10, 5]


def test_bid_push_concurrently_protects_max_order():
    pq = OrderPQueue(PQType.MAXPQ)
    threads = [
        threading.Thread(target=pq.push, args=(make_bid(2, 1, ot, qty, price, at),))
        for ot, qty, price, at in CASES
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    popped = _drain(pq)
    assert [b.price for b in popped] == [500, 400, 800, 100, 100]
    assert [b.stock_quantity for b in popped] == [3, 11, 2, 10, 5]


def test_ask_push_and_pop_protects_min_order():
    pq = OrderPQueue(PQType.MINPQ)
    for ot, qty, price, at in CASES:
        pq.push(make_ask(2, 1, ot, qty, price, at))
    popped = _drain(pq)
    assert [a.price for a in popped] == [500, 400, 100, 100, 800]
    assert [a.stock_quantity for a in popped] == [3, 11, 10, 5, 2]


def test_ask_push_concurrently_protects_min_order():
    pq = OrderPQueue(PQType.MINPQ)
    threads = [
        threading.Thread(target=pq.push, args=(make_ask(2, 1, ot, qty, price, at),))
        for ot, qty, price, at in CASES
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    popped = _drain(pq)
    assert [a.price for a in popped] == [500, 400, 100, 100, 800]
    assert [a.stock_quantity for a in popped] == [3, 11, 10, 5, 2]


def test_bid_head_returns_max_element():
    pq = OrderPQueue(PQType.MAXPQ)
    pq.push(make_bid(2, 1, OrderType.LIMIT, 5, 100, "2017-12-29T01:00:00Z"))
    pq.push(make_bid(2, 1, OrderType.LIMIT, 11, 400, "2017-12-29T02:00:00Z"))
    top = pq.head()
    assert len(pq) == 2
    assert top.price == 400
    assert top.stock_quantity == 11


def test_ask_head_returns_min_element():
    pq = OrderPQueue(PQType.MINPQ)
    pq.push(make_ask(2, 1, OrderType.LIMIT, 5, 100, "2017-12-29T01:00:00Z"))
    pq.push(make_ask(2, 1, OrderType.LIMIT, 11, 400, "2017-12-29T02:00:00Z"))
    top = pq.head()
    assert len(pq) == 2
    assert top.price == 100
    assert top.stock_quantity == 5


def test_empty_queue_pop_and_head_return_none():
    pq = OrderPQueue(PQType.MINPQ)
    assert pq.pop() is None
    assert pq.head() is None


def test_head_does_not_remove():
    pq = OrderPQueue(PQType.MAXPQ)
    bid = make_bid(1, 1, OrderType.LIMIT, 1, 10, "")
    pq.push(bid)
    assert pq.head() is bid
    assert len(pq) == 1
    assert pq.pop() is bid
    assert pq.empty() is True


def test_priority_uses_price_at_push_time():
    pq = OrderPQueue(PQType.MAXPQ)
    low = make_bid(1, 1, OrderType.LIMIT, 1, 10, "")
    high = make_bid(1, 1, OrderType.LIMIT, 1, 20, "")
    pq.push(low)
    pq.push(high)
    low.price = 1000
    pq.push(make_bid(1, 1, OrderType.LIMIT, 1, 15, ""))
    assert pq.pop() is high


def test_random_orders_pop_in_priority_order():
    rng = random.Random(1234)
    for pq_type in (PQType.MAXPQ, PQType.MINPQ):
        pq = OrderPQueue(pq_type)
        orders = []
        for n in range(200):
            ot = rng.choice([OrderType.LIMIT, OrderType.MARKET, OrderType.STOPLOSS_ACTIVE])
            o = make_bid(1, 1, ot, rng.randint(1, 20), rng.randint(1, 50),
                         f"2017-12-29T{n // 60:02d}:{n % 60:02d}:00Z")
            orders.append(o)
            pq.push(o)
        popped = _drain(pq)
        assert len(popped) == len(orders)
        assert set(map(id, popped)) == set(map(id, orders))
        for first, second in zip(popped, popped[1:]):
            assert pq.comparator(first, second) is False