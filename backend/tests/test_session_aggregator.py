from decimal import Decimal
from itertools import product as combinations
from types import SimpleNamespace

from order_splitter.services.session_aggregator import SessionAggregator


def friend(total, insta_pay, paid):
    return SimpleNamespace(total_amount=Decimal(str(total)), payment_method=insta_pay, has_paid=paid)


def test_empty_session_sums_to_zero():
    s = SessionAggregator.summarize([], total_order_amount=Decimal(150), expected_friends_count=3)
    assert s.total_paid_insta_pay == s.total_paid_cash == s.total_unpaid == 0
    assert s.friends_count == 0
    assert s.expected_friends_count == 3
    assert s.total_order_amount == Decimal(150)


def test_buckets_by_method_and_paid_state():
    friends = [
        friend("10.50", True, True),
        friend("20", False, True),
        friend("30", True, False),
        friend("40", False, False),
    ]
    s = SessionAggregator.summarize(friends, total_order_amount=Decimal(100), expected_friends_count=5)
    assert s.total_paid_insta_pay == Decimal("10.50")
    assert s.total_paid_cash == Decimal("20")
    assert s.total_unpaid == Decimal("70")
    assert s.friends_count == 4


def test_totals_partition_every_combination():
    amounts = ["1.10", "2.20", "3.30"]
    for flags in combinations([True, False], repeat=6):
        friends = [
            friend(amount, flags[2 * i], flags[2 * i + 1])
            for i, amount in enumerate(amounts)
        ]
        s = SessionAggregator.summarize(friends, total_order_amount=Decimal(0), expected_friends_count=3)
        assert s.total_paid_insta_pay + s.total_paid_cash + s.total_unpaid == Decimal("6.60")


def test_marking_paid_moves_amount_from_unpaid_to_cash():
    alice = friend("67.92", False, False)
    bob = friend("12", True, False)
    before = SessionAggregator.summarize([alice, bob], Decimal(150), 3)
    alice.has_paid = True
    after = SessionAggregator.summarize([alice, bob], Decimal(150), 3)

    assert after.total_paid_cash - before.total_paid_cash == Decimal("67.92")
    assert before.total_unpaid - after.total_unpaid == Decimal("67.92")
    assert after.total_paid_insta_pay == before.total_paid_insta_pay == 0
