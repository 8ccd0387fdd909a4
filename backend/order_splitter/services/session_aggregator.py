"""
Session Aggregator — Folds every friend's frozen share into a session summary.
"""
from decimal import Decimal
from typing import Iterable, NamedTuple


class SessionSummary(NamedTuple):
    total_order_amount: Decimal
    total_paid_insta_pay: Decimal
    total_paid_cash: Decimal
    total_unpaid: Decimal
    friends_count: int
    expected_friends_count: int


class SessionAggregator:
    """Payment totals by method and paid/unpaid state. Never persisted."""

    @staticmethod
    def summarize(friends: Iterable, total_order_amount, expected_friends_count: int) -> SessionSummary:
        """Build the summary for a session's friend list.

        Every friend lands in exactly one bucket: paid via InstaPay, paid in
        cash, or unpaid (whatever the method).
        """
        paid_insta_pay = Decimal(0)
        paid_cash = Decimal(0)
        unpaid = Decimal(0)
        count = 0

        for friend in friends:
            count += 1
            amount = friend.total_amount if isinstance(friend.total_amount, Decimal) else Decimal(str(friend.total_amount))
            if not friend.has_paid:
                unpaid += amount
            elif friend.payment_method:
                paid_insta_pay += amount
            else:
                paid_cash += amount

        return SessionSummary(
            total_order_amount=total_order_amount,
            total_paid_insta_pay=paid_insta_pay,
            total_paid_cash=paid_cash,
            total_unpaid=unpaid,
            friends_count=count,
            expected_friends_count=expected_friends_count,
        )
