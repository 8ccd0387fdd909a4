"""
Fee Calculator — Apportions a shared bill to one friend's order.
"""
from decimal import Decimal
from typing import Iterable, NamedTuple

HUNDRED = Decimal(100)


class FeeBreakdown(NamedTuple):
    subtotal: Decimal
    tax_amount: Decimal
    service_amount: Decimal
    delivery_share: Decimal
    total_amount: Decimal


def _dec(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary float expansion
    return Decimal(str(value))


class FeeCalculator:
    """Computes a friend's share of the bill. Pure, no rounding."""

    @staticmethod
    def subtotal(products: Iterable) -> Decimal:
        """Sum of unit_price × quantity over the friend's products."""
        return sum((_dec(p.unit_price) * int(p.quantity) for p in products), Decimal(0))

    @staticmethod
    def calculate(
        products: Iterable,
        tax_percentage=0,
        service_percentage=0,
        delivery_fee=0,
        number_of_friends: int = 1,
    ) -> FeeBreakdown:
        """Compute the cost breakdown for one friend.

        Tax and service are proportional to the friend's subtotal. The
        delivery fee is split evenly over the *expected* number of friends,
        whatever the order size and however many have actually joined.

        Args:
            products: Objects exposing ``unit_price`` and ``quantity``.
            tax_percentage: Session tax rate, 0-100.
            service_percentage: Session service rate, 0-100.
            delivery_fee: Session delivery fee.
            number_of_friends: Expected friend count of the session.

        Returns:
            FeeBreakdown with every component as an unrounded Decimal.
        """
        subtotal = FeeCalculator.subtotal(products)
        tax_amount = subtotal * _dec(tax_percentage or 0) / HUNDRED
        service_amount = subtotal * _dec(service_percentage or 0) / HUNDRED
        delivery_share = _dec(delivery_fee or 0) / Decimal(number_of_friends or 1)
        total_amount = subtotal + tax_amount + service_amount + delivery_share

        return FeeBreakdown(
            subtotal=subtotal,
            tax_amount=tax_amount,
            service_amount=service_amount,
            delivery_share=delivery_share,
            total_amount=total_amount,
        )
