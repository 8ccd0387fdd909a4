from decimal import Decimal
from types import SimpleNamespace

import pytest

from order_splitter.services.fee_calculator import FeeCalculator


def product(price, qty):
    return SimpleNamespace(unit_price=Decimal(str(price)), quantity=qty)


ORDER = [product(25, 2), product(3, 1)]


def test_worked_example():
    b = FeeCalculator.calculate(
        ORDER, tax_percentage=15, service_percentage=10, delivery_fee=5, number_of_friends=3
    )
    assert b.subtotal == Decimal("53")
    assert b.tax_amount == Decimal("7.95")
    assert b.service_amount == Decimal("5.3")
    assert round(b.delivery_share, 3) == Decimal("1.667")
    assert round(b.total_amount, 2) == Decimal("67.92")


def test_components_add_up_to_total():
    b = FeeCalculator.calculate(
        [product("12.35", 3), product("0.99", 7)],
        tax_percentage=Decimal("14"),
        service_percentage=Decimal("12.5"),
        delivery_fee=Decimal("20"),
        number_of_friends=7,
    )
    assert b.subtotal + b.tax_amount + b.service_amount + b.delivery_share == b.total_amount


def test_pure_and_repeatable():
    args = dict(tax_percentage=15, service_percentage=10, delivery_fee=5, number_of_friends=3)
    assert FeeCalculator.calculate(ORDER, **args) == FeeCalculator.calculate(ORDER, **args)


def test_subtotal_has_no_float_drift():
    items = [product("0.1", 1)] * 10
    assert FeeCalculator.subtotal(items) == Decimal("1.0")


def test_delivery_split_over_expected_not_joined_count():
    # Only one friend will ever join; the fee is still divided by four.
    b = FeeCalculator.calculate([product(10, 1)], delivery_fee=8, number_of_friends=4)
    assert b.delivery_share == Decimal(2)
    assert b.delivery_share * 1 < Decimal(8)


def test_missing_rates_default_to_zero():
    b = FeeCalculator.calculate([product(10, 2)], tax_percentage=None, service_percentage=None, delivery_fee=None)
    assert b.total_amount == Decimal(20)
    assert b.tax_amount == b.service_amount == b.delivery_share == Decimal(0)


@pytest.mark.parametrize("price", [0, "0.00"])
def test_free_items(price):
    b = FeeCalculator.calculate([product(price, 5)], tax_percentage=15, number_of_friends=1)
    assert b.subtotal == 0
    assert b.total_amount == 0
