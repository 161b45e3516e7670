from decimal import Decimal

import pytest
from cart.pricing import quote, quote_lines, volume_discount_rate


@pytest.mark.parametrize(
    "quantity,rate",
    [(0, Decimal("0")), (1, Decimal("0")), (4, Decimal("0")), (5, Decimal("0.20")), (50, Decimal("0.20"))],
)
def test_volume_discount_tiers(quantity, rate):
    assert volume_discount_rate(quantity) == rate


def test_highest_reached_tier_wins():
    tiers = {5: Decimal("0.20"), 10: Decimal("0.30")}
    assert volume_discount_rate(9, tiers) == Decimal("0.20")
    assert volume_discount_rate(10, tiers) == Decimal("0.30")


def test_quote_below_threshold_has_no_discount():
    q = quote(4)
    assert q.subtotal == Decimal("40.00")
    assert q.discount == Decimal("0.00")
    assert q.total == Decimal("40.00")
    assert q.shipping == Decimal("0.00")


def test_quote_lines_discount_applies_to_whole_cart():
    q = quote_lines([(Decimal("10.00"), 3), (Decimal("10.00"), 2)])
    assert q.quantity == 5
    assert q.subtotal == Decimal("50.00")
    assert q.discount == Decimal("10.00")
    assert q.total == Decimal("40.00")


def test_empty_quote():
    q = quote(0)
    assert q.quantity == 0
    assert q.total == Decimal("0.00")
