from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe
from common.money import to_cents
from drops.tests.factories import PackFactory
from orders.models import Order
from orders.payments import PaymentError, build_line_items, create_checkout_session
from orders.tests.factories import OrderFactory, OrderItemFactory

pytestmark = pytest.mark.django_db


def test_custom_order_lines_fold_discount_into_unit_amount():
    order = OrderFactory(subtotal=Decimal("50.00"), discount=Decimal("10.00"), total=Decimal("40.00"))
    OrderItemFactory(order=order, quantity=5, unit_price=Decimal("10.00"))
    lines = build_line_items(order)
    assert len(lines) == 1
    assert lines[0]["price_data"]["unit_amount"] == 800
    assert lines[0]["quantity"] == 5


@pytest.mark.parametrize("quantities", [(5,), (2, 3), (1, 1, 4)])
def test_custom_order_lines_add_up_to_discounted_total(quantities):
    units = sum(quantities)
    subtotal = Decimal("2.99") * units
    order = OrderFactory(subtotal=subtotal, discount=Decimal("2.99"), total=subtotal - Decimal("2.99"))
    for quantity in quantities:
        OrderItemFactory(order=order, quantity=quantity, unit_price=Decimal("2.99"))

    lines = build_line_items(order)
    charged = sum(line["price_data"]["unit_amount"] * line["quantity"] for line in lines)
    assert charged == to_cents(order.total)
    assert sum(line["quantity"] for line in lines) == units


def test_pack_order_is_a_single_line():
    pack = PackFactory(price=Decimal("8.40"))
    order = OrderFactory(source="pack", pack=pack, drop=pack.drop, pack_quantity=2)
    OrderItemFactory(order=order, quantity=2, unit_price=Decimal("2.80"))
    lines = build_line_items(order)
    assert len(lines) == 1
    assert lines[0]["price_data"]["unit_amount"] == 840
    assert lines[0]["quantity"] == 2


@patch("orders.payments.stripe.checkout.Session.create")
def test_create_checkout_session_stores_session_id(mock_create):
    mock_create.return_value = SimpleNamespace(id="cs_test_9", url="https://checkout.stripe.com/c/pay/cs_test_9")
    order = OrderFactory(shipping=Decimal("4.99"), total=Decimal("24.99"))
    OrderItemFactory(order=order)

    create_checkout_session(order, success_url="http://s", cancel_url="http://c")
    order.refresh_from_db()
    assert order.stripe_session_id == "cs_test_9"
    kwargs = mock_create.call_args.kwargs
    assert kwargs["metadata"]["order_id"] == str(order.public_id)
    assert kwargs["shipping_options"][0]["shipping_rate_data"]["fixed_amount"]["amount"] == 499
    assert kwargs["idempotency_key"] == f"checkout-{order.public_id}"


@patch("orders.payments.stripe.checkout.Session.create", side_effect=stripe.APIConnectionError("offline"))
def test_create_checkout_session_wraps_stripe_errors(mock_create):
    order = OrderFactory()
    OrderItemFactory(order=order)
    with pytest.raises(PaymentError):
        create_checkout_session(order, success_url="http://s", cancel_url="http://c")
    assert Order.objects.get(id=order.id).stripe_session_id == ""
