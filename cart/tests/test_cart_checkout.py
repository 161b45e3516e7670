from datetime import timedelta
from unittest.mock import patch

import pytest
from cart.models import Cart
from cart.services import abandon_stale_carts
from cart.tests.factories import CartFactory, CartItemFactory
from django.core.management import call_command
from django.utils import timezone
from orders.models import Order
from orders.payments import PaymentError
from orders.tests.factories import shipping_details
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


def _client(session_id):
    client = APIClient()
    client.credentials(HTTP_X_SESSION_ID=session_id)
    return client


def _stripe_session(mock_create, session_id="cs_test_1"):
    mock_create.return_value.id = session_id
    mock_create.return_value.url = f"https://checkout.stripe.com/c/pay/{session_id}"


@patch("orders.services.create_checkout_session")
def test_checkout_snapshots_cart_into_pending_order(mock_create):
    _stripe_session(mock_create)
    cart = CartFactory()
    CartItemFactory(cart=cart, quantity=3)
    CartItemFactory(cart=cart, quantity=2)

    resp = _client(cart.session_id).post(
        "/api/v1/cart/checkout/", {"shippingDetails": shipping_details()}, format="json"
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["sessionId"] == "cs_test_1"
    assert body["url"].startswith("https://checkout.stripe.com/")

    order = Order.objects.get(public_id=body["orderId"])
    assert order.status == Order.STATUS_PENDING
    assert order.number == f"CS-{order.id:06d}"
    assert str(order.subtotal) == "50.00"
    assert str(order.discount) == "10.00"
    assert str(order.total) == "40.00"
    assert order.first_name == "Sam"
    assert order.items.count() == 2
    assert mock_create.call_args.kwargs["cancel_url"] == "http://frontend.test/checkout"
    assert mock_create.call_args.kwargs["success_url"] == (
        "http://frontend.test/confirmation?session_id={CHECKOUT_SESSION_ID}"
    )

    cart.refresh_from_db()
    assert cart.status == Cart.STATUS_ORDERED
    fresh = _client(cart.session_id).get("/api/v1/cart/").json()
    assert fresh["items"] == []


def test_checkout_empty_cart_is_400():
    resp = _client("sess-empty").post("/api/v1/cart/checkout/", {"shippingDetails": shipping_details()}, format="json")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cart is empty."


def test_checkout_validates_shipping_form():
    cart = CartFactory()
    CartItemFactory(cart=cart)
    resp = _client(cart.session_id).post(
        "/api/v1/cart/checkout/",
        {"shippingDetails": shipping_details(email="not-an-email", country="FR", zip="")},
        format="json",
    )
    assert resp.status_code == 400
    errors = resp.json()["shippingDetails"]
    assert {"email", "country", "zip"} <= set(errors)
    assert Order.objects.count() == 0


@patch("orders.services.create_checkout_session", side_effect=PaymentError("Stripe is down"))
def test_checkout_payment_failure_cancels_order_and_keeps_cart(mock_create):
    cart = CartFactory()
    CartItemFactory(cart=cart)
    resp = _client(cart.session_id).post(
        "/api/v1/cart/checkout/", {"shippingDetails": shipping_details()}, format="json"
    )
    assert resp.status_code == 502
    assert Order.objects.get().status == Order.STATUS_CANCELLED
    cart.refresh_from_db()
    assert cart.status == Cart.STATUS_ACTIVE


@patch("orders.services.create_checkout_session")
def test_checkout_idempotency_key_replays_response(mock_create):
    _stripe_session(mock_create)
    cart = CartFactory()
    CartItemFactory(cart=cart)
    client = _client(cart.session_id)
    payload = {"shippingDetails": shipping_details()}

    first = client.post("/api/v1/cart/checkout/", payload, format="json", HTTP_IDEMPOTENCY_KEY="idem-1")
    second = client.post("/api/v1/cart/checkout/", payload, format="json", HTTP_IDEMPOTENCY_KEY="idem-1")
    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()
    assert Order.objects.count() == 1
    assert mock_create.call_count == 1

    conflict = client.post(
        "/api/v1/cart/checkout/",
        {"shippingDetails": shipping_details(city="Oakland")},
        format="json",
        HTTP_IDEMPOTENCY_KEY="idem-1",
    )
    assert conflict.status_code == 409


def test_abandon_stale_carts():
    stale = CartFactory()
    fresh = CartFactory()
    Cart.objects.filter(id=stale.id).update(updated_at=timezone.now() - timedelta(days=10))

    assert abandon_stale_carts(ttl_minutes=60) == 1
    stale.refresh_from_db()
    fresh.refresh_from_db()
    assert stale.status == Cart.STATUS_ABANDONED
    assert fresh.status == Cart.STATUS_ACTIVE


def test_abandon_stale_carts_command():
    stale = CartFactory()
    Cart.objects.filter(id=stale.id).update(updated_at=timezone.now() - timedelta(hours=2))
    call_command("abandon_stale_carts", "--ttl-minutes", "60")
    stale.refresh_from_db()
    assert stale.status == Cart.STATUS_ABANDONED
