from unittest.mock import patch

import pytest
from orders.models import Order
from orders.tests.factories import OrderFactory, OrderItemFactory
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


def test_order_detail_by_public_id():
    order = OrderFactory(printify_order_id="pf-1")
    OrderItemFactory(order=order, quantity=2)
    resp = APIClient().get(f"/api/v1/orders/{order.public_id}/")
    assert resp.status_code == 200
    body = resp.json()["order"]
    assert body["id"] == str(order.public_id)
    assert body["printifyOrderId"] == "pf-1"
    assert body["stripePaymentId"] is None
    assert body["items"][0]["lineTotal"] == "20.00"
    assert body["firstName"] == order.first_name


def test_unknown_order_is_404():
    assert APIClient().get("/api/v1/orders/5d1f0c7e-8a57-4d3e-9b0e-2f4b8f1a9c21/").status_code == 404


def test_order_by_checkout_session():
    order = OrderFactory(stripe_session_id="cs_test_lookup")
    resp = APIClient().get("/api/v1/orders/session/cs_test_lookup/")
    assert resp.status_code == 200
    assert resp.json()["order"]["number"] == order.number
    assert APIClient().get("/api/v1/orders/session/cs_missing/").status_code == 404


@patch("orders.views.expire_checkout_session")
def test_cancel_pending_order_expires_session(mock_expire):
    order = OrderFactory(stripe_session_id="cs_test_cancel")
    resp = APIClient().post(f"/api/v1/orders/{order.public_id}/cancel/")
    assert resp.status_code == 200
    assert resp.json()["order"]["status"] == "cancelled"
    mock_expire.assert_called_once_with("cs_test_cancel")


def test_cancel_paid_order_is_400():
    order = OrderFactory(status=Order.STATUS_PAID)
    resp = APIClient().post(f"/api/v1/orders/{order.public_id}/cancel/")
    assert resp.status_code == 400
