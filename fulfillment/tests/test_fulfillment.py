from unittest.mock import MagicMock, patch

import pytest
from django.core.management import call_command
from fulfillment.printify import FulfillmentError
from fulfillment.services import mark_shipped, submit_order
from fulfillment.views import PrintifyWebhookView
from orders.models import Order
from orders.tests.factories import OrderFactory, OrderItemFactory
from rest_framework.test import APIClient
from rest_framework.throttling import ScopedRateThrottle
from users.tests.factories import UserFactory

pytestmark = pytest.mark.django_db


def _client_mock():
    client = MagicMock()
    client.upload_image.side_effect = lambda url, name: f"img-{name}"
    client.create_product.side_effect = lambda title, image_id: (f"prod-{image_id}", 45740)
    client.create_order.return_value = "pf-order-1"
    return client


def test_submit_order_creates_products_and_printify_order():
    order = OrderFactory(status=Order.STATUS_PAID)
    items = [OrderItemFactory(order=order, quantity=2), OrderItemFactory(order=order, quantity=1)]
    client = _client_mock()

    submit_order(order, client=client)

    order.refresh_from_db()
    assert order.status == Order.STATUS_FULFILLING
    assert order.printify_order_id == "pf-order-1"
    assert client.upload_image.call_count == 2
    external_id, line_items, address = client.create_order.call_args.args
    assert external_id == order.number
    assert [li["quantity"] for li in line_items] == [2, 1]
    assert address["zip"] == order.zip
    client.send_to_production.assert_called_once_with("pf-order-1")
    items[0].refresh_from_db()
    assert items[0].printify_product_id.startswith("prod-img-")
    assert items[0].printify_variant_id == 45740


def test_submit_order_failure_marks_order_and_reraises():
    order = OrderFactory(status=Order.STATUS_PAID)
    OrderItemFactory(order=order)
    client = _client_mock()
    client.create_order.side_effect = FulfillmentError("Printify error 400: bad address")

    with pytest.raises(FulfillmentError):
        submit_order(order, client=client)
    order.refresh_from_db()
    assert order.status == Order.STATUS_FULFILLMENT_FAILED
    assert order.fulfillment_error == "Printify error 400: bad address"


def test_retry_reuses_created_products_and_printify_order():
    order = OrderFactory(status=Order.STATUS_PAID)
    OrderItemFactory(order=order)
    client = _client_mock()
    client.send_to_production.side_effect = [FulfillmentError("busy"), None]

    with pytest.raises(FulfillmentError):
        submit_order(order, client=client)
    submit_order(order, client=client)

    order.refresh_from_db()
    assert order.status == Order.STATUS_FULFILLING
    assert order.fulfillment_error == ""
    assert client.upload_image.call_count == 1
    assert client.create_order.call_count == 1


def test_submit_order_rejects_unpaid_orders():
    with pytest.raises(FulfillmentError):
        submit_order(OrderFactory(), client=_client_mock())


def test_mark_shipped_is_idempotent():
    order = OrderFactory(status=Order.STATUS_FULFILLING)
    mark_shipped(order)
    shipped = mark_shipped(order)
    assert shipped.status == Order.STATUS_SHIPPED
    assert shipped.shipped_at is not None


def test_printify_webhook_marks_order_shipped():
    order = OrderFactory(status=Order.STATUS_FULFILLING, printify_order_id="pf-9")
    resp = APIClient().post(
        "/api/v1/fulfillment/webhooks/printify/?token=printify-hook-token",
        {"type": "order:shipment:created", "resource": {"id": "pf-9", "type": "order"}},
        format="json",
    )
    assert resp.status_code == 200
    order.refresh_from_db()
    assert order.status == Order.STATUS_SHIPPED


def test_printify_webhook_rejects_bad_token():
    resp = APIClient().post(
        "/api/v1/fulfillment/webhooks/printify/?token=wrong",
        {"type": "order:shipment:created", "resource": {"id": "pf-9"}},
        format="json",
    )
    assert resp.status_code == 403


def test_printify_webhook_ignores_other_events():
    order = OrderFactory(status=Order.STATUS_FULFILLING, printify_order_id="pf-10")
    resp = APIClient().post(
        "/api/v1/fulfillment/webhooks/printify/?token=printify-hook-token",
        {"type": "order:updated", "resource": {"id": "pf-10"}},
        format="json",
    )
    assert resp.json() == {"received": True}
    order.refresh_from_db()
    assert order.status == Order.STATUS_FULFILLING


@patch("fulfillment.views.PrintifyClient")
def test_status_endpoint_is_admin_only(mock_client):
    mock_client.return_value.list_shops.return_value = [{"id": 12345, "title": "Chaos"}]
    mock_client.return_value.shop_id = "12345"
    client = APIClient()
    client.force_authenticate(user=UserFactory())
    assert client.get("/api/v1/fulfillment/status/").status_code == 403

    client.force_authenticate(user=UserFactory(is_staff=True))
    resp = client.get("/api/v1/fulfillment/status/")
    assert resp.status_code == 200
    assert resp.json()["shops"][0]["title"] == "Chaos"


@patch("fulfillment.services.PrintifyClient")
def test_retry_fulfillment_command_resubmits_failed_orders(mock_client_cls):
    mock_client_cls.return_value = _client_mock()
    failed = OrderFactory(status=Order.STATUS_FULFILLMENT_FAILED, fulfillment_error="timeout")
    OrderItemFactory(order=failed)
    untouched = OrderFactory(status=Order.STATUS_PAID)

    call_command("retry_fulfillment")

    failed.refresh_from_db()
    untouched.refresh_from_db()
    assert failed.status == Order.STATUS_FULFILLING
    assert untouched.status == Order.STATUS_PAID


def test_printify_webhook_only_uses_the_webhooks_throttle_scope():
    view = PrintifyWebhookView()
    assert [type(t) for t in view.get_throttles()] == [ScopedRateThrottle]
    assert view.throttle_scope == "webhooks"
