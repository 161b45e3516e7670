from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.core import mail
from django.test import override_settings
from django.utils import timezone
from orders.models import IdempotencyKey, Order
from orders.services import (
    OrderError,
    cancel_order,
    compute_request_hash,
    pay_order,
    purge_expired_idempotency_keys,
    transition_order,
    with_idempotency,
)
from orders.tests.factories import OrderFactory, OrderItemFactory

pytestmark = pytest.mark.django_db


def test_pay_order_marks_paid_and_emails_customer():
    order = OrderFactory(email="buyer@example.com")
    paid = pay_order(order, payment_id="pi_123")
    assert paid.status == Order.STATUS_PAID
    assert paid.stripe_payment_id == "pi_123"
    assert paid.paid_at is not None
    assert len(mail.outbox) == 1
    assert f"http://frontend.test/orders/{order.public_id}" in mail.outbox[0].body


def test_pay_order_is_a_noop_when_already_paid():
    order = OrderFactory(status=Order.STATUS_PAID, stripe_payment_id="pi_first")
    assert pay_order(order, payment_id="pi_second").stripe_payment_id == "pi_first"
    assert len(mail.outbox) == 0


def test_pay_order_rejects_cancelled_order():
    order = OrderFactory(status=Order.STATUS_CANCELLED)
    with pytest.raises(OrderError):
        pay_order(order)


def test_pay_order_survives_email_failure():
    order = OrderFactory()
    with patch("orders.services.send_order_paid_email", side_effect=Exception("smtp down")):
        assert pay_order(order).status == Order.STATUS_PAID


@override_settings(FULFILLMENT_AUTO_SUBMIT=True)
def test_pay_order_submits_fulfillment_and_keeps_paid_on_failure():
    from fulfillment.services import FulfillmentError

    order = OrderFactory()

    def _fail(o):
        o.fulfillment_error = "printify down"
        transition_order(o, Order.STATUS_FULFILLMENT_FAILED, fields=("fulfillment_error",))
        raise FulfillmentError("printify down")

    with patch("fulfillment.services.submit_order", side_effect=_fail) as mock_submit:
        result = pay_order(order, payment_id="pi_1")
    mock_submit.assert_called_once()
    assert result.status == Order.STATUS_FULFILLMENT_FAILED
    assert result.paid_at is not None
    assert result.stripe_payment_id == "pi_1"


def test_cancel_order_rules():
    pending = OrderFactory()
    assert cancel_order(pending).status == Order.STATUS_CANCELLED
    assert cancel_order(pending).status == Order.STATUS_CANCELLED
    with pytest.raises(OrderError):
        cancel_order(OrderFactory(status=Order.STATUS_PAID))


def test_transition_order_rejects_illegal_moves():
    order = OrderFactory()
    with pytest.raises(OrderError, match="Cannot move order from pending to shipped"):
        transition_order(order, Order.STATUS_SHIPPED)


def test_order_item_line_total():
    item = OrderItemFactory(quantity=3, unit_price=Decimal("2.80"))
    assert item.line_total == Decimal("8.40")


def test_with_idempotency_replays_and_detects_conflicts():
    calls = []

    def handler():
        calls.append(1)
        return {"value": Decimal("1.50")}, 200

    args = {"key": "k1", "user": None, "path": "/x/", "method": "post", "handler": handler, "scope": "session:a"}
    first = with_idempotency(request_hash=compute_request_hash({"a": 1}), **args)
    again = with_idempotency(request_hash=compute_request_hash({"a": 1}), **args)
    assert first[1] == again[1] == 200
    assert again[0] == {"value": "1.50"}
    assert len(calls) == 1

    conflict = with_idempotency(request_hash=compute_request_hash({"a": 2}), **args)
    assert conflict[1] == 409

    other_scope = with_idempotency(request_hash=None, **{**args, "scope": "session:b"})
    assert other_scope[1] == 200
    assert len(calls) == 2


def test_with_idempotency_does_not_store_errors():
    def failing():
        return {"detail": "nope"}, 400

    body, code = with_idempotency(key="k2", user=None, path="/x/", method="POST", handler=failing)
    assert code == 400
    assert not IdempotencyKey.objects.filter(key="k2").exists()


def test_compute_request_hash_is_order_insensitive():
    assert compute_request_hash({"a": 1, "b": 2}) == compute_request_hash({"b": 2, "a": 1})
    assert compute_request_hash(None) is None


def test_purge_expired_idempotency_keys():
    now = timezone.now()
    IdempotencyKey.objects.create(key="old", scope="anon", path="/", method="POST", expires_at=now - timedelta(hours=1))
    IdempotencyKey.objects.create(key="new", scope="anon", path="/", method="POST", expires_at=now + timedelta(hours=1))
    assert purge_expired_idempotency_keys() == 1
    assert list(IdempotencyKey.objects.values_list("key", flat=True)) == ["new"]
