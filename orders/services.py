import hashlib
import json
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Callable, Optional, Tuple

from common.choices import OrderSource
from common.money import quantize_money
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from .emails import send_order_paid_email
from .models import IdempotencyKey, Order, OrderItem
from .payments import PaymentError, create_checkout_session

logger = logging.getLogger("chaos.orders")

# Allowed status moves; anything else raises OrderError
ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {Order.STATUS_PAID, Order.STATUS_CANCELLED},
    Order.STATUS_PAID: {Order.STATUS_FULFILLING, Order.STATUS_FULFILLMENT_FAILED},
    Order.STATUS_FULFILLMENT_FAILED: {Order.STATUS_FULFILLING, Order.STATUS_FULFILLMENT_FAILED},
    Order.STATUS_FULFILLING: {Order.STATUS_SHIPPED},
    Order.STATUS_SHIPPED: set(),
    Order.STATUS_CANCELLED: set(),
}

SHIPPING_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "country",
    "region",
    "address1",
    "address2",
    "city",
    "zip",
)


class OrderError(Exception):
    """Raised for invalid order operations."""


def transition_order(order: Order, to_status: str, *, fields: tuple = ()) -> Order:
    """Move an order to `to_status`, saving `fields` alongside, and log the change."""

    prev = order.status
    if to_status not in ALLOWED_TRANSITIONS.get(prev, set()):
        raise OrderError(f"Cannot move order from {prev} to {to_status}.")
    order.status = to_status
    order.save(update_fields=["status", "updated_at", *fields])
    logger.info(
        "order_status_changed",
        extra={
            "event": "order_status_changed",
            "order_id": order.id,
            "order_number": order.number,
            "status_from": prev,
            "status_to": to_status,
        },
    )
    return order


def _create_order(*, address: dict, source: str, session_id: str = "", **fields) -> Order:
    order = Order.objects.create(
        email=address["email"],
        source=source,
        session_id=session_id or "",
        **{name: address.get(name) or "" for name in SHIPPING_FIELDS},
        **fields,
    )
    # User-facing order number derived from the primary key
    order.number = f"CS-{int(order.id):06d}"
    order.save(update_fields=["number"])
    return order


def create_order_from_cart(cart, *, shipping: dict) -> Order:
    """Create a pending custom-sticker order from the cart's current lines.

    Volume discounts are computed on the whole cart; custom stickers ship free.
    """

    from cart.pricing import quote_lines

    items = list(cart.items.select_related("design").order_by("id"))
    if not items:
        raise OrderError("Cart is empty.")
    quote = quote_lines([(item.unit_price, item.quantity) for item in items])

    with transaction.atomic():
        order = _create_order(
            address=shipping,
            source=OrderSource.CUSTOM,
            session_id=cart.session_id,
            subtotal=quote.subtotal,
            discount=quote.discount,
            shipping=quote.shipping,
            total=quote.total,
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    design=item.design,
                    image_url=item.image_url,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in items
            ]
        )
    logger.info(
        "order.created",
        extra={"event": "order.created", "order_id": order.id, "source": order.source, "total": str(order.total)},
    )
    return order


def create_order_from_pack(*, pack, designs, quantity: int, quote, shipping: dict, session_id: str = "") -> Order:
    """Create a pending pack order: one line per design, each at an equal share of the pack price."""

    if not designs:
        raise OrderError("Pack has no designs.")
    unit_price = quantize_money(Decimal(pack.price) / len(designs))

    with transaction.atomic():
        order = _create_order(
            address=shipping,
            source=OrderSource.PACK,
            session_id=session_id,
            drop=pack.drop,
            pack=pack,
            pack_quantity=quantity,
            subtotal=quote.subtotal,
            discount=Decimal("0.00"),
            shipping=quote.shipping,
            total=quote.total,
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    design=design,
                    image_url=design.effective_image_url,
                    quantity=quantity,
                    unit_price=unit_price,
                )
                for design in designs
            ]
        )
    logger.info(
        "order.created",
        extra={
            "event": "order.created",
            "order_id": order.id,
            "source": order.source,
            "pack_id": pack.id,
            "total": str(order.total),
        },
    )
    return order


def checkout_success_url() -> str:
    # Stripe substitutes the session id placeholder on redirect
    return f"{settings.FRONTEND_URL.rstrip('/')}/confirmation?session_id={{CHECKOUT_SESSION_ID}}"


def start_checkout(order: Order, *, cancel_url: str) -> dict:
    """Open a Stripe Checkout Session for a pending order.

    The order is cancelled when Stripe refuses the session, and the
    PaymentError propagates to the caller.
    """

    try:
        session = create_checkout_session(order, success_url=checkout_success_url(), cancel_url=cancel_url)
    except PaymentError:
        cancel_order(order)
        raise
    return {"orderId": str(order.public_id), "url": session.url, "sessionId": session.id}


def pay_order(order: Order, payment_id: str = "") -> Order:
    """Mark a pending order paid, notify the customer and request fulfillment.

    Already-paid orders are returned unchanged. Email and fulfillment failures
    are logged; they never undo the payment.
    """

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        if order.status == Order.STATUS_CANCELLED:
            raise OrderError("Cannot pay a cancelled order.")
        if order.status != Order.STATUS_PENDING:
            return order
        order.stripe_payment_id = payment_id or ""
        order.paid_at = timezone.now()
        transition_order(order, Order.STATUS_PAID, fields=("stripe_payment_id", "paid_at"))

    try:
        send_order_paid_email(order)
    except Exception:
        logger.warning(
            "order.email_failed",
            extra={"event": "order.email_failed", "order_id": order.id},
            exc_info=True,
        )

    if settings.FULFILLMENT_AUTO_SUBMIT:
        from fulfillment.services import FulfillmentError, submit_order

        try:
            submit_order(order)
        except FulfillmentError:
            # submit_order already recorded the failure on the order
            order.refresh_from_db()
    return order


def cancel_order(order: Order) -> Order:
    """Cancel a pending order. Cancelled orders are returned unchanged."""

    if order.status == Order.STATUS_CANCELLED:
        return order
    if order.status != Order.STATUS_PENDING:
        raise OrderError("Only pending orders can be cancelled.")
    return transition_order(order, Order.STATUS_CANCELLED)


def with_idempotency(
    *,
    key: str,
    user,
    path: str,
    method: str,
    handler: Callable[[], Tuple[dict, int]],
    request_hash: Optional[str] = None,
    scope: Optional[str] = None,
) -> Tuple[dict, int]:
    """Run handler idempotently and persist its response for the given key and scope.

    - Scope defaults to "user:<id>" for authenticated users, otherwise "anon";
      guest callers pass their own scope (e.g. "session:<id>").
    - If a record exists and the stored `request_hash` differs from the provided one, returns 409.
    - If a record exists but response is not yet stored, returns 409 to indicate in-progress.
    - Error responses (4xx/5xx) are not stored, so a corrected retry can reuse the key.
    """

    if scope is None:
        scope = f"user:{getattr(user, 'id', None)}" if getattr(user, "id", None) else "anon"
    method = str(method).upper()
    path = str(path)

    try:
        with transaction.atomic():
            idem = IdempotencyKey.objects.create(
                key=key,
                user=user if getattr(user, "id", None) else None,
                scope=scope,
                path=path,
                method=method,
                request_hash=request_hash,
                expires_at=timezone.now() + timedelta(hours=24),
            )
    except IntegrityError:
        idem = IdempotencyKey.objects.get(key=key, scope=scope, path=path, method=method)
        # Guard against key reuse with different fingerprints
        if idem.request_hash and request_hash and idem.request_hash != request_hash:
            return {"detail": "Idempotency key reused with different request payload"}, 409
        if idem.response_json is not None and idem.response_code is not None:
            return idem.response_json, int(idem.response_code)
        # If another process is currently handling it, return a safe 409
        return {"detail": "Request in progress"}, 409

    try:
        body, code = handler()
    except Exception:
        IdempotencyKey.objects.filter(id=idem.id).delete()
        raise

    if code >= 400:
        IdempotencyKey.objects.filter(id=idem.id).delete()
        return body, code

    def _json_safe(value):
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, dict):
            return {k: _json_safe(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_json_safe(v) for v in value]
        return value

    safe_body = _json_safe(body)
    IdempotencyKey.objects.filter(id=idem.id).update(response_json=safe_body, response_code=code)
    return body, code


def compute_request_hash(data: Optional[dict]) -> Optional[str]:
    """Compute a canonical SHA256 hash of the request body.

    Uses sorted keys JSON representation to stabilize the hash across equivalent payloads.
    Returns None when data is falsy or not JSON-serializable.
    """
    if not data:
        return None
    try:
        payload = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return None
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def purge_expired_idempotency_keys(*, now=None) -> int:
    now = now or timezone.now()
    deleted, _ = IdempotencyKey.objects.filter(expires_at__lt=now).delete()
    return deleted
