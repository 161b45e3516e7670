"""Stripe Checkout integration.

Order amounts are Decimal dollars; Stripe receives integer cents. Custom
orders spread the volume discount over their lines, splitting a line in two
when its discounted total does not divide evenly by its quantity. Pack
orders send the pack as a single line.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

import stripe
from common.choices import OrderSource
from common.money import to_cents
from django.conf import settings

from .models import Order

logger = logging.getLogger("chaos.orders")


class PaymentError(Exception):
    """Raised when Stripe rejects or cannot be reached for a checkout session."""


def _configure():
    if not settings.STRIPE_SECRET_KEY:
        raise PaymentError("Payments are not configured.")
    stripe.api_key = settings.STRIPE_SECRET_KEY


def _sticker_line(item, currency: str, unit_amount: int, quantity: int) -> dict:
    return {
        "price_data": {
            "currency": currency,
            "unit_amount": unit_amount,
            "product_data": {
                "name": "Custom sticker",
                "images": [item.image_url],
            },
        },
        "quantity": quantity,
    }


def build_line_items(order: Order) -> list[dict]:
    """Stripe line items whose amounts add up to the order total before shipping."""

    currency = settings.STRIPE_CURRENCY
    if order.source == OrderSource.PACK and order.pack_id:
        pack = order.pack
        return [
            {
                "price_data": {
                    "currency": currency,
                    "unit_amount": to_cents(pack.price),
                    "product_data": {
                        "name": f"{pack.name} - {order.drop.title if order.drop_id else 'Sticker pack'}",
                        "description": f"{pack.design_count} stickers",
                    },
                },
                "quantity": order.pack_quantity,
            }
        ]

    items = list(order.items.order_by("id"))
    remaining = to_cents(order.subtotal) - to_cents(order.discount)
    gross_left = sum(to_cents(item.line_total) for item in items)
    lines = []
    for index, item in enumerate(items):
        gross = to_cents(item.line_total)
        # Each line takes its share of the discounted total; the last line absorbs rounding
        if index == len(items) - 1 or not gross_left:
            share = remaining
        else:
            share = int((Decimal(remaining) * gross / gross_left).to_integral_value(rounding=ROUND_HALF_UP))
        remaining -= share
        gross_left -= gross
        unit, extra = divmod(share, item.quantity)
        if item.quantity - extra:
            lines.append(_sticker_line(item, currency, unit, item.quantity - extra))
        if extra:
            lines.append(_sticker_line(item, currency, unit + 1, extra))
    return lines


def create_checkout_session(order: Order, *, success_url: str, cancel_url: str):
    """Create a Checkout Session for a pending order and remember its id on the order."""

    _configure()
    params = {
        "mode": "payment",
        "line_items": build_line_items(order),
        "customer_email": order.email,
        "client_reference_id": str(order.public_id),
        "metadata": {"order_id": str(order.public_id), "order_number": order.number},
        "success_url": success_url,
        "cancel_url": cancel_url,
    }
    if order.shipping > 0:
        params["shipping_options"] = [
            {
                "shipping_rate_data": {
                    "type": "fixed_amount",
                    "display_name": "Standard shipping",
                    "fixed_amount": {"amount": to_cents(order.shipping), "currency": settings.STRIPE_CURRENCY},
                }
            }
        ]
    try:
        session = stripe.checkout.Session.create(**params, idempotency_key=f"checkout-{order.public_id}")
    except stripe.StripeError as exc:
        logger.warning(
            "order.checkout_session_failed",
            extra={"event": "order.checkout_session_failed", "order_id": order.id, "error": str(exc)},
        )
        raise PaymentError("Unable to start checkout.") from exc

    order.stripe_session_id = session.id
    order.save(update_fields=["stripe_session_id", "updated_at"])
    logger.info(
        "order.checkout_session_created",
        extra={"event": "order.checkout_session_created", "order_id": order.id, "session_id": session.id},
    )
    return session


def expire_checkout_session(session_id: str) -> None:
    """Expire an open session so a cancelled order can no longer be paid."""

    _configure()
    try:
        stripe.checkout.Session.expire(session_id)
    except stripe.StripeError as exc:
        logger.warning(
            "order.checkout_session_expire_failed",
            extra={"event": "order.checkout_session_expire_failed", "session_id": session_id, "error": str(exc)},
        )


def construct_event(payload: bytes, signature: str):
    """Verify a webhook payload; raises ValueError or stripe.SignatureVerificationError."""

    return stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
