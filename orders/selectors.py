"""Selectors for read-only order queries."""

from typing import Optional

from django.core.exceptions import ValidationError

from .models import Order


def get_order(*, public_id) -> Optional[Order]:
    try:
        return Order.objects.prefetch_related("items").get(public_id=public_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        return None


def get_order_by_session(*, stripe_session_id: str) -> Optional[Order]:
    if not stripe_session_id:
        return None
    return Order.objects.prefetch_related("items").filter(stripe_session_id=stripe_session_id).first()


def list_failed_fulfillment_orders():
    return Order.objects.filter(status=Order.STATUS_FULFILLMENT_FAILED).order_by("id")
