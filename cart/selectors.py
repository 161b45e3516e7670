"""Selectors for read-only cart queries."""

from django.db import IntegrityError, transaction

from .models import Cart
from .pricing import Quote, quote_lines


def get_active_cart_for_session(*, session_id: str) -> Cart:
    """Return the guest session's active cart, creating it if missing."""

    try:
        with transaction.atomic():
            cart, _ = Cart.objects.get_or_create(session_id=session_id, status=Cart.STATUS_ACTIVE)
    except IntegrityError:
        # Lost a creation race with a concurrent request from the same session
        cart = Cart.objects.get(session_id=session_id, status=Cart.STATUS_ACTIVE)
    return cart


def cart_totals(*, cart: Cart) -> Quote:
    """Price the cart's lines including the volume discount."""

    return quote_lines(cart.items.values_list("unit_price", "quantity"))
