"""Cart services: guest cart mutations and checkout."""

import logging
from datetime import timedelta

from designs.models import Design
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .items import parse_checkout_items
from .models import Cart, CartItem
from .selectors import get_active_cart_for_session


class CartError(Exception):
    """Raised for cart mutation failures."""


logger = logging.getLogger("chaos.cart")

MAX_LINE_QUANTITY = 999


def _image_for(design: Design, image_url: str | None) -> str:
    """Use the client's imageUrl only when it is one of the design's own images."""

    if image_url and image_url in (design.image_url, design.no_background_url):
        return image_url
    return design.effective_image_url


def _get_design(design_id: int) -> Design:
    try:
        return Design.objects.get(id=design_id)
    except Design.DoesNotExist:
        raise CartError("Design not found.")


def _check_quantity(quantity: int):
    if quantity <= 0:
        raise CartError("Quantity must be positive")
    if quantity > MAX_LINE_QUANTITY:
        raise CartError(f"Quantity must be at most {MAX_LINE_QUANTITY}")


@transaction.atomic
def add_item(*, session_id: str, design_id: int, quantity: int = 1, image_url: str | None = None) -> CartItem:
    """Add a design to the session's cart.

    A design already in the cart has its quantity incremented and its image
    replaced by the newer one instead of getting a second line.
    """

    _check_quantity(quantity)
    cart = get_active_cart_for_session(session_id=session_id)
    design = _get_design(design_id)
    image = _image_for(design, image_url)

    item = CartItem.objects.select_for_update().filter(cart=cart, design=design).first()
    if item is not None:
        _check_quantity(item.quantity + quantity)
        item.quantity += quantity
        item.image_url = image
        item.save(update_fields=["quantity", "image_url", "updated_at"])
        event = "cart.item_updated"
    else:
        item = CartItem.objects.create(
            cart=cart,
            design=design,
            image_url=image,
            quantity=quantity,
            unit_price=settings.STICKER_UNIT_PRICE,
        )
        event = "cart.item_added"
    cart.save(update_fields=["updated_at"])
    logger.info(
        event,
        extra={
            "event": event,
            "cart_id": cart.id,
            "session_id": session_id,
            "design_id": design.id,
            "quantity": item.quantity,
        },
    )
    return item


@transaction.atomic
def update_item_quantity(*, session_id: str, item_id: int, quantity: int) -> CartItem:
    _check_quantity(quantity)
    cart = get_active_cart_for_session(session_id=session_id)
    try:
        item = CartItem.objects.select_for_update().get(id=item_id, cart=cart)
    except CartItem.DoesNotExist:
        raise CartError("Not found.")
    item.quantity = quantity
    item.save(update_fields=["quantity", "updated_at"])
    cart.save(update_fields=["updated_at"])
    logger.info(
        "cart.item_updated",
        extra={"event": "cart.item_updated", "cart_id": cart.id, "session_id": session_id, "item_id": item.id},
    )
    return item


@transaction.atomic
def remove_item(*, session_id: str, item_id: int) -> bool:
    """Delete a line from the session's cart. Returns False when it is not there."""

    cart = get_active_cart_for_session(session_id=session_id)
    deleted, _ = CartItem.objects.filter(id=item_id, cart=cart).delete()
    if not deleted:
        return False
    cart.save(update_fields=["updated_at"])
    logger.info(
        "cart.item_removed",
        extra={"event": "cart.item_removed", "cart_id": cart.id, "session_id": session_id, "item_id": item_id},
    )
    return True


@transaction.atomic
def clear_cart(*, session_id: str) -> None:
    cart = get_active_cart_for_session(session_id=session_id)
    CartItem.objects.filter(cart=cart).delete()
    cart.save(update_fields=["updated_at"])
    logger.info("cart.cleared", extra={"event": "cart.cleared", "cart_id": cart.id, "session_id": session_id})


@transaction.atomic
def sync_cart(*, session_id: str, raw_items) -> Cart:
    """Replace the cart's lines with the storefront's local-storage items.

    Invalid entries and ids of designs that do not exist are skipped.
    """

    cart = get_active_cart_for_session(session_id=session_id)
    items = parse_checkout_items(raw_items)
    designs = Design.objects.in_bulk([item.id for item in items])

    CartItem.objects.filter(cart=cart).delete()
    CartItem.objects.bulk_create(
        [
            CartItem(
                cart=cart,
                design=designs[item.id],
                image_url=_image_for(designs[item.id], item.image_url),
                quantity=min(item.quantity, MAX_LINE_QUANTITY),
                unit_price=settings.STICKER_UNIT_PRICE,
            )
            for item in items
            if item.id in designs
        ]
    )
    cart.save(update_fields=["updated_at"])
    logger.info(
        "cart.synced",
        extra={"event": "cart.synced", "cart_id": cart.id, "session_id": session_id, "lines": len(items)},
    )
    return cart


def checkout_cart(*, session_id: str, shipping: dict) -> dict:
    """Create a pending order from the cart and open a Stripe Checkout Session.

    The cart is marked ordered only once Stripe has accepted the session.
    Returns `{orderId, url, sessionId}`.
    """

    from orders.services import OrderError, create_order_from_cart, start_checkout

    cart = get_active_cart_for_session(session_id=session_id)
    try:
        order = create_order_from_cart(cart, shipping=shipping)
    except OrderError as exc:
        raise CartError(str(exc))
    cancel_url = f"{settings.FRONTEND_URL.rstrip('/')}/checkout"
    result = start_checkout(order, cancel_url=cancel_url)

    with transaction.atomic():
        cart.status = Cart.STATUS_ORDERED
        cart.save(update_fields=["status", "updated_at"])
    logger.info(
        "cart.checked_out",
        extra={"event": "cart.checked_out", "cart_id": cart.id, "session_id": session_id, "order_id": order.id},
    )
    return result


@transaction.atomic
def abandon_cart(*, cart: Cart) -> None:
    cart.status = Cart.STATUS_ABANDONED
    cart.save(update_fields=["status", "updated_at"])
    logger.info(
        "cart.abandoned",
        extra={"event": "cart.abandoned", "cart_id": cart.id, "session_id": cart.session_id},
    )


def abandon_stale_carts(*, ttl_minutes: int | None = None) -> int:
    """Mark active carts untouched for longer than the TTL as abandoned."""

    ttl = settings.CART_ABANDON_TTL_MINUTES if ttl_minutes is None else ttl_minutes
    cutoff = timezone.now() - timedelta(minutes=int(ttl))
    count = 0
    for cart in Cart.objects.filter(status=Cart.STATUS_ACTIVE, updated_at__lt=cutoff).iterator():
        abandon_cart(cart=cart)
        count += 1
    return count
