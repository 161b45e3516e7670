import logging

from django.db import transaction
from django.utils import timezone
from orders.models import Order
from orders.services import transition_order

from .printify import FulfillmentError, PrintifyClient

logger = logging.getLogger("chaos.fulfillment")

SUBMITTABLE_STATUSES = (Order.STATUS_PAID, Order.STATUS_FULFILLMENT_FAILED)

__all__ = ["FulfillmentError", "build_address", "mark_shipped", "submit_order"]


def build_address(order: Order) -> dict:
    """Printify `address_to` block for an order."""
    return {
        "first_name": order.first_name,
        "last_name": order.last_name,
        "email": order.email,
        "phone": order.phone,
        "country": order.country,
        "region": order.region,
        "address1": order.address1,
        "address2": order.address2,
        "city": order.city,
        "zip": order.zip,
    }


def _create_line_items(client: PrintifyClient, order: Order) -> list:
    line_items = []
    for item in order.items.order_by("id"):
        # Lines that already got a product on an earlier attempt are reused
        if not item.printify_product_id:
            image_id = client.upload_image(item.image_url, f"{order.number}-{item.id}.png")
            product_id, variant_id = client.create_product(f"{order.number} sticker {item.id}", image_id)
            item.printify_product_id = product_id
            item.printify_variant_id = variant_id
            item.save(update_fields=["printify_product_id", "printify_variant_id", "updated_at"])
        line_items.append(
            {
                "product_id": item.printify_product_id,
                "variant_id": item.printify_variant_id,
                "quantity": item.quantity,
            }
        )
    return line_items


def submit_order(order: Order, *, client: PrintifyClient | None = None) -> Order:
    """Send a paid order to Printify and move it to fulfilling.

    A Printify order created on an earlier failed attempt is only sent to
    production again, never recreated.
    On failure the order is marked fulfillment_failed with the error text and
    the FulfillmentError is re-raised.
    """

    if order.status not in SUBMITTABLE_STATUSES:
        raise FulfillmentError(f"Order {order.number} is {order.status}; only paid orders can be fulfilled.")
    client = client or PrintifyClient()
    try:
        if not order.printify_order_id:
            line_items = _create_line_items(client, order)
            if not line_items:
                raise FulfillmentError("Order has no items.")
            order.printify_order_id = client.create_order(
                order.number or str(order.public_id), line_items, build_address(order)
            )
            order.save(update_fields=["printify_order_id", "updated_at"])
        client.send_to_production(order.printify_order_id)
    except FulfillmentError as exc:
        order.fulfillment_error = str(exc)
        transition_order(order, Order.STATUS_FULFILLMENT_FAILED, fields=("fulfillment_error",))
        logger.error(
            "fulfillment.failed",
            extra={"event": "fulfillment.failed", "order_id": order.id, "error": str(exc)},
        )
        raise

    order.fulfillment_error = ""
    transition_order(order, Order.STATUS_FULFILLING, fields=("fulfillment_error",))
    logger.info(
        "fulfillment.submitted",
        extra={"event": "fulfillment.submitted", "order_id": order.id, "printify_order_id": order.printify_order_id},
    )
    return order


@transaction.atomic
def mark_shipped(order: Order) -> Order:
    """Record a Printify shipment. Already-shipped orders are returned unchanged."""

    order = Order.objects.select_for_update().get(pk=order.pk)
    if order.status == Order.STATUS_SHIPPED:
        return order
    order.shipped_at = timezone.now()
    return transition_order(order, Order.STATUS_SHIPPED, fields=("shipped_at",))
