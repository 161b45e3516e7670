"""Email utilities for the orders app.

Uses Django's email backend, with links composed from FRONTEND_URL.
"""

from django.conf import settings
from django.core.mail import send_mail


def order_url(order) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/orders/{order.public_id}"


def send_order_paid_email(order) -> None:
    """Send a payment confirmation with a link to the order status page.

    Delivery errors propagate; the caller decides whether they matter.
    """
    if not order.email:
        return

    subject = f"Your Chaos Stickers order {order.number} is confirmed"
    lines = [
        f"Hi {order.first_name or 'there'},",
        "",
        "Thanks for your order! We're sending your stickers to print.",
        "",
        f"Order: {order.number}",
        f"Total: ${order.total:.2f}",
        "",
        f"Track your order here: {order_url(order)}",
    ]
    send_mail(
        subject,
        "\n".join(lines) + "\n",
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [order.email],
        fail_silently=False,
    )
