"""Cart app models.

Carts belong to anonymous shoppers identified by the client-generated
session id the storefront sends as `X-Session-Id`. Each line is one
generated design printed as a custom sticker.
"""

from decimal import Decimal

from common.choices import CartStatus
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Cart(TimeStampedModel):
    """Guest shopping cart; a session has at most one active cart."""

    STATUS_ACTIVE = CartStatus.ACTIVE
    STATUS_ORDERED = CartStatus.ORDERED
    STATUS_ABANDONED = CartStatus.ABANDONED
    STATUS_CHOICES = CartStatus.choices

    session_id = models.CharField(max_length=64, db_index=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)

    class Meta:
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["session_id", "status"], name="cart_session_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["session_id"],
                condition=models.Q(status=CartStatus.ACTIVE),
                name="uniq_active_cart_per_session",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Cart#{self.id} ({self.session_id})"


class CartItem(TimeStampedModel):
    """Custom sticker line; a design appears at most once per cart."""

    cart = models.ForeignKey(Cart, related_name="items", on_delete=models.CASCADE)
    design = models.ForeignKey("designs.Design", related_name="cart_items", on_delete=models.CASCADE)
    image_url = models.URLField(max_length=500)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["cart", "design"], name="unique_design_per_cart"),
            models.CheckConstraint(
                name="quantity_positive",
                condition=models.Q(quantity__gte=1),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"CartItem#{self.id} cart={self.cart_id} design={self.design_id} qty={self.quantity}"

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price or Decimal("0.00")) * Decimal(int(self.quantity))
