import uuid
from decimal import Decimal

from common.choices import OrderSource, OrderStatus
from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Order(TimeStampedModel):
    """Purchase order capturing a snapshot of a checkout.

    Totals and the shipping address are denormalized so the order stays
    printable and auditable after carts, designs or packs change. Orders are
    addressed publicly by `public_id`; the integer id never leaves the API.
    """

    STATUS_PENDING = OrderStatus.PENDING
    STATUS_PAID = OrderStatus.PAID
    STATUS_FULFILLING = OrderStatus.FULFILLING
    STATUS_FULFILLMENT_FAILED = OrderStatus.FULFILLMENT_FAILED
    STATUS_SHIPPED = OrderStatus.SHIPPED
    STATUS_CANCELLED = OrderStatus.CANCELLED
    STATUS_CHOICES = OrderStatus.choices

    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    number = models.CharField(max_length=32, unique=True, null=True, blank=True, db_index=True)
    email = models.EmailField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    source = models.CharField(max_length=16, choices=OrderSource.choices, default=OrderSource.CUSTOM)
    session_id = models.CharField(max_length=64, blank=True, db_index=True)

    drop = models.ForeignKey("drops.Drop", null=True, blank=True, related_name="orders", on_delete=models.SET_NULL)
    pack = models.ForeignKey("drops.Pack", null=True, blank=True, related_name="orders", on_delete=models.SET_NULL)
    pack_quantity = models.PositiveIntegerField(default=1)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    shipping = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    stripe_session_id = models.CharField(max_length=255, blank=True, db_index=True)
    stripe_payment_id = models.CharField(max_length=255, blank=True)
    printify_order_id = models.CharField(max_length=64, blank=True, db_index=True)
    fulfillment_error = models.TextField(blank=True)

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=32, blank=True)
    country = models.CharField(max_length=2)
    region = models.CharField(max_length=100, blank=True)
    address1 = models.CharField(max_length=255)
    address2 = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100)
    zip = models.CharField(max_length=20)

    paid_at = models.DateTimeField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-id"]
        indexes = [
            models.Index(fields=["email", "status"], name="order_email_status_idx"),
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(name="order_total_non_negative", condition=models.Q(total__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Order#{self.id} {self.number} status={self.status}"


class OrderItem(TimeStampedModel):
    """Line item within an order.

    Snapshots the printed image URL and unit price; the Printify product and
    variant ids are filled in during fulfillment.
    """

    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
    design = models.ForeignKey(
        "designs.Design", null=True, blank=True, related_name="order_items", on_delete=models.SET_NULL
    )
    image_url = models.URLField(max_length=500)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    printify_product_id = models.CharField(max_length=64, blank=True)
    printify_variant_id = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["order", "design"], name="orderitem_order_design_idx"),
        ]
        constraints = [
            models.CheckConstraint(name="orderitem_price_non_negative", condition=models.Q(unit_price__gte=0)),
            models.CheckConstraint(name="orderitem_quantity_positive", condition=models.Q(quantity__gte=1)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"OrderItem#{self.id} order={self.order_id} design={self.design_id} qty={self.quantity}"

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price or Decimal("0.00")) * Decimal(int(self.quantity))


class IdempotencyKey(TimeStampedModel):
    """Stores idempotent request results to prevent duplicate processing."""

    key = models.CharField(max_length=255)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.CASCADE)
    scope = models.CharField(max_length=128)
    path = models.CharField(max_length=255)
    method = models.CharField(max_length=16)
    request_hash = models.CharField(max_length=64, null=True, blank=True)
    response_code = models.IntegerField(null=True, blank=True)
    response_json = models.JSONField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["key", "scope", "path", "method"], name="uniq_idem_scope_path_method"),
        ]
