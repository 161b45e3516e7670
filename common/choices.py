"""Shared enumerations and choices used across apps."""

from django.db import models


class CartStatus(models.TextChoices):
    """Statuses for shopping carts."""

    ACTIVE = "active", "Active"
    ORDERED = "ordered", "Ordered"
    ABANDONED = "abandoned", "Abandoned"


class OrderStatus(models.TextChoices):
    """Lifecycle statuses for orders, from checkout to shipment."""

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FULFILLING = "fulfilling", "Fulfilling"
    FULFILLMENT_FAILED = "fulfillment_failed", "Fulfillment failed"
    SHIPPED = "shipped", "Shipped"
    CANCELLED = "cancelled", "Cancelled"


class OrderSource(models.TextChoices):
    CUSTOM = "custom", "Custom stickers"
    PACK = "pack", "Drop pack"


class DropStatus(models.TextChoices):
    """Publication states of a creator drop."""

    DRAFT = "DRAFT", "Draft"
    PUBLISHED = "PUBLISHED", "Published"
    ARCHIVED = "ARCHIVED", "Archived"


class PackType(models.TextChoices):
    """Pack kinds: shopper-picked designs or the whole drop."""

    BUILD_A_PACK = "BUILD_A_PACK", "Build a pack"
    FULL_SET = "FULL_SET", "Full set"


class ShippingCountry(models.TextChoices):
    """Countries accepted at checkout."""

    US = "US", "United States"
    CA = "CA", "Canada"
    GB = "GB", "United Kingdom"
    AU = "AU", "Australia"
