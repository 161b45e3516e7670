"""Drops app models: creator drops, their designs and sellable packs."""

from decimal import Decimal

from common.choices import DropStatus, PackType
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Drop(TimeStampedModel):
    """A creator-curated collection of sticker designs.

    The slug is unique per creator and frozen once the drop is published so
    shared storefront links keep working.
    """

    STATUS_DRAFT = DropStatus.DRAFT
    STATUS_PUBLISHED = DropStatus.PUBLISHED
    STATUS_ARCHIVED = DropStatus.ARCHIVED

    creator = models.ForeignKey("creators.Creator", related_name="drops", on_delete=models.CASCADE)
    title = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140)
    description = models.TextField(max_length=2000, blank=True)
    status = models.CharField(max_length=16, choices=DropStatus.choices, default=STATUS_DRAFT, db_index=True)
    published_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["creator", "slug"], name="uniq_drop_creator_slug"),
        ]
        indexes = [
            models.Index(fields=["status", "published_at"], name="drop_status_published_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Drop#{self.id} {self.title} ({self.status})"

    @property
    def is_published(self) -> bool:
        return self.status == self.STATUS_PUBLISHED


class DropDesign(TimeStampedModel):
    """A design placed in a drop; at most one per drop is the hero image."""

    drop = models.ForeignKey(Drop, related_name="drop_designs", on_delete=models.CASCADE)
    design = models.ForeignKey("designs.Design", related_name="drop_designs", on_delete=models.CASCADE)
    display_order = models.PositiveIntegerField(default=0)
    is_hero = models.BooleanField(default=False)

    class Meta:
        ordering = ["display_order", "id"]
        constraints = [
            models.UniqueConstraint(fields=["drop", "design"], name="uniq_drop_design"),
            models.UniqueConstraint(
                fields=["drop"],
                condition=models.Q(is_hero=True),
                name="uniq_drop_hero",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"DropDesign#{self.id} drop={self.drop_id} design={self.design_id}"


class Pack(TimeStampedModel):
    """A priced bundle of designs from a drop."""

    TYPE_BUILD_A_PACK = PackType.BUILD_A_PACK
    TYPE_FULL_SET = PackType.FULL_SET

    drop = models.ForeignKey(Drop, related_name="packs", on_delete=models.CASCADE)
    type = models.CharField(max_length=16, choices=PackType.choices, default=TYPE_BUILD_A_PACK)
    name = models.CharField(max_length=120)
    description = models.CharField(max_length=500, blank=True)
    design_count = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["price", "id"]
        constraints = [
            models.CheckConstraint(name="pack_price_non_negative", condition=models.Q(price__gte=0)),
            models.CheckConstraint(name="pack_design_count_positive", condition=models.Q(design_count__gte=1)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Pack#{self.id} {self.name} ({self.type})"
