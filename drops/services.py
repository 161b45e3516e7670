"""Drop services: authoring, packs, publishing and shop selections."""

import logging
from decimal import Decimal

from common.choices import DropStatus, PackType
from designs.models import Design
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone
from django.utils.text import slugify

from .models import Drop, DropDesign, Pack
from .pricing import PackQuote, default_pack_price, quote_pack_price, shipping_for_country

logger = logging.getLogger("chaos.drops")

DEFAULT_PACK_SIZE = 6
PICK_PACK_NAME = "Pick 6 Pack"
FULL_SET_NAME = "Complete Collection"


class DropError(Exception):
    """Raised for invalid drop operations.

    `details` lists every individual problem, e.g. all failed publish checks.
    """

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.details = details or []


def unique_slug(*, creator, title: str, exclude: Drop | None = None) -> str:
    """Slugify `title`, appending -2, -3, ... until it is free for this creator."""

    base = slugify(title)[:130] or "drop"
    qs = Drop.objects.filter(creator=creator)
    if exclude is not None:
        qs = qs.exclude(pk=exclude.pk)
    taken = set(qs.filter(slug__startswith=base).values_list("slug", flat=True))
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"


def _ensure_editable(drop: Drop):
    if drop.status == DropStatus.ARCHIVED:
        raise DropError("Archived drops cannot be changed.")


@transaction.atomic
def create_drop(*, creator, title: str, description: str = "") -> Drop:
    title = (title or "").strip()
    if not title:
        raise DropError("Title is required.")
    drop = Drop.objects.create(
        creator=creator,
        title=title,
        slug=unique_slug(creator=creator, title=title),
        description=(description or "").strip(),
    )
    logger.info("drop.created", extra={"event": "drop.created", "drop_id": drop.id, "creator_id": creator.id})
    return drop


@transaction.atomic
def update_drop(*, drop: Drop, title: str | None = None, description: str | None = None) -> Drop:
    """Edit title/description. Draft drops re-slug on rename; published slugs are frozen."""

    _ensure_editable(drop)
    fields = ["updated_at"]
    if title is not None:
        title = title.strip()
        if not title:
            raise DropError("Title is required.")
        if title != drop.title:
            drop.title = title
            fields.append("title")
            if drop.status == DropStatus.DRAFT and drop.published_at is None:
                drop.slug = unique_slug(creator=drop.creator, title=title, exclude=drop)
                fields.append("slug")
    if description is not None:
        drop.description = description.strip()
        fields.append("description")
    drop.save(update_fields=fields)
    return drop


@transaction.atomic
def add_design(*, drop: Drop, design_id: int, is_hero: bool = False) -> DropDesign:
    """Attach one of the creator's own designs to the drop."""

    _ensure_editable(drop)
    if drop.status == DropStatus.PUBLISHED:
        raise DropError("Unpublish the drop before adding designs.")
    try:
        design = Design.objects.get(id=design_id, creator_id=drop.creator_id)
    except Design.DoesNotExist:
        raise DropError("Design not found.")
    if DropDesign.objects.filter(drop=drop, design=design).exists():
        raise DropError("Design is already in this drop.")

    # Lock the drop row so display_order and the hero flag stay consistent
    Drop.objects.select_for_update().filter(pk=drop.pk).first()
    existing = DropDesign.objects.filter(drop=drop)
    next_order = (existing.aggregate(m=Max("display_order"))["m"] or 0) + 1
    if is_hero:
        existing.filter(is_hero=True).update(is_hero=False)
    try:
        with transaction.atomic():
            drop_design = DropDesign.objects.create(
                drop=drop, design=design, display_order=next_order, is_hero=is_hero
            )
    except IntegrityError:
        raise DropError("Design is already in this drop.")
    logger.info(
        "drop.design_added",
        extra={"event": "drop.design_added", "drop_id": drop.id, "design_id": design.id, "is_hero": is_hero},
    )
    return drop_design


@transaction.atomic
def remove_design(*, drop: Drop, drop_design_id: int) -> None:
    _ensure_editable(drop)
    if drop.status == DropStatus.PUBLISHED:
        raise DropError("Unpublish the drop before removing designs.")
    try:
        drop_design = DropDesign.objects.get(id=drop_design_id, drop=drop)
    except DropDesign.DoesNotExist:
        raise DropError("Design not found.")
    drop_design.delete()
    logger.info(
        "drop.design_removed",
        extra={"event": "drop.design_removed", "drop_id": drop.id, "drop_design_id": drop_design_id},
    )


@transaction.atomic
def create_pack(
    *,
    drop: Drop,
    type: str,
    name: str,
    design_count: int,
    price: Decimal,
    description: str = "",
    is_default: bool = False,
) -> Pack:
    _ensure_editable(drop)
    if type not in PackType.values:
        raise DropError("Unknown pack type.")
    if int(design_count) < 1:
        raise DropError("Packs must contain at least one design.")
    if Decimal(price) < 0:
        raise DropError("Price must not be negative.")
    if is_default:
        drop.packs.filter(is_default=True).update(is_default=False)
    pack = Pack.objects.create(
        drop=drop,
        type=type,
        name=(name or "").strip(),
        description=(description or "").strip(),
        design_count=int(design_count),
        price=Decimal(price),
        is_default=is_default,
    )
    logger.info("drop.pack_created", extra={"event": "drop.pack_created", "drop_id": drop.id, "pack_id": pack.id})
    return pack


@transaction.atomic
def create_default_packs(*, drop: Drop) -> list[Pack]:
    """Create the standard pick-6 pack, plus a full-set pack once the drop has enough designs.

    Packs that already exist are not duplicated.
    """

    _ensure_editable(drop)
    created = []
    design_count = drop.drop_designs.count()

    if not drop.packs.filter(type=PackType.BUILD_A_PACK, name=PICK_PACK_NAME).exists():
        created.append(
            create_pack(
                drop=drop,
                type=PackType.BUILD_A_PACK,
                name=PICK_PACK_NAME,
                description=f"Choose any {DEFAULT_PACK_SIZE} designs from this drop.",
                design_count=DEFAULT_PACK_SIZE,
                price=default_pack_price(DEFAULT_PACK_SIZE, settings.PACK_STICKER_PRICE),
                is_default=not drop.packs.filter(is_default=True).exists(),
            )
        )
    if design_count >= DEFAULT_PACK_SIZE and not drop.packs.filter(type=PackType.FULL_SET).exists():
        created.append(
            create_pack(
                drop=drop,
                type=PackType.FULL_SET,
                name=FULL_SET_NAME,
                description=f"All {design_count} designs from this drop.",
                design_count=design_count,
                price=default_pack_price(design_count, settings.FULL_SET_STICKER_PRICE),
            )
        )
    return created


def publish_errors(drop: Drop) -> list[str]:
    """Return every reason the drop cannot be published (empty when it can)."""

    errors = []
    if drop.status == DropStatus.ARCHIVED:
        errors.append("Archived drops cannot be published.")
    design_count = drop.drop_designs.count()
    if design_count == 0:
        errors.append("Add at least one design.")
    active_packs = list(drop.packs.filter(is_active=True))
    if not active_packs:
        errors.append("Add at least one active pack.")
    for pack in active_packs:
        if pack.type == PackType.BUILD_A_PACK and pack.design_count > design_count:
            errors.append(f'"{pack.name}" needs {pack.design_count} designs but the drop has {design_count}.')
        if pack.type == PackType.FULL_SET and pack.design_count != design_count:
            errors.append(f'"{pack.name}" must include all {design_count} designs.')
    return errors


@transaction.atomic
def publish_drop(*, drop: Drop) -> Drop:
    errors = publish_errors(drop)
    if errors:
        raise DropError("Drop cannot be published.", details=errors)
    drop.status = DropStatus.PUBLISHED
    drop.published_at = drop.published_at or timezone.now()
    drop.save(update_fields=["status", "published_at", "updated_at"])
    logger.info("drop.published", extra={"event": "drop.published", "drop_id": drop.id})
    return drop


@transaction.atomic
def unpublish_drop(*, drop: Drop) -> Drop:
    if drop.status != DropStatus.PUBLISHED:
        raise DropError("Only published drops can be unpublished.")
    drop.status = DropStatus.DRAFT
    drop.save(update_fields=["status", "updated_at"])
    logger.info("drop.unpublished", extra={"event": "drop.unpublished", "drop_id": drop.id})
    return drop


@transaction.atomic
def archive_drop(*, drop: Drop) -> Drop:
    if drop.status == DropStatus.ARCHIVED:
        return drop
    drop.status = DropStatus.ARCHIVED
    drop.save(update_fields=["status", "updated_at"])
    logger.info("drop.archived", extra={"event": "drop.archived", "drop_id": drop.id})
    return drop


def resolve_pack_selection(*, pack: Pack, selected_design_ids) -> list[Design]:
    """Validate a shopper's selection and return the designs in the pack.

    Build-a-pack needs exactly `design_count` distinct designs from the drop.
    A full set ignores the selection and includes every design.
    """

    drop_designs = list(pack.drop.drop_designs.select_related("design").order_by("display_order", "id"))
    if pack.type == PackType.FULL_SET:
        return [dd.design for dd in drop_designs]

    ids = []
    for raw in selected_design_ids or []:
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise DropError("Invalid design selection.")
        if value not in ids:
            ids.append(value)
    if len(ids) != pack.design_count:
        raise DropError(f"Select exactly {pack.design_count} designs.")
    by_id = {dd.design_id: dd.design for dd in drop_designs}
    missing = [i for i in ids if i not in by_id]
    if missing:
        raise DropError("Selected designs must belong to this drop.")
    return [by_id[i] for i in ids]


def quote_pack(*, pack: Pack, selected_design_ids=None, quantity: int = 1, country: str = "US"):
    """Validate a shop selection and price it. Returns (designs, PackQuote)."""

    if not pack.is_active or pack.drop.status != DropStatus.PUBLISHED:
        raise DropError("This pack is not available.")
    if int(quantity) < 1:
        raise DropError("Quantity must be at least 1.")
    shipping = shipping_for_country(country)
    if shipping is None:
        raise DropError("We do not ship to this country.")
    designs = resolve_pack_selection(pack=pack, selected_design_ids=selected_design_ids)
    quote: PackQuote = quote_pack_price(
        price=pack.price, design_count=pack.design_count, quantity=int(quantity), shipping=shipping
    )
    return designs, quote
