"""Selectors for read-only drop queries (creator dashboard and public shop)."""

from common.choices import DropStatus, OrderStatus
from django.db.models import Count, Min, Prefetch, Q, QuerySet

from .models import Drop, DropDesign, Pack

SOLD_ORDER_STATUSES = (
    OrderStatus.PAID,
    OrderStatus.FULFILLING,
    OrderStatus.FULFILLMENT_FAILED,
    OrderStatus.SHIPPED,
)


def _with_designs(qs: QuerySet) -> QuerySet:
    return qs.prefetch_related(
        Prefetch("drop_designs", queryset=DropDesign.objects.select_related("design").order_by("display_order", "id"))
    )


def hero_image_url(drop: Drop) -> str | None:
    """Hero design image, falling back to the first design in display order."""

    drop_designs = list(drop.drop_designs.all())
    if not drop_designs:
        return None
    hero = next((dd for dd in drop_designs if dd.is_hero), drop_designs[0])
    return hero.design.effective_image_url


def list_creator_drops(*, creator) -> QuerySet:
    qs = Drop.objects.filter(creator=creator).annotate(
        design_count=Count("drop_designs", distinct=True),
        order_count=Count("orders", filter=Q(orders__status__in=SOLD_ORDER_STATUSES), distinct=True),
    )
    return _with_designs(qs).order_by("-created_at", "-id")


def get_creator_drop(*, creator, drop_id) -> Drop | None:
    """Return one of the creator's drops; other creators' drops are invisible."""

    qs = Drop.objects.filter(creator=creator, id=drop_id).annotate(
        design_count=Count("drop_designs", distinct=True),
        order_count=Count("orders", filter=Q(orders__status__in=SOLD_ORDER_STATUSES), distinct=True),
    )
    return _with_designs(qs).prefetch_related("packs").first()


def list_published_drops(*, creator=None) -> QuerySet:
    qs = Drop.objects.filter(status=DropStatus.PUBLISHED).select_related("creator")
    if creator is not None:
        qs = qs.filter(creator=creator)
    qs = qs.annotate(
        design_count=Count("drop_designs", distinct=True),
        starting_price=Min("packs__price", filter=Q(packs__is_active=True)),
    )
    return _with_designs(qs).order_by("-published_at", "-id")


def get_published_drop(*, store_name: str, slug: str) -> Drop | None:
    qs = Drop.objects.filter(
        status=DropStatus.PUBLISHED,
        creator__store_name=(store_name or "").lower(),
        slug=slug,
    ).select_related("creator")
    qs = qs.annotate(
        design_count=Count("drop_designs", distinct=True),
        starting_price=Min("packs__price", filter=Q(packs__is_active=True)),
    )
    qs = _with_designs(qs).prefetch_related(
        Prefetch("packs", queryset=Pack.objects.filter(is_active=True).order_by("price", "id"), to_attr="active_packs")
    )
    return qs.first()


def get_pack(pack_id) -> Pack | None:
    try:
        return Pack.objects.select_related("drop", "drop__creator").get(id=pack_id)
    except (Pack.DoesNotExist, ValueError, TypeError):
        return None
