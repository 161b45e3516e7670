"""Selectors for read-only design queries."""

from common.choices import OrderStatus
from django.core.paginator import Paginator
from django.db.models import QuerySet

from .models import Design

RECENT_DEFAULT_LIMIT = 20
RECENT_MAX_LIMIT = 50

PURCHASED_ORDER_STATUSES = (
    OrderStatus.PAID,
    OrderStatus.FULFILLING,
    OrderStatus.FULFILLMENT_FAILED,
    OrderStatus.SHIPPED,
)


def get_design(design_id) -> Design | None:
    try:
        return Design.objects.get(id=design_id)
    except (Design.DoesNotExist, ValueError, TypeError):
        return None


def list_public_designs() -> QuerySet:
    return Design.objects.filter(is_public=True).order_by("-created_at", "-id")


def list_user_designs(*, user_key: str) -> QuerySet:
    return Design.objects.filter(user_key=user_key).order_by("-created_at", "-id")


def list_purchased_designs(*, email: str) -> QuerySet:
    """Distinct designs appearing on paid orders placed with `email`."""

    return (
        Design.objects.filter(
            order_items__order__email__iexact=(email or "").strip(),
            order_items__order__status__in=PURCHASED_ORDER_STATUSES,
        )
        .distinct()
        .order_by("-created_at", "-id")
    )


def paginate_designs(queryset: QuerySet, *, page, limit) -> tuple[list, dict]:
    """Slice a design queryset and return it with camelCase pagination metadata.

    Bad or out-of-range `page` values fall back to the nearest valid page;
    `limit` is clamped to 1..RECENT_MAX_LIMIT.
    """

    try:
        limit = int(limit)
    except (TypeError, ValueError):
        limit = RECENT_DEFAULT_LIMIT
    limit = max(1, min(limit, RECENT_MAX_LIMIT))

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    return list(page_obj.object_list), {
        "currentPage": page_obj.number,
        "pageSize": limit,
        "totalItems": paginator.count,
        "totalPages": paginator.num_pages,
    }
