"""Selectors for read-only creator queries."""

from decimal import Decimal
from typing import Optional

from common.choices import DropStatus, OrderStatus
from common.money import quantize_money
from django.conf import settings
from django.db.models import Count, F, Q, QuerySet, Sum

from .models import Creator

# Orders that count toward sales figures
SOLD_ORDER_STATUSES = (
    OrderStatus.PAID,
    OrderStatus.FULFILLING,
    OrderStatus.FULFILLMENT_FAILED,
    OrderStatus.SHIPPED,
)


def get_creator_by_store_name(store_name: str) -> Optional[Creator]:
    try:
        return Creator.objects.select_related("user").get(store_name=(store_name or "").lower())
    except Creator.DoesNotExist:
        return None


def list_creator_designs(*, creator: Creator, limit: int = 50) -> QuerySet:
    """Return the creator's generated designs, newest first."""

    from designs.models import Design

    limit = max(1, min(int(limit), 100))
    return Design.objects.filter(creator=creator).order_by("-created_at", "-id")[:limit]


def creator_analytics(*, creator: Creator) -> dict:
    """Aggregate drop, design, order and earnings figures for a dashboard."""

    from designs.models import Design
    from orders.models import Order

    drops = creator.drops.aggregate(
        total=Count("id"),
        published=Count("id", filter=Q(status=DropStatus.PUBLISHED)),
        draft=Count("id", filter=Q(status=DropStatus.DRAFT)),
    )
    sold = Order.objects.filter(drop__creator=creator, status__in=SOLD_ORDER_STATUSES)
    gross = sold.aggregate(gross=Sum(F("subtotal") - F("discount")))["gross"] or Decimal("0.00")
    gross = quantize_money(gross)
    payout = quantize_money(gross * settings.CREATOR_PAYOUT_RATE)
    return {
        "drops": {
            "total": drops["total"] or 0,
            "published": drops["published"] or 0,
            "draft": drops["draft"] or 0,
        },
        "designs": {"total": Design.objects.filter(creator=creator).count()},
        "orders": {"total": sold.count()},
        "earnings": {"totalGross": gross, "totalPayout": payout},
    }
