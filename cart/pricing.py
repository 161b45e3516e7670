"""Custom sticker pricing with quantity-based volume discounts."""

from dataclasses import dataclass
from decimal import Decimal

from common.money import ZERO, quantize_money
from django.conf import settings


@dataclass(frozen=True)
class Quote:
    quantity: int
    subtotal: Decimal
    discount_rate: Decimal
    discount: Decimal
    shipping: Decimal
    total: Decimal


def volume_discount_rate(quantity: int, tiers: dict | None = None) -> Decimal:
    """Rate of the highest tier whose threshold is <= quantity, else 0."""

    tiers = settings.STICKER_VOLUME_DISCOUNTS if tiers is None else tiers
    rate = Decimal("0")
    best = None
    for threshold, tier_rate in tiers.items():
        if quantity >= threshold and (best is None or threshold > best):
            best, rate = threshold, Decimal(tier_rate)
    return rate


def quote_lines(lines) -> Quote:
    """Price (unit_price, quantity) pairs; the discount tier uses the total quantity."""

    lines = [(Decimal(unit_price), int(quantity)) for unit_price, quantity in lines]
    quantity = sum(q for _, q in lines)
    subtotal = quantize_money(sum((price * q for price, q in lines), ZERO))
    rate = volume_discount_rate(quantity)
    discount = quantize_money(subtotal * rate)
    # Custom stickers always ship free
    shipping = ZERO
    return Quote(
        quantity=quantity,
        subtotal=subtotal,
        discount_rate=rate,
        discount=discount,
        shipping=shipping,
        total=subtotal - discount + shipping,
    )


def quote(quantity: int, unit_price: Decimal | None = None) -> Quote:
    unit_price = settings.STICKER_UNIT_PRICE if unit_price is None else unit_price
    return quote_lines([(unit_price, quantity)] if quantity > 0 else [])
