"""Pack pricing.

A pack is sold at a flat price; savings are measured against buying the
same number of custom stickers at the single-sticker price.
"""

from dataclasses import dataclass
from decimal import Decimal

from common.money import ZERO, format_usd, quantize_money
from django.conf import settings


@dataclass(frozen=True)
class PackQuote:
    subtotal: Decimal
    shipping: Decimal
    savings: Decimal
    total: Decimal

    @property
    def savings_label(self) -> str | None:
        return f"Save {format_usd(self.savings)}" if self.savings > 0 else None

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "savings": self.savings,
            "savingsLabel": self.savings_label,
            "total": self.total,
        }


def shipping_for_country(country: str) -> Decimal | None:
    """Flat shipping for a checkout country, or None when we do not ship there."""
    rate = settings.SHIPPING_RATES.get((country or "").upper())
    return None if rate is None else quantize_money(rate)


def default_pack_price(design_count: int, per_sticker: Decimal) -> Decimal:
    return quantize_money(Decimal(per_sticker) * design_count)


def quote_pack_price(*, price: Decimal, design_count: int, quantity: int = 1, shipping: Decimal = ZERO) -> PackQuote:
    """Price `quantity` copies of a pack.

    Shipping is charged once per order, not per pack.
    """
    price = quantize_money(price)
    subtotal = quantize_money(price * quantity)
    reference = quantize_money(settings.STICKER_UNIT_PRICE) * design_count
    savings = quantize_money(max(ZERO, reference - price) * quantity)
    shipping = quantize_money(shipping)
    return PackQuote(subtotal=subtotal, shipping=shipping, savings=savings, total=subtotal + shipping)
