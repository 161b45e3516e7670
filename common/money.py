"""Money helpers shared by cart, drop and order pricing.

Amounts are `Decimal` dollars everywhere inside the app; integer cents only
appear at the Stripe boundary.
"""

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(value) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_cents(value) -> int:
    return int((quantize_money(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def format_usd(value) -> str:
    return f"${quantize_money(value):.2f}"
