"""
Unified money formatting for the whole project.

Billing math keeps full Decimal precision; rounding to 2 places happens only
here, when values leave the service.

Usage:
    from app.utils.money import format_money, money_str

    money_str(Decimal("83.25"))          -> "83.25"
    money_str(Decimal("16.6666666"))     -> "16.67"
    format_money(1200.5)                 -> "₹1,200.50"
"""
from decimal import Decimal, ROUND_HALF_UP

from app.config import get_settings

_CENTS = Decimal("0.01")


def round_money(amount, places: Decimal = _CENTS) -> Decimal:
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(places, rounding=ROUND_HALF_UP)


def money_str(amount) -> str | None:
    """Decimal as a 2-place string for API payloads (None passes through)."""
    if amount is None:
        return None
    return str(round_money(amount))


def format_money(amount, symbol: str | None = None) -> str:
    """
    Human-readable amount with currency symbol and thousands separators.

    Args:
        amount: int / float / Decimal / str
        symbol: currency symbol, defaults to settings.CURRENCY_SYMBOL
    """
    if symbol is None:
        symbol = get_settings().CURRENCY_SYMBOL
    return f"{symbol}{round_money(amount):,.2f}"


def percent_str(value, places: int = 1) -> str:
    """Percentage rounded for display (one decimal place by default)."""
    return str(round_money(value, Decimal(1).scaleb(-places)))
