"""
Single source of truth for cycle profitability math.

All profit calculations use Decimal for precision and consistent rounding.
Scanner, ranker and executor call into this module instead of computing
percentages or basis points inline.
"""

from decimal import Decimal, getcontext
from typing import Union

from .constants import BPS_PER_UNIT

# Set high precision for all decimal operations
getcontext().prec = 50

Number = Union[Decimal, int, float, str]

_BPS = Decimal(BPS_PER_UNIT)
_HUNDRED = Decimal("100")
_ONE = Decimal("1")


def to_decimal(value: Number) -> Decimal:
    """Convert a number or decimal string to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def pct_to_bps(pct: Decimal) -> Decimal:
    """Convert percent to basis points. 0.15% -> 15 bps"""
    return pct * _HUNDRED


def bps_to_pct(bps: Decimal) -> Decimal:
    """Convert basis points to percent. 15 bps -> 0.15%"""
    return bps / _HUNDRED


def profit_bps(amount_in: Number, amount_out: Number) -> Decimal:
    """
    Profit of a round trip in basis points: ``(out - in) / in * 10000``.

    Example:
        >>> profit_bps(100, 101) == 100
        True
    """
    amount_in = to_decimal(amount_in)
    amount_out = to_decimal(amount_out)
    if amount_in <= 0:
        raise ValueError(f"amount_in must be positive, got {amount_in}")
    return (amount_out - amount_in) / amount_in * _BPS


def profit_pct(amount_in: Number, amount_out: Number) -> Decimal:
    """Profit of a round trip in percent: ``(out - in) / in * 100``."""
    return bps_to_pct(profit_bps(amount_in, amount_out))


def minimum_output(quoted_output: Number, max_slippage_bps: Number) -> Decimal:
    """
    Lowest output accepted for a hop: ``quoted * (1 - slippage_bps / 10000)``.

    Example:
        >>> minimum_output(1000, 50) == 995
        True
    """
    quoted_output = to_decimal(quoted_output)
    factor = _ONE - to_decimal(max_slippage_bps) / _BPS
    return quoted_output * factor


def format_amount(amount: Decimal) -> str:
    """Render an amount as a plain decimal string (no exponent)."""
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
