"""Fixed-point currency arithmetic.

Amounts travel through the system as decimal strings with two fractional
digits ("12.50") and are converted to integer minor units (cents) for every
arithmetic step. Binary floating point is never used to compute a value.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, DecimalException
from typing import Literal

logger = logging.getLogger(__name__)

Amount = str | int | float | Decimal
Grouping = Literal["indian", "western"]

MINOR_UNITS_PER_MAJOR = 100
CENT = Decimal("0.01")


def to_minor_units(value: Amount | None) -> int:
    """
    Convert a decimal amount to integer minor units.

    The decimal text is parsed directly and rounded to the nearest cent with
    ROUND_HALF_UP (half away from zero), so "0.005" becomes 1 and "-0.005"
    becomes -1. Floats go through their shortest repr ("0.1", not
    0.1000000000000000055...).

    Args:
        value: Decimal string, int, float or Decimal

    Returns:
        Amount in minor units. Empty, non-numeric, non-finite or out-of-range
        input yields 0; callers that require a positive amount must reject
        that themselves.
    """
    text = "" if value is None else str(value).strip()
    if not text or "_" in text:
        return 0

    try:
        amount = Decimal(text)
        if not amount.is_finite():
            return 0
        # Round once, at the cent, then shift; the shift is exact
        cents = amount.quantize(CENT, rounding=ROUND_HALF_UP)
        minor = cents.scaleb(2)
    except DecimalException:
        logger.debug(f"Unparsable or out-of-range amount treated as zero: {value!r}")
        return 0

    return int(minor)


def from_minor_units(cents: int) -> str:
    """Format minor units as a decimal string with exactly two fractional digits."""
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), MINOR_UNITS_PER_MAJOR)
    return f"{sign}{whole}.{frac:02d}"


def from_number(value: Amount) -> str:
    """Normalize any amount to its two-decimal string ("5" -> "5.00")."""
    return from_minor_units(to_minor_units(value))


def add(a: Amount, b: Amount) -> str:
    """Add two amounts exactly."""
    return from_minor_units(to_minor_units(a) + to_minor_units(b))


def subtract(a: Amount, b: Amount) -> str:
    """Subtract b from a exactly."""
    return from_minor_units(to_minor_units(a) - to_minor_units(b))


def compare(a: Amount, b: Amount) -> int:
    """
    Compare two amounts.

    Returns:
        Negative if a < b, zero if equal, positive if a > b
        (the difference in minor units)
    """
    return to_minor_units(a) - to_minor_units(b)


def is_zero(amount: Amount) -> bool:
    """Check whether an amount is zero to the cent."""
    return to_minor_units(amount) == 0


def _group_digits(whole: int, grouping: Grouping) -> str:
    """Insert thousands separators into a non-negative integer."""
    if grouping == "western":
        return f"{whole:,}"
    if grouping != "indian":
        raise ValueError(f"Unknown digit grouping: {grouping}")

    # Indian grouping: last three digits, then pairs (12,34,567)
    digits = str(whole)
    if len(digits) <= 3:
        return digits

    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    return ",".join([head, *pairs, tail])


def format_amount(
    amount: Amount,
    currency_symbol: str = "₹",
    grouping: Grouping = "indian",
) -> str:
    """
    Format an amount for display, e.g. "₹1,23,456.70".

    Display only. The result is never parsed back for computation.

    Args:
        amount: Amount to format
        currency_symbol: Symbol prefixed to the signed number
        grouping: "indian" (12,34,567.89) or "western" (1,234,567.89)

    Returns:
        Grouped string with exactly two decimals
    """
    cents = to_minor_units(amount)
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), MINOR_UNITS_PER_MAJOR)
    return f"{currency_symbol}{sign}{_group_digits(whole, grouping)}.{frac:02d}"
