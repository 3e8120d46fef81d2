"""
Fraction Math Utilities for Share Calculations.

Provides exact rational arithmetic for inheritance shares. Every share,
residue and reconciliation factor in the engine goes through these
functions instead of float arithmetic.

Why Fraction?
- Float: 1/6 + 1/6 + 1/2 + 1/6 = 0.9999999999999999
- Fraction: 1/6 + 1/6 + 1/2 + 1/6 = 1

This matters for:
- Awl and Radd detection, which compare the allocated total against exactly 1
- Conservation checks (shares must sum to exactly 1, not 1 ± epsilon)
- Deterministic output for the same heir list and catalog snapshot

Decimal is only used at the edge, to render a fraction for display or to
turn it into a monetary amount.
"""

from decimal import Decimal
from fractions import Fraction
from typing import Iterable, Union
import logging

logger = logging.getLogger(__name__)

# Type alias for values that can be converted to an exact fraction
Rational = Fraction
Exact = Union[int, str, Decimal, Fraction]

# Default rendering precision
SHARE_PLACES = 6
MONEY_PLACES = 2


def to_fraction(value: Exact) -> Fraction:
    """
    Convert an exact value to a reduced, non-negative Fraction.

    Args:
        value: int, Fraction, Decimal, or a string such as "1/6" or "0.5"

    Returns:
        Fraction in lowest terms

    Raises:
        TypeError: If value is a float (floats cannot carry exact shares)
        ValueError: If the value is negative or cannot be parsed

    Examples:
        >>> to_fraction("2/4")
        Fraction(1, 2)
        >>> to_fraction(Decimal("0.125"))
        Fraction(1, 8)
    """
    if isinstance(value, bool):
        raise TypeError("Booleans are not valid share values")
    if isinstance(value, float):
        raise TypeError(
            f"Float value {value!r} cannot be used as an exact share; "
            "supply it as a fraction string such as '1/6'"
        )
    if isinstance(value, Fraction):
        result = value
    elif isinstance(value, str):
        result = Fraction(value.strip())
    else:
        result = Fraction(value)

    if result < 0:
        raise ValueError(f"Shares cannot be negative: {value!r}")
    return result


def add(*values: Exact) -> Fraction:
    """
    Add multiple values exactly.

    Examples:
        >>> add("1/6", "1/6", "1/2")
        Fraction(5, 6)
    """
    result = Fraction(0)
    for v in values:
        result += to_fraction(v)
    return result


def sum_fractions(values: Iterable[Exact]) -> Fraction:
    """Sum an iterable of fractions exactly."""
    return add(*values)


def subtract(a: Exact, b: Exact) -> Fraction:
    """
    Subtract b from a, clamping the result at zero.

    Residue and reconciliation never produce negative shares, so an
    over-allocated estate yields a zero residue here and is handled by Awl.

    Examples:
        >>> subtract(1, "3/4")
        Fraction(1, 4)
        >>> subtract(1, "5/4")
        Fraction(0, 1)
    """
    result = to_fraction(a) - to_fraction(b)
    if result < 0:
        return Fraction(0)
    return result


def multiply(a: Exact, b: Exact) -> Fraction:
    """Multiply two values exactly."""
    return to_fraction(a) * to_fraction(b)


def divide(a: Exact, b: Exact) -> Fraction:
    """
    Divide a by b exactly.

    Returns the zero fraction if either operand is zero. An heir with no
    computed share yet divides to zero instead of raising.

    Examples:
        >>> divide("1/4", "5/4")
        Fraction(1, 5)
        >>> divide("1/4", 0)
        Fraction(0, 1)
    """
    a_frac = to_fraction(a)
    b_frac = to_fraction(b)
    if a_frac == 0 or b_frac == 0:
        return Fraction(0)
    return a_frac / b_frac


def is_zero(value: Exact) -> bool:
    return to_fraction(value) == 0


def compare(a: Exact, b: Exact) -> int:
    """
    Compare two values exactly.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b
    """
    a_frac = to_fraction(a)
    b_frac = to_fraction(b)
    if a_frac < b_frac:
        return -1
    if a_frac > b_frac:
        return 1
    return 0


def round_half_up(value: Fraction, places: int) -> Decimal:
    """
    Round an exact fraction to a fixed number of decimal places, half-up.

    The rounding is done in integer arithmetic on the fraction itself, so the
    result is independent of the decimal context precision: large estates
    and long share renderings keep every digit.

    Examples:
        >>> round_half_up(Fraction(2, 3), 4)
        Decimal('0.6667')
        >>> round_half_up(Fraction(-5, 2), 0)
        Decimal('-3')
    """
    sign = 1 if value < 0 else 0
    quotient, remainder = divmod(abs(value.numerator) * 10 ** places, value.denominator)
    if 2 * remainder >= value.denominator:
        quotient += 1
    return Decimal((sign, tuple(int(digit) for digit in str(quotient)), -places))


def to_decimal(value: Exact, places: int = SHARE_PLACES) -> Decimal:
    """
    Render a fraction as a Decimal for display.

    Informational only. Never compare the result to decide an allocation.

    Examples:
        >>> to_decimal("1/3", 4)
        Decimal('0.3333')
    """
    return round_half_up(to_fraction(value), places)


def apply_to_amount(
    value: Exact,
    amount: Union[int, str, Decimal],
    places: int = MONEY_PLACES,
) -> Decimal:
    """
    Apply a fraction to a monetary amount.

    The multiplication is done exactly and only the final result is rounded.

    Args:
        value: Share of the estate
        amount: Net estate value
        places: Decimal places to round the amount to

    Returns:
        Rounded monetary amount

    Examples:
        >>> apply_to_amount("7/16", Decimal("160000"))
        Decimal('70000.00')
    """
    return round_half_up(Fraction(Decimal(amount)) * to_fraction(value), places)


def format_fraction(value: Exact) -> str:
    """
    Format a fraction as "numerator/denominator".

    Examples:
        >>> format_fraction("14/32")
        '7/16'
        >>> format_fraction(1)
        '1'
    """
    frac = to_fraction(value)
    if frac.denominator == 1:
        return str(frac.numerator)
    return f"{frac.numerator}/{frac.denominator}"


# Constants for common Fara'id shares
ZERO = Fraction(0)
ONE = Fraction(1)
HALF = Fraction(1, 2)
THIRD = Fraction(1, 3)
QUARTER = Fraction(1, 4)
SIXTH = Fraction(1, 6)
EIGHTH = Fraction(1, 8)
TWO_THIRDS = Fraction(2, 3)
