"""
Fixed-digit decimal rounding used by every monetary computation.
"""

import functools
from decimal import Decimal, ROUND_HALF_UP, getcontext, localcontext
from typing import Union

Number = Union[Decimal, int, str, float]

ZERO = Decimal("0")

# Significant digits for amount arithmetic. Enough for 18-decimal tokens
# holding amounts far beyond any real supply.
AMOUNT_PRECISION = 80


def amount_context():
    """
    Decimal context wide enough for token amounts.

    The default context keeps 28 significant digits, which an 18-decimal
    token exceeds from 10**10 upwards.
    """
    ctx = getcontext().copy()
    ctx.prec = max(ctx.prec, AMOUNT_PRECISION)
    return localcontext(ctx)


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal, going through str() for floats."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_to(digits: int = 0, value: Number = 0) -> Decimal:
    """
    Round a value to a fixed number of decimal places.

    Halves are rounded away from zero, so ``round_to(2, "-0.125")`` gives
    ``Decimal("-0.13")``. ``digits`` of 0 coerces to an integral Decimal.

    Args:
        digits: Number of decimal places to keep
        value: Value to round

    Returns:
        Rounded Decimal
    """
    digits = int(digits)
    d = to_decimal(value)
    exponent = Decimal(1).scaleb(-digits)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, AMOUNT_PRECISION, d.adjusted() + digits + 2)
        return d.quantize(exponent, rounding=ROUND_HALF_UP)


def with_amount_context(func):
    """Run ``func`` under ``amount_context()``."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with amount_context():
            return func(*args, **kwargs)
    return wrapper
