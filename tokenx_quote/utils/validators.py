"""
Input validation utilities

This module provides validation functions for prices, quantities, depth
limits and pair codes used by the service and API layers.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from .exceptions import (
    ValidationException,
    InvalidQuantityException,
    PriceOutOfBoundsException,
)
from .rounding import round_to


def sanitize_decimal(value: Union[str, int, float, Decimal], field: str = "value") -> Decimal:
    """
    Convert a value to Decimal with proper error handling.

    Args:
        value: Value to convert to Decimal
        field: Name of the field being converted, reported on failure

    Returns:
        Decimal representation of the value

    Raises:
        ValidationException: If value cannot be converted to a finite Decimal
    """
    if isinstance(value, bool):
        raise ValidationException(
            f"Invalid decimal value for {field}: {value}",
            details={"field": field, "value": value}
        )
    try:
        if isinstance(value, Decimal):
            result = value
        else:
            result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationException(
            f"Invalid decimal value for {field}: {value}",
            details={"field": field, "value": value, "error": str(e)}
        )
    if not result.is_finite():
        raise ValidationException(
            f"Decimal value for {field} must be finite, got {value}",
            details={"field": field, "value": str(value)}
        )
    return result


def validate_price_limit(price_limit: Optional[Decimal], pair: str) -> Optional[Decimal]:
    """
    Validate a caller-supplied price limit.

    Args:
        price_limit: Limit price, or None for no limit
        pair: Pair code for context

    Returns:
        The price limit

    Raises:
        PriceOutOfBoundsException: If the limit is not positive
    """
    if price_limit is None:
        return None

    if price_limit <= 0:
        raise PriceOutOfBoundsException(
            f"Price limit must be positive, got {price_limit}",
            details={"pair": pair, "price_limit": str(price_limit)}
        )
    return price_limit


def validate_amount(
    amount: Decimal,
    pair: str,
    field: str = "quantity",
    max_amount: Decimal = Decimal("1000000000"),
) -> bool:
    """
    Validate a requested order quantity or value.

    Args:
        amount: Quantity or value to validate
        pair: Pair code for context
        field: Which amount is being validated
        max_amount: Maximum acceptable amount

    Returns:
        True if the amount is valid

    Raises:
        InvalidQuantityException: If the amount is invalid
    """
    if amount <= 0:
        raise InvalidQuantityException(
            f"{field.capitalize()} must be positive, got {amount}",
            details={"pair": pair, field: str(amount)}
        )

    if amount > max_amount:
        raise InvalidQuantityException(
            f"{field.capitalize()} {amount} exceeds maximum {max_amount}",
            details={"pair": pair, field: str(amount), "max": str(max_amount)}
        )

    return True


def normalize_depth_limit(depth_limit: Optional[Union[int, str, Decimal]]) -> Optional[int]:
    """
    Coerce a requested depth limit to a whole number of levels.

    Returns None (no limit) for None or non-positive values.
    """
    if depth_limit is None:
        return None
    levels = int(round_to(0, sanitize_decimal(depth_limit, "depth_limit")))
    if levels <= 0:
        return None
    return levels


def validate_pair_code(pair_code: str) -> str:
    """
    Validate a pair code of the form ``TOKEN1-TOKEN2``.

    Returns:
        The stripped pair code

    Raises:
        ValidationException: If the code is empty or malformed
    """
    if not pair_code or not isinstance(pair_code, str):
        raise ValidationException(
            f"Invalid pair code: {pair_code}",
            details={"field": "pair", "pair": pair_code}
        )

    pair_code = pair_code.strip()
    tokens = pair_code.split("-")
    if len(tokens) != 2 or not all(tokens):
        raise ValidationException(
            f"Pair code must look like TOKEN1-TOKEN2, got {pair_code}",
            details={"field": "pair", "pair": pair_code}
        )

    return pair_code
