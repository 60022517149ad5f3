"""
Trading pair configuration

A Pair carries the per-market settings the quote engine reads: token
identifiers, each token's decimal precision, and the fee rates.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Mapping, Tuple

from .trade import TimeSlice
from ..utils.exceptions import ValidationException
from ..utils.validators import sanitize_decimal

ZERO = Decimal("0")

REQUIRED_FIELDS: Tuple[str, ...] = ("token1", "token2")


@dataclass(frozen=True, slots=True)
class Pair:
    """
    Static per-market configuration, read-only to the quote engine.

    Attributes:
        token1: Base token identifier
        token2: Quote token identifier
        code: Pair code (e.g. "ETH-USDC")
        token1_decimals: Decimal places token1 amounts are kept to
        token2_decimals: Decimal places token2 amounts are kept to
        liquidity_fee: Fractional fee paid to liquidity providers
        platform_fee: Fractional fee kept by the platform
        latest_time_slice: Most recent candlestick for the pair
    """

    token1: str
    token2: str
    code: str = ""
    token1_decimals: int = 0
    token2_decimals: int = 0
    liquidity_fee: Decimal = ZERO
    platform_fee: Decimal = ZERO
    latest_time_slice: TimeSlice = field(default_factory=TimeSlice)

    @property
    def fee_rate(self) -> Decimal:
        """Total fractional fee charged on a market order."""
        return self.liquidity_fee + self.platform_fee

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "token1": self.token1,
            "token2": self.token2,
            "token1Decimals": self.token1_decimals,
            "token2Decimals": self.token2_decimals,
            "liquidityFee": str(self.liquidity_fee),
            "platformFee": str(self.platform_fee),
        }


def _lookup(fields: Mapping[str, Any], key: str, attr: str) -> Any:
    if key in fields:
        return fields[key]
    return fields.get(attr)


def _parse_decimals(raw: Any, field_name: str) -> int:
    if not raw:
        return 0
    digits = sanitize_decimal(raw, field_name)
    if digits < 0 or digits != digits.to_integral_value():
        raise ValidationException(
            f"{field_name} must be a non-negative whole number, got {raw}",
            details={"field": field_name, "value": raw}
        )
    return int(digits)


def _parse_fee(raw: Any, field_name: str) -> Decimal:
    if not raw:
        return ZERO
    fee = sanitize_decimal(raw, field_name)
    if fee < 0 or fee >= 1:
        raise ValidationException(
            f"{field_name} must be a fraction in [0, 1), got {raw}",
            details={"field": field_name, "value": str(raw)}
        )
    return fee


def create_pair(fields: Mapping[str, Any]) -> Pair:
    """
    Create a Pair from a stored pair document.

    Raises:
        ValidationException: If token1 or token2 is missing, or a numeric field is invalid
    """
    for key in REQUIRED_FIELDS:
        if not fields.get(key):
            raise ValidationException(
                f"{key} is a required field to create a pair",
                details={"field": key}
            )

    raw_slice = _lookup(fields, "latestTimeSlice", "latest_time_slice")
    if isinstance(raw_slice, TimeSlice):
        time_slice = raw_slice
    elif raw_slice:
        time_slice = TimeSlice.from_dict(raw_slice)
    else:
        time_slice = TimeSlice()

    return Pair(
        token1=str(fields["token1"]),
        token2=str(fields["token2"]),
        code=str(fields.get("code") or ""),
        token1_decimals=_parse_decimals(
            _lookup(fields, "token1Decimals", "token1_decimals"), "token1Decimals"
        ),
        token2_decimals=_parse_decimals(
            _lookup(fields, "token2Decimals", "token2_decimals"), "token2Decimals"
        ),
        liquidity_fee=_parse_fee(_lookup(fields, "liquidityFee", "liquidity_fee"), "liquidityFee"),
        platform_fee=_parse_fee(_lookup(fields, "platformFee", "platform_fee"), "platformFee"),
        latest_time_slice=time_slice,
    )


def token_name_from_pair(pair_code: str, token_no: str) -> str:
    """
    Return one token of a ``TOKEN1-TOKEN2`` pair code.

    Args:
        pair_code: Pair code
        token_no: "token1" or "token2"
    """
    token1, _, token2 = pair_code.partition("-")
    return token1 if token_no == "token1" else token2
