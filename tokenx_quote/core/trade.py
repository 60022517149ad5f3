"""
Trade settlement and candlestick records

These records are produced by the settlement service. They share the
order vocabulary (side, fee payer) and are only read by reporting code.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from ..utils.exceptions import ValidationException
from ..utils.validators import sanitize_decimal

ZERO = Decimal("0")

DEFAULT_TIME_SLICE_MINUTES = 15


class TradeFeePayer(Enum):
    """Which party of a trade paid its fees."""
    BUYER = "BUYER"
    SELLER = "SELLER"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TimeSlice:
    """One candlestick bucket of trading activity."""

    start_time: int = 0
    open: Decimal = ZERO
    close: Decimal = ZERO
    high: Decimal = ZERO
    low: Decimal = ZERO
    token1_volume: Decimal = ZERO
    token2_volume: Decimal = ZERO
    no_of_trades: int = 0

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> "TimeSlice":
        """Build a time slice from its stored document form."""

        def dec(key: str) -> Decimal:
            raw = doc.get(key)
            return sanitize_decimal(raw, key) if raw else ZERO

        return cls(
            start_time=int(doc.get("startTime") or 0),
            open=dec("open"),
            close=dec("close"),
            high=dec("high"),
            low=dec("low"),
            token1_volume=dec("token1Volume"),
            token2_volume=dec("token2Volume"),
            no_of_trades=int(doc.get("noOfTrades") or 0),
        )


@dataclass(frozen=True, slots=True)
class Trade:
    """
    A settled trade between a buy order and a sell order.

    Attributes:
        buyer: Account on the buy side
        buy_order_id: Id of the buy order
        seller: Account on the sell side
        sell_order_id: Id of the sell order
        token1: Base token identifier
        token2: Quote token identifier
        fee_payer: Party that paid the fees
        id: Trade identifier
        pair: Pair code
        quantity: token1 amount exchanged
        price: Execution price
        fee_token: Token the fees were charged in
        liquidity_fee: Liquidity fee charged
        platform_fee: Platform fee charged
        date: Settlement time, epoch milliseconds
        parties: Accounts involved, buyer and seller by default
    """

    buyer: str
    buy_order_id: str
    seller: str
    sell_order_id: str
    token1: str
    token2: str
    fee_payer: TradeFeePayer
    id: str = ""
    pair: str = ""
    quantity: Decimal = ZERO
    price: Decimal = ZERO
    fee_token: str = ""
    liquidity_fee: Decimal = ZERO
    platform_fee: Decimal = ZERO
    date: int = field(default_factory=lambda: int(time.time() * 1000))
    parties: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.parties:
            object.__setattr__(self, "parties", (self.buyer, self.seller))

    @property
    def value(self) -> Decimal:
        """token2 amount exchanged."""
        return self.quantity * self.price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pair": self.pair,
            "buyer": self.buyer,
            "buyOrderId": self.buy_order_id,
            "seller": self.seller,
            "sellOrderId": self.sell_order_id,
            "token1": self.token1,
            "token2": self.token2,
            "quantity": str(self.quantity),
            "price": str(self.price),
            "feePayer": self.fee_payer.value,
            "feeToken": self.fee_token,
            "liquidityFee": str(self.liquidity_fee),
            "platformFee": str(self.platform_fee),
            "date": self.date,
            "parties": list(self.parties),
        }


# (document key, attribute name)
_REQUIRED_TRADE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("buyer", "buyer"),
    ("buyOrderId", "buy_order_id"),
    ("seller", "seller"),
    ("sellOrderId", "sell_order_id"),
    ("token1", "token1"),
    ("token2", "token2"),
    ("feePayer", "fee_payer"),
)


def create_trade(fields: Mapping[str, Any]) -> Trade:
    """
    Create a Trade from a stored trade document.

    Raises:
        ValidationException: Naming the first missing or invalid field
    """
    values: Dict[str, Any] = {}
    for key, attr in _REQUIRED_TRADE_FIELDS:
        raw = fields.get(key, fields.get(attr))
        if not raw:
            raise ValidationException(
                f"{key} is a required field to create a trade",
                details={"field": key}
            )
        values[attr] = raw

    try:
        values["fee_payer"] = TradeFeePayer(str(values["fee_payer"]).upper())
    except ValueError:
        raise ValidationException(
            f"Invalid feePayer: {values['fee_payer']}",
            details={"field": "feePayer", "value": values["fee_payer"]}
        )

    def dec(key: str, attr: str) -> Decimal:
        raw = fields.get(key, fields.get(attr))
        return sanitize_decimal(raw, key) if raw else ZERO

    optional: Dict[str, Any] = {
        "quantity": dec("quantity", "quantity"),
        "price": dec("price", "price"),
        "liquidity_fee": dec("liquidityFee", "liquidity_fee"),
        "platform_fee": dec("platformFee", "platform_fee"),
        "id": str(fields.get("id") or ""),
        "pair": str(fields.get("pair") or ""),
        "fee_token": str(fields.get("feeToken", fields.get("fee_token")) or ""),
        "parties": tuple(fields.get("parties") or ()),
    }
    if fields.get("date"):
        optional["date"] = int(fields["date"])

    return Trade(**{k: (str(v) if k != "fee_payer" else v) for k, v in values.items()}, **optional)


def time_slice_start(date: int, duration_minutes: int = DEFAULT_TIME_SLICE_MINUTES) -> int:
    """Floor an epoch-millisecond timestamp to the start of its time slice."""
    slice_size = duration_minutes * 60 * 1000
    return date - (date % slice_size)
