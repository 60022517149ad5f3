"""
Order domain model with enums and validation

This module defines the Order class, the enums it is classified by, and the
create_order factory that maps stored order documents onto validated orders.
"""

import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any, Mapping, Tuple

from ..utils.exceptions import ValidationException
from ..utils.rounding import with_amount_context
from ..utils.validators import sanitize_decimal


class OrderType(Enum):
    """Order type enumeration."""
    MARKET = "MARKET"
    LIMIT = "LIMIT"
    LIMIT_ONLY = "LIMIT-ONLY"  # Rests on the book, never takes liquidity

    def __str__(self) -> str:
        return self.value


class OrderSide(Enum):
    """Order side enumeration."""
    BUY = "BUY"
    SELL = "SELL"

    def __str__(self) -> str:
        return self.value

    @property
    def opposite(self) -> "OrderSide":
        """The side this side trades against."""
        return OrderSide.SELL if self is OrderSide.BUY else OrderSide.BUY


class OrderStatus(Enum):
    """Order status enumeration."""
    SUBMITTING = "SUBMITTING"  # Queued for the matching service, not yet processed
    PENDING = "PENDING"        # Resting in the order book, awaiting fulfilment
    COMPLETED = "COMPLETED"    # Fully fulfilled
    CANCELLED = "CANCELLED"    # Cancelled by its owner

    def __str__(self) -> str:
        return self.value


ZERO = Decimal("0")

# Document keys checked, in order, before anything else is parsed.
REQUIRED_FIELDS: Tuple[str, ...] = ("owner", "pair", "token1", "token2", "side", "type")

# (attribute name, stored document key)
_DECIMAL_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("price", "price"),
    ("quantity", "quantity"),
    ("value", "value"),
    ("quantity_fulfilled", "quantityFulfilled"),
    ("value_fulfilled", "valueFulfilled"),
)


@dataclass(frozen=True, slots=True)
class Order:
    """
    A resting or candidate order on one trading pair.

    Orders are immutable snapshots: the quote engine only ever reads them,
    and fills are applied by the external matching service.

    Attributes:
        owner: Account that placed the order
        pair: Pair code (e.g. "ETH-USDC")
        token1: Base token identifier
        token2: Quote token identifier
        side: Buy or sell
        order_type: MARKET, LIMIT or LIMIT-ONLY
        id: "<pair>_<rawId>" identifier
        price: Price per unit of token1 in token2 (zero for market orders)
        quantity: Size in token1
        value: Size in token2
        quantity_fulfilled: token1 amount already filled
        value_fulfilled: token2 amount already filled
        quantity_specified: True when the order is denominated in quantity
        status: Lifecycle status, None when unknown
        date_created: Creation time, epoch milliseconds
        date_completed: Completion time, epoch milliseconds
    """

    owner: str
    pair: str
    token1: str
    token2: str
    side: OrderSide
    order_type: OrderType
    id: str = ""
    price: Decimal = ZERO
    quantity: Decimal = ZERO
    value: Decimal = ZERO
    quantity_fulfilled: Decimal = ZERO
    value_fulfilled: Decimal = ZERO
    quantity_specified: bool = True
    status: Optional[OrderStatus] = None
    date_created: int = 0
    date_completed: int = 0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Validate the order's field invariants.

        Raises:
            ValidationException: Naming the first field that is missing or inconsistent
        """
        for name in ("owner", "pair", "token1", "token2"):
            if not getattr(self, name):
                _missing(name)

        if not isinstance(self.side, OrderSide):
            _missing("side")
        if not isinstance(self.order_type, OrderType):
            _missing("type")

        for name, key in _DECIMAL_FIELDS:
            if getattr(self, name) < 0:
                raise ValidationException(
                    f"{key} cannot be negative, got {getattr(self, name)}",
                    details={"field": key, "value": str(getattr(self, name))}
                )

        if self.order_type != OrderType.MARKET and not self.price:
            _missing("price")

        if self.quantity_specified:
            if not self.quantity:
                raise ValidationException(
                    "quantity must be specified to create this order",
                    details={"field": "quantity"}
                )
            if self.quantity_fulfilled > self.quantity:
                raise ValidationException(
                    f"quantityFulfilled {self.quantity_fulfilled} exceeds quantity {self.quantity}",
                    details={"field": "quantityFulfilled"}
                )
        else:
            if not self.value:
                raise ValidationException(
                    "value must be specified to create this order",
                    details={"field": "value"}
                )
            if self.value_fulfilled > self.value:
                raise ValidationException(
                    f"valueFulfilled {self.value_fulfilled} exceeds value {self.value}",
                    details={"field": "valueFulfilled"}
                )

    @property
    def remaining_quantity(self) -> Decimal:
        """Unfulfilled token1 quantity."""
        return self.quantity - self.quantity_fulfilled

    @property
    def remaining_value(self) -> Decimal:
        """Unfulfilled token2 value."""
        return self.value - self.value_fulfilled

    @property
    def is_buy(self) -> bool:
        return self.side == OrderSide.BUY

    @property
    def is_sell(self) -> bool:
        return self.side == OrderSide.SELL

    @property
    def is_market(self) -> bool:
        return self.order_type == OrderType.MARKET

    @property
    def is_active(self) -> bool:
        """Check if order can still be matched."""
        return self.status not in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    @property
    def is_resting(self) -> bool:
        """Check if order belongs in a resting order book."""
        return self.is_active and not self.is_market

    def __repr__(self) -> str:
        price_str = str(self.price) if self.price else "MARKET"
        size_str = f"{self.quantity}" if self.quantity_specified else f"value {self.value}"
        return (
            f"Order(id={self.id}, {self.side.value} {size_str} {self.pair} @ {price_str}, "
            f"type={self.order_type.value}, "
            f"filled={self.quantity_fulfilled}/{self.quantity})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert order to its stored document form."""
        return {
            "id": self.id,
            "owner": self.owner,
            "pair": self.pair,
            "token1": self.token1,
            "token2": self.token2,
            "dateCreated": self.date_created,
            "dateCompleted": self.date_completed,
            "side": self.side.value,
            "type": self.order_type.value,
            "price": str(self.price),
            "quantity": str(self.quantity),
            "value": str(self.value),
            "quantityFulfilled": str(self.quantity_fulfilled),
            "valueFulfilled": str(self.value_fulfilled),
            "quantitySpecified": self.quantity_specified,
            "status": self.status.value if self.status else "",
        }


def _missing(field: str) -> None:
    raise ValidationException(
        f"{field} is a required field to create an order",
        details={"field": field}
    )


def _lookup(fields: Mapping[str, Any], key: str, attr: str) -> Any:
    """Read a field by its document key, falling back to the attribute name."""
    if key in fields:
        return fields[key]
    return fields.get(attr)


def _parse_enum(enum_cls, raw: Any, field: str):
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip().upper())
    except ValueError:
        raise ValidationException(
            f"Invalid {field}: {raw}",
            details={"field": field, "value": raw, "valid": [e.value for e in enum_cls]}
        )


def _parse_timestamp(raw: Any, field: str) -> int:
    if not raw:
        return 0
    return int(sanitize_decimal(raw, field))


def _now_ms() -> int:
    return int(time.time() * 1000)


@with_amount_context
def create_order(fields: Mapping[str, Any]) -> Order:
    """
    Create a validated Order from a stored document or candidate fields.

    Keys may use the stored document spelling (``dateCreated``, ``type``,
    ``quantitySpecified``) or the attribute spelling (``date_created``,
    ``order_type``, ``quantity_specified``). Empty values count as missing.

    Args:
        fields: Mapping of order fields

    Returns:
        Validated Order

    Raises:
        ValidationException: Naming the first missing or inconsistent field
    """
    for key in REQUIRED_FIELDS:
        attr = "order_type" if key == "type" else key
        if not _lookup(fields, key, attr):
            _missing(key)

    side = _parse_enum(OrderSide, _lookup(fields, "side", "side"), "side")
    order_type = _parse_enum(OrderType, _lookup(fields, "type", "order_type"), "type")

    raw_status = _lookup(fields, "status", "status")
    status = _parse_enum(OrderStatus, raw_status, "status") if raw_status else None

    amounts: Dict[str, Decimal] = {}
    for attr, key in _DECIMAL_FIELDS:
        raw = _lookup(fields, key, attr)
        amounts[attr] = sanitize_decimal(raw, key) if raw else ZERO

    quantity_specified = _lookup(fields, "quantitySpecified", "quantity_specified")
    if quantity_specified is None:
        quantity_specified = True
    elif not isinstance(quantity_specified, bool):
        raise ValidationException(
            f"quantitySpecified must be a boolean, got {quantity_specified}",
            details={"field": "quantitySpecified", "value": quantity_specified}
        )

    if (
        quantity_specified
        and not amounts["value"]
        and order_type != OrderType.MARKET
    ):
        amounts["value"] = amounts["price"] * amounts["quantity"]

    pair = str(_lookup(fields, "pair", "pair"))
    date_created = _parse_timestamp(_lookup(fields, "dateCreated", "date_created"), "dateCreated")
    date_completed = _parse_timestamp(_lookup(fields, "dateCompleted", "date_completed"), "dateCompleted")

    raw_id = str(_lookup(fields, "id", "id") or "")
    if not raw_id:
        date_created = date_created or _now_ms()
        order_id = f"{pair}_{date_created}"
    elif "_" not in raw_id:
        order_id = f"{pair}_{raw_id}"
    else:
        order_id = raw_id

    return Order(
        owner=str(_lookup(fields, "owner", "owner")),
        pair=pair,
        token1=str(_lookup(fields, "token1", "token1")),
        token2=str(_lookup(fields, "token2", "token2")),
        side=side,
        order_type=order_type,
        id=order_id,
        quantity_specified=quantity_specified,
        status=status,
        date_created=date_created,
        date_completed=date_completed,
        **amounts,
    )
