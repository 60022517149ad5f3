"""
Market order quote engine.

Walks the opposing side of a price-level book with price-time priority to
work out how much a market order could trade right now, then applies the
pair's fees. Nothing here mutates the orders or the book it is given: every
call is a pure function of its snapshot.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .fees import Quote, RawFill, apply_fees
from .order import Order, OrderSide, create_order
from .pair import Pair
from .price_level_book import PriceLevelBook, build_price_level_book, walk_direction_for
from ..utils.exceptions import InsufficientLiquidityException, ValidationException
from ..utils.rounding import round_to, with_amount_context

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class QuoteStatus(Enum):
    """Outcome of a quote request."""
    QUOTED = "QUOTED"
    INSUFFICIENT_LIQUIDITY = "INSUFFICIENT_LIQUIDITY"
    NOT_MARKET_ORDER = "NOT_MARKET_ORDER"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class QuoteResult:
    """
    Result of quoting a candidate order against a book snapshot.

    Attributes:
        order: The candidate order
        status: Whether a quote was produced, and if not why
        quote: Fee-adjusted quote when status is QUOTED
        raw_fill: Fill before fees when status is QUOTED
        price_limit: Limit the walk was bounded by, None for unbounded
        message: Human-readable description of the outcome
        timestamp: Time the result was computed
    """

    order: Order
    status: QuoteStatus
    quote: Optional[Quote] = None
    raw_fill: Optional[RawFill] = None
    price_limit: Optional[Decimal] = None
    message: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_quoted(self) -> bool:
        return self.status == QuoteStatus.QUOTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order_id": self.order.id,
            "status": self.status.value,
            "quote": self.quote.to_dict() if self.quote else None,
            "price_limit": str(self.price_limit) if self.price_limit is not None else None,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


def _within_limit(side: OrderSide, price: Decimal, price_limit: Optional[Decimal]) -> bool:
    if price_limit is None:
        return True
    if side == OrderSide.BUY:
        return price <= price_limit
    return price >= price_limit


@with_amount_context
def walk_book(
    order: Order,
    book: PriceLevelBook,
    price_limit: Optional[Decimal] = None,
    token1_decimals: int = 0,
    token2_decimals: int = 0,
) -> RawFill:
    """
    Simulate consuming the book level by level until the order is satisfied.

    Levels are consumed in book order, so the book must be read best price
    first for the order's side (see ``walk_direction_for``). Every sum is
    rounded to the token's precision as soon as it is computed.

    Args:
        order: Candidate order; its remaining quantity (or value) is the demand
        book: Opposing side of the book
        price_limit: Worst acceptable price, None for no limit
        token1_decimals: Precision of token1 amounts
        token2_decimals: Precision of token2 amounts

    Returns:
        RawFill with the quantity and value the order would trade

    Raises:
        InsufficientLiquidityException: If the demand cannot be met in full
            within the limit, or the book holds a non-positive price or a
            negative quantity
    """
    quantity_specified = order.quantity_specified
    remaining = order.remaining_quantity if quantity_specified else order.remaining_value
    if remaining <= 0:
        raise InsufficientLiquidityException(
            f"Order {order.id} has no remaining demand to quote",
            details={"order_id": order.id, "remaining": str(remaining)}
        )

    quantity = ZERO
    value = ZERO

    for price, level in book:
        if remaining <= 0:
            break
        if not _within_limit(order.side, price, price_limit):
            logger.debug(f"Level {price} is beyond limit {price_limit}, stopping")
            break
        if price <= 0:
            raise InsufficientLiquidityException(
                f"Book holds a non-positive price {price}",
                details={"order_id": order.id, "price": str(price)}
            )

        level_quantity = round_to(token1_decimals, level.total_quantity)
        if level_quantity < 0:
            raise InsufficientLiquidityException(
                f"Level {price} holds a negative quantity {level_quantity}",
                details={"order_id": order.id, "price": str(price)}
            )
        level_value = round_to(token2_decimals, level_quantity * price)

        if quantity_specified:
            if level_quantity >= remaining:
                value = round_to(token2_decimals, value + round_to(token2_decimals, remaining * price))
                quantity = round_to(token1_decimals, quantity + remaining)
                remaining = ZERO
            else:
                quantity = round_to(token1_decimals, quantity + level_quantity)
                value = round_to(token2_decimals, value + level_value)
                remaining = round_to(token1_decimals, remaining - level_quantity)
        else:
            if level_value >= remaining:
                quantity = round_to(token1_decimals, quantity + round_to(token1_decimals, remaining / price))
                value = round_to(token2_decimals, value + remaining)
                remaining = ZERO
            else:
                quantity = round_to(token1_decimals, quantity + level_quantity)
                value = round_to(token2_decimals, value + level_value)
                remaining = round_to(token2_decimals, remaining - level_value)

        logger.debug(
            f"Level {price}: filled {quantity} for {value}, remaining demand {remaining}"
        )

    if remaining > 0:
        unit = "quantity" if quantity_specified else "value"
        raise InsufficientLiquidityException(
            f"Insufficient liquidity for order {order.id}: {remaining} {unit} unfilled",
            details={"order_id": order.id, "unfilled": str(remaining), "unit": unit}
        )

    return RawFill(quantity=quantity, value=value)


def resolve_price_limit(order: Order, price_limit: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Limit a walk is bounded by.

    An explicit limit wins, then the order's own price; a market order with
    no stated price may walk to the farthest level of the book.
    """
    if price_limit is not None:
        return price_limit
    if order.price:
        return order.price
    return None


def _as_order(entry: Union[Order, Mapping[str, Any]]) -> Order:
    if isinstance(entry, Order):
        return entry
    return create_order(entry)


def compute_quote(
    order: Order,
    opposite_orders: Union[Iterable[Union[Order, Mapping[str, Any]]], PriceLevelBook],
    pair: Pair,
    price_limit: Optional[Decimal] = None,
) -> QuoteResult:
    """
    Quote a market order against a snapshot of the opposing side.

    Args:
        order: Candidate market order
        opposite_orders: Resting orders (or their stored documents) of the
            side the order trades against, in any order, or a book already
            built in walk order
        pair: Pair configuration
        price_limit: Worst acceptable price, overriding the order's own price

    Returns:
        QuoteResult; a non-market order or a book that cannot fill the order
        is reported through its status rather than raised

    Raises:
        ValidationException: If the order or a resting document is invalid,
            or the order belongs to another pair
    """
    if not order.is_market:
        return QuoteResult(
            order=order,
            status=QuoteStatus.NOT_MARKET_ORDER,
            message=f"Quotes are only computed for MARKET orders, got {order.order_type.value}",
        )

    if pair.code and order.pair != pair.code:
        raise ValidationException(
            f"Order pair {order.pair} does not match pair {pair.code}",
            details={"field": "pair", "order_pair": order.pair, "pair": pair.code}
        )

    if isinstance(opposite_orders, PriceLevelBook):
        book = opposite_orders
    else:
        resting = (_as_order(entry) for entry in opposite_orders)
        book = build_price_level_book(
            (o for o in resting if o.side == order.side.opposite and o.is_resting),
            walk_direction_for(order.side),
        )

    limit = resolve_price_limit(order, price_limit)

    try:
        raw_fill = walk_book(order, book, limit, pair.token1_decimals, pair.token2_decimals)
    except InsufficientLiquidityException as e:
        logger.debug(f"No quote for {order.id}: {e.message}")
        return QuoteResult(
            order=order,
            status=QuoteStatus.INSUFFICIENT_LIQUIDITY,
            price_limit=limit,
            message=e.message,
        )

    quote = apply_fees(order, raw_fill, pair)
    return QuoteResult(
        order=order,
        status=QuoteStatus.QUOTED,
        quote=quote,
        raw_fill=raw_fill,
        price_limit=limit,
        message=f"Quoted {raw_fill.quantity} {order.token1} for {raw_fill.value} {order.token2}",
    )
