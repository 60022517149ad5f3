"""
Depth-of-market aggregation

Collapses a price-level book into one entry per price for display.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from .order import Order, OrderSide
from .price_level_book import PriceLevelBook, SortDirection, build_price_level_book
from ..utils.rounding import with_amount_context
from ..utils.validators import normalize_depth_limit


@dataclass(frozen=True, slots=True)
class AggregateOrderEntry:
    """
    Liquidity resting at one price level.

    Attributes:
        pair: Pair code
        side: Side of the orders at this level
        price: Level price
        quantity: Sum of unfulfilled quantity at the level
        order_count: Number of orders at the level
    """

    pair: str
    side: OrderSide
    price: Decimal
    quantity: Decimal
    order_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pair": self.pair,
            "side": self.side.value,
            "price": str(self.price),
            "quantity": str(self.quantity),
            "orderCount": self.order_count,
        }


def aggregate(book: PriceLevelBook) -> List[AggregateOrderEntry]:
    """
    One entry per non-empty level, in book order.

    Levels whose orders are all fulfilled are kept with a zero quantity.
    """
    entries = []
    for price, level in book:
        if level.is_empty():
            continue
        entries.append(
            AggregateOrderEntry(
                pair=level.pair,
                side=level.side,
                price=price,
                quantity=level.total_quantity,
                order_count=level.order_count,
            )
        )
    return entries


@with_amount_context
def compute_aggregate_depth(
    orders: Union[Iterable[Order], PriceLevelBook],
    sort_direction: SortDirection = SortDirection.ASCENDING,
    depth_limit: Optional[Union[int, str, Decimal]] = None,
    reverse: bool = False,
) -> List[AggregateOrderEntry]:
    """
    Build the depth-of-market view for a snapshot of one side.

    Args:
        orders: Resting orders of one side, or an already built book
        sort_direction: Price order levels are computed in
        depth_limit: Keep at most this many levels, counted in sort order
        reverse: Reverse the truncated entries for display

    Returns:
        List of AggregateOrderEntry
    """
    if isinstance(orders, PriceLevelBook):
        book = orders
    else:
        book = build_price_level_book(orders, sort_direction)

    entries = aggregate(book)

    levels = normalize_depth_limit(depth_limit)
    if levels is not None:
        entries = entries[:levels]

    if reverse:
        entries.reverse()
    return entries
