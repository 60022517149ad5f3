"""
Price-level book with price-time ordering

This module groups an unordered snapshot of resting orders into price
levels held in a sorted dictionary, so both the direction across levels
and the time priority within a level are explicit.
"""

from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from sortedcontainers import SortedDict

from .order import Order, OrderSide
from .price_level import PriceLevel


class SortDirection(Enum):
    """Direction a book is read in, by price."""
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"

    def __str__(self) -> str:
        return self.value


def walk_direction_for(side: OrderSide) -> SortDirection:
    """
    Direction to read the opposing book for a market order.

    A BUY walks the asks cheapest first; a SELL walks the bids dearest first.
    """
    return SortDirection.ASCENDING if side == OrderSide.BUY else SortDirection.DESCENDING


class PriceLevelBook:
    """
    Price levels for one side of a pair, in a fixed price order.

    Attributes:
        direction: Price order the levels are iterated in
        levels: Sorted dictionary of price -> PriceLevel
    """

    def __init__(self, direction: SortDirection = SortDirection.ASCENDING):
        self.direction: SortDirection = direction
        # Descending books sort on the negated price
        if direction == SortDirection.DESCENDING:
            self.levels = SortedDict(lambda price: -price)
        else:
            self.levels = SortedDict()

    def add_order(self, order: Order) -> None:
        """Place an order on the level for its price, creating the level if needed."""
        level = self.levels.get(order.price)
        if level is None:
            level = PriceLevel(order.price)
            self.levels[order.price] = level
        level.add_order(order)

    def prices(self) -> List[Decimal]:
        """Level prices in book order."""
        return list(self.levels.keys())

    def get_level(self, price: Decimal) -> Optional[PriceLevel]:
        return self.levels.get(price)

    @property
    def best_price(self) -> Optional[Decimal]:
        """First price in book order."""
        if not self.levels:
            return None
        return self.levels.keys()[0]

    @property
    def farthest_price(self) -> Optional[Decimal]:
        """Last price in book order."""
        if not self.levels:
            return None
        return self.levels.keys()[-1]

    @property
    def total_quantity(self) -> Decimal:
        """Unfulfilled quantity across every level."""
        return sum((level.total_quantity for level in self.levels.values()), Decimal("0"))

    @property
    def order_count(self) -> int:
        return sum(level.order_count for level in self.levels.values())

    def __iter__(self) -> Iterator[Tuple[Decimal, PriceLevel]]:
        return iter(self.levels.items())

    def __len__(self) -> int:
        return len(self.levels)

    def __bool__(self) -> bool:
        return bool(self.levels)

    def __repr__(self) -> str:
        return (
            f"PriceLevelBook({self.direction.value}: {len(self.levels)} levels, "
            f"{self.order_count} orders, best={self.best_price})"
        )


def build_price_level_book(
    orders: Iterable[Order],
    sort_direction: SortDirection = SortDirection.ASCENDING,
) -> PriceLevelBook:
    """
    Group orders by price into a book read in the given direction.

    Args:
        orders: Orders in any order
        sort_direction: Whether levels are read ascending or descending by price

    Returns:
        PriceLevelBook, empty for empty input
    """
    book = PriceLevelBook(sort_direction)
    for order in orders:
        book.add_order(order)
    return book


class OrderBook:
    """
    Two-sided snapshot of a pair's resting orders.

    Bids are read highest price first and asks lowest price first.

    Attributes:
        pair: Pair code
        bids: BUY orders, descending by price
        asks: SELL orders, ascending by price
    """

    def __init__(self, pair: str, orders: Iterable[Order] = ()):
        self.pair: str = pair
        self.bids: PriceLevelBook = PriceLevelBook(SortDirection.DESCENDING)
        self.asks: PriceLevelBook = PriceLevelBook(SortDirection.ASCENDING)
        for order in orders:
            self.add_order(order)

    def add_order(self, order: Order) -> None:
        book = self.bids if order.side == OrderSide.BUY else self.asks
        book.add_order(order)

    def side(self, side: OrderSide) -> PriceLevelBook:
        """Book holding the orders of one side."""
        return self.bids if side == OrderSide.BUY else self.asks

    @property
    def best_bid(self) -> Optional[Decimal]:
        return self.bids.best_price

    @property
    def best_ask(self) -> Optional[Decimal]:
        return self.asks.best_price

    @property
    def spread(self) -> Optional[Decimal]:
        """Bid-ask spread."""
        bid = self.best_bid
        ask = self.best_ask
        if bid is None or ask is None:
            return None
        return ask - bid

    @property
    def mid_price(self) -> Optional[Decimal]:
        """Mid-market price."""
        bid = self.best_bid
        ask = self.best_ask
        if bid is None or ask is None:
            return None
        return (bid + ask) / Decimal("2")

    def get_bbo(self) -> Dict[str, Optional[Decimal]]:
        return {
            "best_bid": self.best_bid,
            "best_ask": self.best_ask,
            "spread": self.spread,
        }

    def __repr__(self) -> str:
        return (
            f"OrderBook({self.pair}: "
            f"{len(self.bids)} bid levels, {len(self.asks)} ask levels, "
            f"BBO={self.best_bid}/{self.best_ask})"
        )
