"""
Price level with time-priority ordering

This module defines the PriceLevel class which holds the resting orders at
a single price, oldest first, so any walk over it honours time priority.
"""

from decimal import Decimal
from typing import Iterable, Iterator, List, Optional, Tuple

from .order import Order, OrderSide


class PriceLevel:
    """
    Orders resting at a single price, ordered by creation time.

    The order list is kept sorted ascending by ``date_created``. Orders
    sharing a timestamp keep their insertion order (stable).

    Attributes:
        price: The price of this level
        orders: Orders at this price, oldest first
    """

    __slots__ = ("price", "_orders")

    def __init__(self, price: Decimal, orders: Iterable[Order] = ()):
        """
        Initialize a price level.

        Args:
            price: The price for this level
            orders: Orders to place at this level, in any order

        Raises:
            ValueError: If an order's price doesn't match the level
        """
        self.price: Decimal = price
        self._orders: List[Order] = []
        for order in orders:
            self.add_order(order)

    def add_order(self, order: Order) -> None:
        """
        Insert an order after every order created at or before it.

        Raises:
            ValueError: If order price doesn't match the level
        """
        if order.price != self.price:
            raise ValueError(
                f"Order price {order.price} doesn't match level price {self.price}"
            )

        index = len(self._orders)
        while index > 0 and self._orders[index - 1].date_created > order.date_created:
            index -= 1
        self._orders.insert(index, order)

    @property
    def orders(self) -> Tuple[Order, ...]:
        """Orders at this level, oldest first."""
        return tuple(self._orders)

    @property
    def total_quantity(self) -> Decimal:
        """Sum of unfulfilled quantity across the level."""
        return sum((order.remaining_quantity for order in self._orders), Decimal("0"))

    @property
    def order_count(self) -> int:
        """Number of orders at this price level."""
        return len(self._orders)

    @property
    def side(self) -> Optional[OrderSide]:
        """Side of the orders at this level, None when empty."""
        return self._orders[0].side if self._orders else None

    @property
    def pair(self) -> Optional[str]:
        """Pair of the orders at this level, None when empty."""
        return self._orders[0].pair if self._orders else None

    def is_empty(self) -> bool:
        return not self._orders

    def __iter__(self) -> Iterator[Order]:
        return iter(self._orders)

    def __len__(self) -> int:
        return len(self._orders)

    def __repr__(self) -> str:
        return (
            f"PriceLevel(price={self.price}, orders={self.order_count}, "
            f"quantity={self.total_quantity})"
        )
