"""
Shared fixtures and order builders for the test suite.
"""

from decimal import Decimal
from itertools import count

import pytest

from tokenx_quote.core.order import Order, OrderSide, OrderStatus, OrderType
from tokenx_quote.core.pair import Pair

_ids = count(1)


def make_order(
    side: OrderSide,
    price="0",
    quantity="0",
    order_type: OrderType = OrderType.LIMIT,
    date_created: int = 0,
    quantity_fulfilled="0",
    value="0",
    quantity_specified: bool = True,
    status: OrderStatus = OrderStatus.PENDING,
    pair: str = "ETH-USDC",
) -> Order:
    """Build an order directly, bypassing the document factory."""
    price = Decimal(str(price))
    quantity = Decimal(str(quantity))
    value = Decimal(str(value))
    if quantity_specified and not value and order_type != OrderType.MARKET:
        value = price * quantity
    n = next(_ids)
    return Order(
        owner=f"owner{n}",
        pair=pair,
        token1=pair.split("-")[0],
        token2=pair.split("-")[1],
        side=side,
        order_type=order_type,
        id=f"{pair}_{n}",
        price=price,
        quantity=quantity,
        value=value,
        quantity_fulfilled=Decimal(str(quantity_fulfilled)),
        quantity_specified=quantity_specified,
        status=status,
        date_created=date_created or n,
    )


def ask(price, quantity, **kwargs) -> Order:
    return make_order(OrderSide.SELL, price, quantity, **kwargs)


def bid(price, quantity, **kwargs) -> Order:
    return make_order(OrderSide.BUY, price, quantity, **kwargs)


def market(side: OrderSide, quantity="0", value="0", quantity_specified: bool = True) -> Order:
    return make_order(
        side,
        quantity=quantity,
        value=value,
        order_type=OrderType.MARKET,
        quantity_specified=quantity_specified,
        status=OrderStatus.SUBMITTING,
    )


@pytest.fixture
def pair() -> Pair:
    """ETH-USDC with two decimals on each token and no fees."""
    return Pair(
        code="ETH-USDC",
        token1="ETH",
        token2="USDC",
        token1_decimals=2,
        token2_decimals=2,
    )


@pytest.fixture
def fee_pair() -> Pair:
    """ETH-USDC with 0.1% liquidity and 0.1% platform fees."""
    return Pair(
        code="ETH-USDC",
        token1="ETH",
        token2="USDC",
        token1_decimals=2,
        token2_decimals=2,
        liquidity_fee=Decimal("0.001"),
        platform_fee=Decimal("0.001"),
    )


@pytest.fixture
def asks():
    """Asks of 5 @ 10.00 and 5 @ 10.50, given out of price order."""
    return [ask("10.50", "5"), ask("10.00", "5")]


@pytest.fixture
def bids():
    """Bids of 3 @ 9.90 and 10 @ 9.50, given out of price order."""
    return [bid("9.50", "10"), bid("9.90", "3")]
