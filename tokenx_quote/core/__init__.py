"""
Core domain models and quoting logic
"""

from .order import Order, OrderType, OrderSide, OrderStatus, create_order
from .pair import Pair, create_pair
from .trade import Trade, TradeFeePayer, TimeSlice, create_trade
from .price_level import PriceLevel
from .price_level_book import (
    OrderBook,
    PriceLevelBook,
    SortDirection,
    build_price_level_book,
    walk_direction_for,
)
from .aggregation import AggregateOrderEntry, aggregate, compute_aggregate_depth
from .fees import Quote, RawFill, apply_fees
from .quote_engine import QuoteResult, QuoteStatus, compute_quote, walk_book

__all__ = [
    "Order",
    "OrderType",
    "OrderSide",
    "OrderStatus",
    "create_order",
    "Pair",
    "create_pair",
    "Trade",
    "TradeFeePayer",
    "TimeSlice",
    "create_trade",
    "PriceLevel",
    "OrderBook",
    "PriceLevelBook",
    "SortDirection",
    "build_price_level_book",
    "walk_direction_for",
    "AggregateOrderEntry",
    "aggregate",
    "compute_aggregate_depth",
    "Quote",
    "RawFill",
    "apply_fees",
    "QuoteResult",
    "QuoteStatus",
    "compute_quote",
    "walk_book",
]
