"""
Market Data Service - depth-of-market views for display.

Reads resting orders from the snapshot source and aggregates them into
price levels. Views are recomputed on every request; nothing is cached.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from tokenx_quote.config import get_settings
from tokenx_quote.core.aggregation import AggregateOrderEntry, compute_aggregate_depth
from tokenx_quote.core.order import OrderSide
from tokenx_quote.core.price_level_book import OrderBook, SortDirection
from tokenx_quote.services.pair_service import PairService
from tokenx_quote.services.snapshot_source import OrderSnapshotSource, load_resting_orders
from tokenx_quote.utils.exceptions import ValidationException


class MarketDataService:
    """
    Service class for order book depth views.

    Bids are listed best (highest) price first. Asks are computed best
    (lowest) price first, truncated, then reversed so they read high to low
    above the bids.
    """

    def __init__(self, source: OrderSnapshotSource, pair_service: Optional[PairService] = None):
        """
        Initialize market data service.

        Args:
            source: Snapshot source for resting orders
            pair_service: Pair lookups, built over the same source when omitted
        """
        self.source = source
        self.pair_service = pair_service or PairService(source)
        self.logger = logging.getLogger(f"{__name__}.MarketDataService")
        self.logger.info("MarketDataService initialized")

    def get_depth(
        self,
        pair_code: str,
        side: OrderSide,
        levels: Optional[int] = None,
        reverse: bool = False,
    ) -> List[AggregateOrderEntry]:
        """
        Aggregated depth for one side of a pair.

        Args:
            pair_code: Pair code
            side: Side of the book to aggregate
            levels: Number of best levels to keep (settings default when None)
            reverse: Reverse the kept levels for display

        Returns:
            List of AggregateOrderEntry

        Raises:
            ValidationException: If levels is below 1
        """
        pair = self.pair_service.get_pair_info(pair_code)
        levels = self._levels(levels)
        direction = SortDirection.DESCENDING if side == OrderSide.BUY else SortDirection.ASCENDING
        return compute_aggregate_depth(
            load_resting_orders(self.source, pair.code, side, self.logger), direction, levels, reverse
        )

    def get_orderbook(self, pair_code: str, levels: Optional[int] = None) -> Dict[str, Any]:
        """
        Two-sided depth snapshot of a pair.

        Returns:
            Dictionary with bids, asks and best bid/offer
        """
        pair = self.pair_service.get_pair_info(pair_code)
        levels = self._levels(levels)

        bids = load_resting_orders(self.source, pair.code, OrderSide.BUY, self.logger)
        asks = load_resting_orders(self.source, pair.code, OrderSide.SELL, self.logger)
        book = OrderBook(pair.code, bids + asks)

        snapshot = {
            "pair": pair.code,
            "timestamp": datetime.now(timezone.utc),
            "bids": compute_aggregate_depth(book.bids, depth_limit=levels),
            "asks": compute_aggregate_depth(book.asks, depth_limit=levels, reverse=True),
            "bbo": book.get_bbo(),
        }
        self.logger.debug(
            f"Order book for {pair.code}: {len(snapshot['bids'])} bid levels, "
            f"{len(snapshot['asks'])} ask levels"
        )
        return snapshot

    def _levels(self, levels: Optional[int]) -> int:
        settings = get_settings()
        if levels is None:
            return settings.default_depth_levels
        if levels < 1:
            raise ValidationException(
                f"levels must be at least 1, got {levels}",
                details={"field": "levels", "levels": levels}
            )
        return min(levels, settings.max_depth_levels)
