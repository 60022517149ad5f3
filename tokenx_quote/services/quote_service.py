"""
Quote Service - Business logic layer for market order quotes.

This service builds candidate market orders, reads the opposing side of the
book from the snapshot source and hands both to the quote engine, acting as
an intermediary between the API layer and the core.
"""

import logging
import time
from decimal import Decimal
from typing import Optional

from tokenx_quote.config import get_settings
from tokenx_quote.core.order import Order, OrderSide, OrderStatus, OrderType, create_order
from tokenx_quote.core.pair import Pair
from tokenx_quote.core.quote_engine import QuoteResult, QuoteStatus, compute_quote
from tokenx_quote.services.pair_service import PairService
from tokenx_quote.services.snapshot_source import OrderSnapshotSource, load_resting_orders
from tokenx_quote.utils.logger import get_logger
from tokenx_quote.utils.validators import validate_amount, validate_price_limit

QUOTE_OWNER = "quote"


class QuoteService:
    """
    Service class for computing quotes.

    Each call reads a fresh snapshot; nothing is cached between calls, so a
    quote is only as current as the snapshot it was computed from.
    """

    def __init__(self, source: OrderSnapshotSource, pair_service: Optional[PairService] = None):
        """
        Initialize quote service.

        Args:
            source: Snapshot source for resting orders and pairs
            pair_service: Pair lookups, built over the same source when omitted
        """
        self.source = source
        self.pair_service = pair_service or PairService(source)
        self.logger = logging.getLogger(f"{__name__}.QuoteService")
        self.quote_log = get_logger()
        self.logger.info("QuoteService initialized")

    def quote(
        self,
        pair_code: str,
        side: OrderSide,
        amount: Decimal,
        quantity_specified: bool = True,
        price_limit: Optional[Decimal] = None,
        owner: str = QUOTE_OWNER,
    ) -> QuoteResult:
        """
        Quote a market order for a pair.

        Args:
            pair_code: Pair code (e.g. "ETH-USDC")
            side: BUY or SELL
            amount: token1 quantity when quantity_specified, else token2 value
            quantity_specified: Whether amount is a quantity or a value
            price_limit: Worst acceptable price, None for the whole book
            owner: Account the candidate order is built for

        Returns:
            QuoteResult

        Raises:
            ValidationException: If the request parameters are invalid
            InvalidQuantityException: If amount is not positive or too large
            PriceOutOfBoundsException: If price_limit is not positive
            PairNotFoundException: If the pair is unknown
        """
        pair = self.pair_service.get_pair_info(pair_code)
        validate_amount(
            amount,
            pair.code,
            "quantity" if quantity_specified else "value",
            get_settings().max_order_amount,
        )
        validate_price_limit(price_limit, pair.code)

        fields = {
            "owner": owner,
            "pair": pair.code,
            "token1": pair.token1,
            "token2": pair.token2,
            "side": side,
            "type": OrderType.MARKET,
            "status": OrderStatus.SUBMITTING,
            "quantitySpecified": quantity_specified,
            "dateCreated": int(time.time() * 1000),
        }
        fields["quantity" if quantity_specified else "value"] = amount
        order = create_order(fields)

        return self.quote_order(order, price_limit, pair)

    def quote_order(
        self,
        order: Order,
        price_limit: Optional[Decimal] = None,
        pair: Optional[Pair] = None,
    ) -> QuoteResult:
        """
        Quote an already built candidate order.

        Args:
            order: Candidate order
            price_limit: Worst acceptable price, overriding the order's own price
            pair: Configuration of the order's pair, looked up when omitted

        Returns:
            QuoteResult
        """
        start_time = time.time()
        if pair is None:
            pair = self.pair_service.get_pair_info(order.pair)

        self.quote_log.log_quote_request(
            order.id,
            order.pair,
            order.side.value,
            order.quantity if order.quantity_specified else order.value,
            order.quantity_specified,
            price_limit,
        )

        snapshot = load_resting_orders(self.source, order.pair, order.side.opposite, self.logger)
        self.logger.debug(f"Read {len(snapshot)} resting orders for {order.pair} {order.side.opposite.value}")

        result = compute_quote(order, snapshot, pair, price_limit)
        latency_ms = (time.time() - start_time) * 1000

        if result.status == QuoteStatus.INSUFFICIENT_LIQUIDITY:
            self.quote_log.log_insufficient_liquidity(order.id, order.pair, result.message)
        elif result.quote is not None:
            self.quote_log.log_quote_result(
                order.id,
                order.pair,
                result.status.value,
                pay=result.quote.pay,
                receive=result.quote.receive,
                fee=result.quote.fee,
                execution_time_ms=latency_ms,
            )
        else:
            self.quote_log.log_quote_result(
                order.id, order.pair, result.status.value, execution_time_ms=latency_ms
            )

        return result
