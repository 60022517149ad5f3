"""
REST API endpoints for market data.

Provides aggregated order book depth for a pair.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, Query, status

from tokenx_quote.api.models import OrderBookResponse, DepthLevelResponse
from tokenx_quote.core.order import OrderSide
from tokenx_quote.services.market_data_service import MarketDataService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["market-data"])


_market_data_service: MarketDataService = None


def get_market_data_service() -> MarketDataService:
    """Dependency to get MarketDataService instance."""
    if _market_data_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Market data service not initialized"
        )
    return _market_data_service


def set_market_data_service(service: MarketDataService) -> None:
    """Set the global MarketDataService instance."""
    global _market_data_service
    _market_data_service = service


@router.get(
    "/orderbook/{pair_code}",
    response_model=OrderBookResponse,
    summary="Get aggregated order book",
    description="Aggregated depth of both sides of a pair, recomputed from the current snapshot",
    responses={
        200: {"description": "Order book retrieved successfully", "model": OrderBookResponse},
        404: {"description": "Pair not found"}
    }
)
async def get_orderbook(
    pair_code: str,
    levels: int = Query(default=10, ge=1, le=100, description="Number of price levels per side"),
    market_data_service: MarketDataService = Depends(get_market_data_service)
) -> OrderBookResponse:
    """
    Get the aggregated order book for a pair.

    Bids are listed highest price first; asks are the best `levels` asks
    listed highest price first, so the two sides meet at the spread.

    **Example:**
    ```
    GET /api/v1/orderbook/ETH-USDC?levels=10
    ```
    """
    logger.debug(f"Getting order book for {pair_code}, levels={levels}")
    snapshot = market_data_service.get_orderbook(pair_code, levels)
    return OrderBookResponse.from_snapshot(snapshot)


@router.get(
    "/orderbook/{pair_code}/{side}",
    response_model=list[DepthLevelResponse],
    summary="Get aggregated depth for one side",
)
async def get_depth(
    pair_code: str,
    side: str,
    levels: int = Query(default=10, ge=1, le=100, description="Number of price levels"),
    market_data_service: MarketDataService = Depends(get_market_data_service)
) -> list[DepthLevelResponse]:
    """
    Get the aggregated depth of one side, best price first.

    `side` is `buy` (bids) or `sell` (asks).
    """
    try:
        order_side = OrderSide[side.upper()]
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid side: {side}. Must be 'buy' or 'sell'"
        )
    entries = market_data_service.get_depth(pair_code, order_side, levels)
    return [DepthLevelResponse.from_entry(e) for e in entries]
