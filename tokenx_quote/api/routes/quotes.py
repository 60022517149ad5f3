"""
REST API endpoints for market order quotes.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, status

from tokenx_quote.api.models import QuoteRequest, QuoteResponse, ErrorResponse
from tokenx_quote.services.quote_service import QuoteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["quotes"])


_quote_service: QuoteService = None


def get_quote_service() -> QuoteService:
    """Dependency to get QuoteService instance."""
    if _quote_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quote service not initialized"
        )
    return _quote_service


def set_quote_service(service: QuoteService) -> None:
    """Set the global QuoteService instance."""
    global _quote_service
    _quote_service = service


@router.post(
    "/quotes",
    response_model=QuoteResponse,
    status_code=status.HTTP_200_OK,
    summary="Quote a market order",
    description="Compute what a market order would pay and receive against the current book",
    responses={
        200: {"description": "Quote computed, or no liquidity to quote against"},
        400: {"description": "Invalid amount or price limit", "model": ErrorResponse},
        404: {"description": "Pair not found", "model": ErrorResponse},
        422: {"description": "Validation error", "model": ErrorResponse}
    }
)
async def create_quote(
    request: QuoteRequest,
    quote_service: QuoteService = Depends(get_quote_service)
) -> QuoteResponse:
    """
    Quote a market order.

    A book that cannot fill the whole order is not an error: the response
    has status `insufficient_liquidity` and no quote.

    **Example Request:**
    ```json
    {
      "pair": "ETH-USDC",
      "side": "buy",
      "quantity": "7",
      "quantity_specified": true
    }
    ```
    """
    result = quote_service.quote(**request.to_quote_params())
    logger.debug(f"Quote for {request.pair}: {result.status.value}")
    return QuoteResponse.from_quote_result(result)
