"""
REST API endpoints for pairs and tokens.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Depends, status

from tokenx_quote.api.models import PairResponse, TokensResponse, TokenPairRef
from tokenx_quote.services.pair_service import PairService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["pairs"])


_pair_service: PairService = None


def get_pair_service() -> PairService:
    """Dependency to get PairService instance."""
    if _pair_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pair service not initialized"
        )
    return _pair_service


def set_pair_service(service: PairService) -> None:
    """Set the global PairService instance."""
    global _pair_service
    _pair_service = service


@router.get("/pairs", response_model=List[PairResponse], summary="List pairs")
async def list_pairs(pair_service: PairService = Depends(get_pair_service)) -> List[PairResponse]:
    """Every pair available on the exchange."""
    return [PairResponse.from_pair(p) for p in pair_service.get_pairs_list()]


@router.get("/pairs/{pair_code}", response_model=PairResponse, summary="Get pair info")
async def get_pair(
    pair_code: str,
    pair_service: PairService = Depends(get_pair_service)
) -> PairResponse:
    """Configuration of one pair."""
    return PairResponse.from_pair(pair_service.get_pair_info(pair_code))


@router.get("/tokens", response_model=TokensResponse, summary="List tokens")
async def list_tokens(pair_service: PairService = Depends(get_pair_service)) -> TokensResponse:
    """Every token that can be exchanged and the pairs it appears in."""
    tokens_map = pair_service.get_tokens_pair_map()
    return TokensResponse(
        tokens=list(tokens_map.keys()),
        pairs={
            token: [TokenPairRef(**ref) for ref in refs]
            for token, refs in tokens_map.items()
        },
    )
