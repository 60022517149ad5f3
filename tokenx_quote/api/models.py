"""
Pydantic models for API request/response validation.

This module defines the data models used by the read-only REST API,
ensuring type safety and validation at the HTTP boundary.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from tokenx_quote.core.aggregation import AggregateOrderEntry
from tokenx_quote.core.order import OrderSide
from tokenx_quote.core.pair import Pair
from tokenx_quote.core.quote_engine import QuoteResult


# ============================================================================
# Request Models
# ============================================================================

class QuoteRequest(BaseModel):
    """Request model for quoting a market order."""

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "pair": "ETH-USDC",
            "side": "buy",
            "quantity": "1.5",
            "quantity_specified": True,
            "price_limit": "2100.00"
        }
    })

    pair: str = Field(
        ...,
        description="Pair code (e.g., ETH-USDC)",
        min_length=3,
        max_length=41,
        pattern=r'^[A-Za-z0-9]+-[A-Za-z0-9]+$'
    )
    side: str = Field(
        ...,
        description="Order side: buy or sell",
        pattern=r'^(buy|sell|BUY|SELL)$'
    )
    quantity: Optional[str] = Field(
        None,
        description="token1 quantity as decimal string (quantity-specified orders)",
        pattern=r'^\d+(\.\d+)?$'
    )
    value: Optional[str] = Field(
        None,
        description="token2 value as decimal string (value-specified orders)",
        pattern=r'^\d+(\.\d+)?$'
    )
    quantity_specified: bool = Field(
        True,
        description="True when the order is sized in token1 quantity"
    )
    price_limit: Optional[str] = Field(
        None,
        description="Worst acceptable price",
        pattern=r'^\d+(\.\d+)?$'
    )

    @field_validator('quantity', 'value')
    @classmethod
    def validate_amount(cls, v: Optional[str]) -> Optional[str]:
        """Validate amount is positive if provided."""
        if v is None:
            return v
        if Decimal(v) <= 0:
            raise ValueError("Amount must be positive")
        return v

    @field_validator('price_limit')
    @classmethod
    def validate_price_limit(cls, v: Optional[str]) -> Optional[str]:
        """Validate price limit is positive if provided."""
        if v is None:
            return v
        if Decimal(v) <= 0:
            raise ValueError("Price limit must be positive")
        return v

    @model_validator(mode='after')
    def check_amount_matches_denomination(self) -> 'QuoteRequest':
        """Require the amount the order is denominated in."""
        if self.quantity_specified and self.quantity is None:
            raise ValueError("quantity is required when quantity_specified is true")
        if not self.quantity_specified and self.value is None:
            raise ValueError("value is required when quantity_specified is false")
        return self

    @property
    def amount(self) -> Decimal:
        return Decimal(self.quantity if self.quantity_specified else self.value)

    def to_quote_params(self) -> Dict[str, Any]:
        """Convert to keyword arguments for QuoteService.quote."""
        return {
            "pair_code": self.pair,
            "side": OrderSide[self.side.upper()],
            "amount": self.amount,
            "quantity_specified": self.quantity_specified,
            "price_limit": Decimal(self.price_limit) if self.price_limit else None,
        }


# ============================================================================
# Response Models
# ============================================================================

class QuoteDetail(BaseModel):
    """Fee-adjusted amounts of a quote."""

    pay: str = Field(..., description="Amount given up, in pay_token")
    receive: str = Field(..., description="Amount received, in receive_token")
    fee: str = Field(..., description="Fee charged, in fee_token")
    pay_token: str
    receive_token: str
    fee_token: str
    quantity: str = Field(..., description="token1 quantity before fees")
    value: str = Field(..., description="token2 value before fees")


class QuoteResponse(BaseModel):
    """Response model for a quote request."""

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "pair": "ETH-USDC",
            "side": "buy",
            "status": "quoted",
            "quote": {
                "pay": "71.14",
                "receive": "7",
                "fee": "0.14",
                "pay_token": "USDC",
                "receive_token": "ETH",
                "fee_token": "USDC",
                "quantity": "7",
                "value": "71.00"
            },
            "price_limit": None,
            "message": "Quoted 7 ETH for 71.00 USDC",
            "timestamp": "2025-10-25T10:30:45.123456"
        }
    })

    pair: str
    side: str
    status: str = Field(..., description="quoted, insufficient_liquidity or not_market_order")
    quote: Optional[QuoteDetail] = None
    price_limit: Optional[str] = None
    message: str
    timestamp: datetime

    @classmethod
    def from_quote_result(cls, result: QuoteResult) -> 'QuoteResponse':
        """Create from QuoteResult object."""
        quote = None
        if result.quote is not None:
            q = result.quote
            quote = QuoteDetail(
                pay=str(q.pay),
                receive=str(q.receive),
                fee=str(q.fee),
                pay_token=q.pay_token,
                receive_token=q.receive_token,
                fee_token=q.fee_token,
                quantity=str(q.quantity),
                value=str(q.value),
            )
        return cls(
            pair=result.order.pair,
            side=result.order.side.value.lower(),
            status=result.status.value.lower(),
            quote=quote,
            price_limit=str(result.price_limit) if result.price_limit is not None else None,
            message=result.message,
            timestamp=result.timestamp,
        )


class DepthLevelResponse(BaseModel):
    """One aggregated price level."""

    price: str
    quantity: str
    order_count: int

    @classmethod
    def from_entry(cls, entry: AggregateOrderEntry) -> 'DepthLevelResponse':
        return cls(
            price=str(entry.price),
            quantity=str(entry.quantity),
            order_count=entry.order_count,
        )


class BBOResponse(BaseModel):
    """Response model for Best Bid/Offer."""

    best_bid: Optional[str] = Field(None, description="Best bid price")
    best_ask: Optional[str] = Field(None, description="Best ask price")
    spread: Optional[str] = Field(None, description="Bid-ask spread")


class OrderBookResponse(BaseModel):
    """Response model for an aggregated order book snapshot."""

    pair: str = Field(..., description="Pair code")
    timestamp: datetime
    bids: List[DepthLevelResponse] = Field(..., description="Bid levels, highest price first")
    asks: List[DepthLevelResponse] = Field(..., description="Ask levels, highest price first")
    bbo: BBOResponse

    @classmethod
    def from_snapshot(cls, snapshot: Dict[str, Any]) -> 'OrderBookResponse':
        bbo = snapshot["bbo"]
        return cls(
            pair=snapshot["pair"],
            timestamp=snapshot["timestamp"],
            bids=[DepthLevelResponse.from_entry(e) for e in snapshot["bids"]],
            asks=[DepthLevelResponse.from_entry(e) for e in snapshot["asks"]],
            bbo=BBOResponse(**{k: str(v) if v is not None else None for k, v in bbo.items()}),
        )


class PairResponse(BaseModel):
    """Response model for pair configuration."""

    code: str
    token1: str
    token2: str
    token1_decimals: int
    token2_decimals: int
    liquidity_fee: str
    platform_fee: str

    @classmethod
    def from_pair(cls, pair: Pair) -> 'PairResponse':
        return cls(
            code=pair.code,
            token1=pair.token1,
            token2=pair.token2,
            token1_decimals=pair.token1_decimals,
            token2_decimals=pair.token2_decimals,
            liquidity_fee=str(pair.liquidity_fee),
            platform_fee=str(pair.platform_fee),
        )


class TokenPairRef(BaseModel):
    pair_code: str
    pair_id: str


class TokensResponse(BaseModel):
    """Response model for the exchangeable tokens listing."""

    tokens: List[str]
    pairs: Dict[str, List[TokenPairRef]] = Field(
        ..., description="Pairs each token appears in"
    )


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Service health status")
    timestamp: datetime = Field(..., description="Current server time")
    version: str = Field(..., description="API version")
    pairs: int = Field(..., description="Number of pairs known to the snapshot source")


class ErrorResponse(BaseModel):
    """Response model for errors."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error timestamp")
