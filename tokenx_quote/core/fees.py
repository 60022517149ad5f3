"""
Fee application for market order quotes

Turns the raw fill computed by the quote engine into what the order's owner
pays and receives once liquidity and platform fees are taken.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from .order import Order, OrderSide
from .pair import Pair
from ..utils.rounding import round_to, with_amount_context


@dataclass(frozen=True, slots=True)
class RawFill:
    """
    token1 quantity and token2 value an order would trade, before fees.
    """

    quantity: Decimal
    value: Decimal

    @property
    def average_price(self) -> Optional[Decimal]:
        """Value-weighted price of the fill, None for an empty fill."""
        if not self.quantity:
            return None
        return self.value / self.quantity


@dataclass(frozen=True, slots=True)
class Quote:
    """
    Amounts a market order would exchange, net of fees.

    Attributes:
        pay: Amount the order's owner gives up, in pay_token
        receive: Amount the order's owner gets, in receive_token
        fee: Fee charged, in fee_token
        pay_token: Token given up
        receive_token: Token received
        fee_token: Token the fee is charged in
        quantity: token1 quantity of the underlying fill
        value: token2 value of the underlying fill
    """

    pay: Decimal
    receive: Decimal
    fee: Decimal
    pay_token: str
    receive_token: str
    fee_token: str
    quantity: Decimal
    value: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pay": str(self.pay),
            "receive": str(self.receive),
            "fee": str(self.fee),
            "payToken": self.pay_token,
            "receiveToken": self.receive_token,
            "feeToken": self.fee_token,
            "quantity": str(self.quantity),
            "value": str(self.value),
        }


@with_amount_context
def apply_fees(order: Order, raw_fill: RawFill, pair: Pair) -> Optional[Quote]:
    """
    Apply the pair's fees to a raw fill.

    Quantity-specified orders are charged on the token2 value; value-specified
    orders on the token1 quantity. Buyers always pay token2 and receive token1.

    Args:
        order: Candidate market order
        raw_fill: Fill computed by walking the book
        pair: Pair configuration supplying fee rates and decimals

    Returns:
        Quote, or None when the order is not a MARKET order
    """
    if not order.is_market:
        return None

    rate = pair.fee_rate
    quantity = raw_fill.quantity
    value = raw_fill.value

    if order.quantity_specified:
        fee = round_to(pair.token2_decimals, value * rate)
        fee_token = order.token2
        if order.side == OrderSide.BUY:
            value = round_to(pair.token2_decimals, value + fee)
        else:
            value = round_to(pair.token2_decimals, value - fee)
    else:
        fee = round_to(pair.token1_decimals, quantity * rate)
        fee_token = order.token1
        if order.side == OrderSide.BUY:
            quantity = round_to(pair.token1_decimals, quantity - fee)
        else:
            quantity = round_to(pair.token1_decimals, quantity + fee)

    if order.side == OrderSide.BUY:
        pay, receive = value, quantity
        pay_token, receive_token = order.token2, order.token1
    else:
        pay, receive = quantity, value
        pay_token, receive_token = order.token1, order.token2

    return Quote(
        pay=pay,
        receive=receive,
        fee=fee,
        pay_token=pay_token,
        receive_token=receive_token,
        fee_token=fee_token,
        quantity=raw_fill.quantity,
        value=raw_fill.value,
    )
