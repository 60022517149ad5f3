"""
Unit tests for the quote engine and fee application.

The book fixtures hold asks of 5 @ 10.00 and 5 @ 10.50, and bids of
3 @ 9.90 and 10 @ 9.50, on a pair with two decimals for each token.
"""

import pytest
from decimal import Decimal

from tokenx_quote.core.fees import RawFill, apply_fees
from tokenx_quote.core.order import OrderSide, OrderStatus, OrderType
from tokenx_quote.core.price_level_book import SortDirection, build_price_level_book
from tokenx_quote.core.quote_engine import (
    QuoteStatus,
    compute_quote,
    resolve_price_limit,
    walk_book,
)
from tokenx_quote.core.pair import Pair
from tokenx_quote.utils.exceptions import InsufficientLiquidityException, ValidationException

from conftest import ask, bid, make_order, market


def ask_book(orders):
    return build_price_level_book(orders, SortDirection.ASCENDING)


def bid_book(orders):
    return build_price_level_book(orders, SortDirection.DESCENDING)


class TestWalkBook:
    """Test cases for walking the opposing side of the book."""

    def test_buy_by_quantity_spans_levels(self, asks):
        """5 @ 10.00 then 2 @ 10.50."""
        fill = walk_book(market(OrderSide.BUY, quantity="7"), ask_book(asks), None, 2, 2)
        assert fill.quantity == Decimal("7")
        assert fill.value == Decimal("71.00")

    def test_buy_by_quantity_single_level(self, asks):
        fill = walk_book(market(OrderSide.BUY, quantity="3"), ask_book(asks), None, 2, 2)
        assert fill == RawFill(quantity=Decimal("3"), value=Decimal("30"))

    def test_buy_by_value(self, asks):
        """50 buys 5 @ 10.00, the last 10 buys 0.95 @ 10.50."""
        order = market(OrderSide.BUY, value="60", quantity_specified=False)
        fill = walk_book(order, ask_book(asks), None, 2, 2)
        assert fill.quantity == Decimal("5.95")
        assert fill.value == Decimal("60")

    def test_sell_by_quantity(self, bids):
        """3 @ 9.90 then 2 @ 9.50."""
        fill = walk_book(market(OrderSide.SELL, quantity="5"), bid_book(bids), None, 2, 2)
        assert fill.quantity == Decimal("5")
        assert fill.value == Decimal("48.70")

    def test_sell_by_value(self, bids):
        """29.70 sells 3 @ 9.90, the last 10.30 sells 1.08 @ 9.50."""
        order = market(OrderSide.SELL, value="40", quantity_specified=False)
        fill = walk_book(order, bid_book(bids), None, 2, 2)
        assert fill.quantity == Decimal("4.08")
        assert fill.value == Decimal("40")

    def test_exact_book_depth_fills(self, asks):
        fill = walk_book(market(OrderSide.BUY, quantity="10"), ask_book(asks), None, 2, 2)
        assert fill.quantity == Decimal("10")
        assert fill.value == Decimal("102.50")

    def test_one_unit_past_depth_refused(self, asks):
        """Partial fills are never quoted."""
        with pytest.raises(InsufficientLiquidityException):
            walk_book(market(OrderSide.BUY, quantity="10.01"), ask_book(asks), None, 2, 2)

    def test_empty_book_refused(self):
        with pytest.raises(InsufficientLiquidityException):
            walk_book(market(OrderSide.BUY, quantity="1"), ask_book([]), None, 2, 2)

    def test_buy_limit_stops_walk(self, asks):
        """A buy limit of 10.00 excludes the 10.50 level."""
        order = market(OrderSide.BUY, quantity="7")
        with pytest.raises(InsufficientLiquidityException):
            walk_book(order, ask_book(asks), Decimal("10.00"), 2, 2)
        fill = walk_book(order, ask_book(asks), Decimal("10.50"), 2, 2)
        assert fill.value == Decimal("71.00")

    def test_sell_limit_stops_walk(self, bids):
        """A sell limit of 9.90 excludes the 9.50 level."""
        order = market(OrderSide.SELL, quantity="5")
        with pytest.raises(InsufficientLiquidityException):
            walk_book(order, bid_book(bids), Decimal("9.90"), 2, 2)
        fill = walk_book(order, bid_book(bids), Decimal("9.50"), 2, 2)
        assert fill.value == Decimal("48.70")

    def test_limit_inside_first_level_fills_nothing(self, asks):
        with pytest.raises(InsufficientLiquidityException):
            walk_book(market(OrderSide.BUY, quantity="1"), ask_book(asks), Decimal("9.99"), 2, 2)

    def test_rounding_to_token_decimals(self):
        """Level values are rounded half away from zero."""
        book = ask_book([ask("3.335", "1")])
        fill = walk_book(market(OrderSide.BUY, quantity="1"), book, None, 2, 2)
        assert fill.value == Decimal("3.34")

    def test_non_positive_price_refused(self):
        """A book holding a zero price is never walked."""
        broken = make_order(OrderSide.SELL, "0", "5", order_type=OrderType.MARKET)
        with pytest.raises(InsufficientLiquidityException):
            walk_book(market(OrderSide.BUY, quantity="1"), ask_book([broken]), None, 2, 2)

    def test_no_remaining_demand_refused(self, asks):
        """A fully filled order has nothing to quote."""
        done = make_order(
            OrderSide.BUY,
            quantity="5",
            quantity_fulfilled="5",
            order_type=OrderType.MARKET,
            status=OrderStatus.SUBMITTING,
        )
        with pytest.raises(InsufficientLiquidityException):
            walk_book(done, ask_book(asks), None, 2, 2)

    def test_demand_uses_remaining_quantity(self, asks):
        partly = make_order(
            OrderSide.BUY,
            quantity="8",
            quantity_fulfilled="6",
            order_type=OrderType.MARKET,
            status=OrderStatus.SUBMITTING,
        )
        fill = walk_book(partly, ask_book(asks), None, 2, 2)
        assert fill.quantity == Decimal("2")
        assert fill.value == Decimal("20")

    def test_fulfilled_resting_quantity_not_available(self):
        """Only the unfilled part of a resting order can be taken."""
        book = ask_book([ask("10", "5", quantity_fulfilled="4")])
        with pytest.raises(InsufficientLiquidityException):
            walk_book(market(OrderSide.BUY, quantity="2"), book, None, 2, 2)

    def test_value_monotonic_in_quantity(self, asks):
        """Larger buys never cost less."""
        values = [
            walk_book(market(OrderSide.BUY, quantity=q), ask_book(asks), None, 2, 2).value
            for q in ("1", "3", "5", "5.5", "7", "10")
        ]
        assert values == sorted(values)

    def test_book_not_mutated(self, asks):
        book = ask_book(asks)
        before = [(price, level.orders) for price, level in book]
        walk_book(market(OrderSide.BUY, quantity="7"), book, None, 2, 2)
        assert [(price, level.orders) for price, level in book] == before


class TestApplyFees:
    """Test cases for fee application."""

    def test_buy_by_quantity_pays_fee_in_token2(self, fee_pair):
        quote = apply_fees(
            market(OrderSide.BUY, quantity="7"),
            RawFill(Decimal("7"), Decimal("71.00")),
            fee_pair,
        )
        assert quote.fee == Decimal("0.14")
        assert quote.fee_token == "USDC"
        assert quote.pay == Decimal("71.14")
        assert quote.pay_token == "USDC"
        assert quote.receive == Decimal("7")
        assert quote.receive_token == "ETH"

    def test_buy_by_value_pays_fee_in_token1(self, fee_pair):
        order = market(OrderSide.BUY, value="60", quantity_specified=False)
        quote = apply_fees(order, RawFill(Decimal("5.95"), Decimal("60")), fee_pair)
        assert quote.fee == Decimal("0.01")
        assert quote.fee_token == "ETH"
        assert quote.receive == Decimal("5.94")
        assert quote.pay == Decimal("60")

    def test_sell_by_quantity(self, fee_pair):
        quote = apply_fees(
            market(OrderSide.SELL, quantity="5"),
            RawFill(Decimal("5"), Decimal("48.70")),
            fee_pair,
        )
        assert quote.fee == Decimal("0.10")
        assert quote.receive == Decimal("48.60")
        assert quote.receive_token == "USDC"
        assert quote.pay == Decimal("5")
        assert quote.pay_token == "ETH"

    def test_sell_by_value(self, fee_pair):
        order = market(OrderSide.SELL, value="40", quantity_specified=False)
        quote = apply_fees(order, RawFill(Decimal("4.08"), Decimal("40")), fee_pair)
        assert quote.fee == Decimal("0.01")
        assert quote.fee_token == "ETH"
        assert quote.pay == Decimal("4.09")
        assert quote.receive == Decimal("40")

    def test_zero_fee(self, pair):
        quote = apply_fees(
            market(OrderSide.BUY, quantity="7"),
            RawFill(Decimal("7"), Decimal("71.00")),
            pair,
        )
        assert quote.fee == Decimal("0")
        assert quote.pay == Decimal("71.00")

    def test_raw_fill_preserved(self, fee_pair):
        quote = apply_fees(
            market(OrderSide.BUY, quantity="7"),
            RawFill(Decimal("7"), Decimal("71.00")),
            fee_pair,
        )
        assert quote.quantity == Decimal("7")
        assert quote.value == Decimal("71.00")

    def test_non_market_order_gets_no_quote(self, fee_pair):
        assert apply_fees(bid("10", "1"), RawFill(Decimal("1"), Decimal("10")), fee_pair) is None

    def test_average_price(self):
        assert RawFill(Decimal("4"), Decimal("41")).average_price == Decimal("10.25")
        assert RawFill(Decimal("0"), Decimal("0")).average_price is None


class TestComputeQuote:
    """Test cases for the compute_quote entry point."""

    def test_quote_with_fees(self, asks, fee_pair):
        result = compute_quote(market(OrderSide.BUY, quantity="7"), asks, fee_pair)

        assert result.status == QuoteStatus.QUOTED
        assert result.is_quoted
        assert result.raw_fill == RawFill(Decimal("7"), Decimal("71.00"))
        assert result.quote.pay == Decimal("71.14")
        assert result.price_limit is None

    def test_sell_quote(self, bids, fee_pair):
        result = compute_quote(market(OrderSide.SELL, quantity="5"), bids, fee_pair)
        assert result.quote.receive == Decimal("48.60")

    def test_insufficient_liquidity_is_a_result(self, asks, pair):
        result = compute_quote(market(OrderSide.BUY, quantity="11"), asks, pair)

        assert result.status == QuoteStatus.INSUFFICIENT_LIQUIDITY
        assert not result.is_quoted
        assert result.quote is None
        assert result.raw_fill is None

    def test_empty_book(self, pair):
        result = compute_quote(market(OrderSide.SELL, quantity="1"), [], pair)
        assert result.status == QuoteStatus.INSUFFICIENT_LIQUIDITY

    def test_limit_order_not_quoted(self, asks, pair):
        result = compute_quote(bid("10", "1"), asks, pair)
        assert result.status == QuoteStatus.NOT_MARKET_ORDER
        assert result.quote is None

    def test_orders_given_out_of_price_order(self, pair):
        """The walk reads best price first whatever the input order."""
        shuffled = [ask("12", "5"), ask("10", "1"), ask("11", "1")]
        result = compute_quote(market(OrderSide.BUY, quantity="2"), shuffled, pair)
        assert result.raw_fill.value == Decimal("21")

    def test_non_resting_and_same_side_orders_ignored(self, asks, pair):
        """Bids, settled asks and market orders add no liquidity to a buy."""
        noise = [
            bid("10", "100"),
            ask("9", "100", status=OrderStatus.COMPLETED),
            ask("9", "100", status=OrderStatus.CANCELLED),
            make_order(OrderSide.SELL, "9", "100", order_type=OrderType.MARKET),
        ]
        result = compute_quote(market(OrderSide.BUY, quantity="7"), asks + noise, pair)
        assert result.raw_fill.value == Decimal("71.00")

    def test_documents_accepted(self, asks, pair):
        docs = [o.to_dict() for o in asks]
        result = compute_quote(market(OrderSide.BUY, quantity="7"), docs, pair)
        assert result.raw_fill.value == Decimal("71.00")

    def test_invalid_document_raises(self, pair):
        with pytest.raises(ValidationException):
            compute_quote(market(OrderSide.BUY, quantity="1"), [{"pair": "ETH-USDC"}], pair)

    def test_prebuilt_book_accepted(self, asks, pair):
        result = compute_quote(market(OrderSide.BUY, quantity="7"), ask_book(asks), pair)
        assert result.raw_fill.value == Decimal("71.00")

    def test_price_limit(self, asks, pair):
        order = market(OrderSide.BUY, quantity="7")
        refused = compute_quote(order, asks, pair, price_limit=Decimal("10"))
        assert refused.status == QuoteStatus.INSUFFICIENT_LIQUIDITY
        assert refused.price_limit == Decimal("10")

        quoted = compute_quote(order, asks, pair, price_limit=Decimal("10.50"))
        assert quoted.is_quoted

    def test_other_pair_rejected(self, asks):
        other = Pair(code="BTC-USDC", token1="BTC", token2="USDC")
        with pytest.raises(ValidationException):
            compute_quote(market(OrderSide.BUY, quantity="1"), asks, other)

    def test_repeat_calls_agree(self, asks, fee_pair):
        """Quoting is a pure function of the snapshot."""
        order = market(OrderSide.BUY, quantity="7")
        snapshot = list(asks)
        first = compute_quote(order, asks, fee_pair)
        second = compute_quote(order, asks, fee_pair)

        assert (first.status, first.quote, first.raw_fill) == (
            second.status, second.quote, second.raw_fill
        )
        assert asks == snapshot

    def test_eighteen_decimal_tokens(self):
        """Large amounts on 18-decimal tokens quote at full precision."""
        wei_pair = Pair(
            code="ETH-USDC",
            token1="ETH",
            token2="USDC",
            token1_decimals=18,
            token2_decimals=18,
            liquidity_fee=Decimal("0.001"),
            platform_fee=Decimal("0.001"),
        )
        result = compute_quote(
            market(OrderSide.BUY, quantity="10000000"),
            [ask("3000", "20000000")],
            wei_pair,
        )

        assert result.status == QuoteStatus.QUOTED
        assert result.raw_fill == RawFill(Decimal("10000000"), Decimal("30000000000"))
        assert result.quote.fee == Decimal("60000000")
        assert str(result.quote.pay) == "30060000000.000000000000000000"

    def test_eighteen_decimal_fractional_amounts(self):
        """Sub-unit digits survive on amounts past 28 significant digits."""
        wei_pair = Pair(code="ETH-USDC", token1="ETH", token2="USDC",
                        token1_decimals=18, token2_decimals=18)
        order = market(OrderSide.BUY, quantity="12345678901.000000000000000001")
        result = compute_quote(order, [ask("2", "20000000000")], wei_pair)

        assert result.raw_fill.value == Decimal("24691357802.000000000000000002")

    def test_result_to_dict(self, asks, pair):
        order = market(OrderSide.BUY, quantity="3")
        result = compute_quote(order, asks, pair).to_dict()
        assert result["status"] == "QUOTED"
        assert result["order_id"] == order.id
        assert result["quote"]["payToken"] == "USDC"
        assert result["price_limit"] is None


class TestResolvePriceLimit:

    def test_explicit_limit_wins(self):
        order = bid("10", "1")
        assert resolve_price_limit(order, Decimal("11")) == Decimal("11")

    def test_order_price_used(self):
        assert resolve_price_limit(bid("10", "1")) == Decimal("10")

    def test_market_order_unbounded(self):
        assert resolve_price_limit(market(OrderSide.BUY, quantity="1")) is None
