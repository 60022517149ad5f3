"""
Tests for the snapshot source and the services built on it.
"""

import pytest
from decimal import Decimal

from tokenx_quote.core.order import OrderSide, OrderStatus
from tokenx_quote.core.quote_engine import QuoteStatus
from tokenx_quote.services.market_data_service import MarketDataService
from tokenx_quote.services.pair_service import PairService
from tokenx_quote.services.quote_service import QuoteService
from tokenx_quote.services.snapshot_source import (
    InMemorySnapshotSource,
    OrderSnapshotSource,
    load_resting_orders,
)
from tokenx_quote.utils.exceptions import (
    InvalidQuantityException,
    PairNotFoundException,
    PriceOutOfBoundsException,
    ValidationException,
)

from conftest import ask, bid, market

ETH_USDC = {
    "code": "ETH-USDC",
    "token1": "ETH",
    "token2": "USDC",
    "token1Decimals": 2,
    "token2Decimals": 2,
    "liquidityFee": "0.001",
    "platformFee": "0.001",
}

BTC_USDC = {
    "code": "BTC-USDC",
    "token1": "BTC",
    "token2": "USDC",
    "token1Decimals": 8,
    "token2Decimals": 2,
}


class CountingSource(InMemorySnapshotSource):
    """Snapshot source that counts pair reads."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.pair_reads = 0

    def get_pair(self, pair_code):
        self.pair_reads += 1
        return super().get_pair(pair_code)


@pytest.fixture
def source(asks, bids):
    return InMemorySnapshotSource(
        pairs=[ETH_USDC, BTC_USDC],
        orders=[o.to_dict() for o in asks + bids],
    )


class TestInMemorySnapshotSource:
    """Test cases for the in-memory snapshot source."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemorySnapshotSource(), OrderSnapshotSource)

    def test_resting_orders_by_side(self, source):
        sells = source.get_resting_orders("ETH-USDC", OrderSide.SELL)
        assert {doc["price"] for doc in sells} == {"10.50", "10.00"}
        assert source.get_resting_orders("BTC-USDC", OrderSide.SELL) == []

    def test_settled_orders_not_returned(self, source):
        source.put_order(ask("9", "1", status=OrderStatus.COMPLETED).to_dict())
        assert len(source.get_resting_orders("ETH-USDC", OrderSide.SELL)) == 2

    def test_reads_are_copies(self, source):
        source.get_pair("ETH-USDC")["token1"] = "XXX"
        source.get_resting_orders("ETH-USDC", OrderSide.BUY)[0]["price"] = "0"
        assert source.get_pair("ETH-USDC")["token1"] == "ETH"
        assert all(d["price"] != "0" for d in source.get_resting_orders("ETH-USDC", OrderSide.BUY))

    def test_pair_code_defaulted(self):
        source = InMemorySnapshotSource(pairs=[{"token1": "SOL", "token2": "USDC"}])
        assert source.get_pair("SOL-USDC")["code"] == "SOL-USDC"

    def test_clear_orders(self, source):
        source.clear_orders()
        assert source.get_resting_orders("ETH-USDC", OrderSide.SELL) == []

    def test_load_skips_invalid_documents(self, source, caplog):
        source.put_order({"id": "broken", "pair": "ETH-USDC", "side": "SELL"})
        orders = load_resting_orders(source, "ETH-USDC", OrderSide.SELL)
        assert len(orders) == 2
        assert "broken" in caplog.text


class TestPairService:
    """Test cases for pair lookups."""

    def test_get_pair_info(self, source):
        pair = PairService(source).get_pair_info("ETH-USDC")
        assert pair.code == "ETH-USDC"
        assert pair.fee_rate == Decimal("0.002")

    def test_unknown_pair(self, source):
        with pytest.raises(PairNotFoundException):
            PairService(source).get_pair_info("DOGE-USDC")

    def test_malformed_code(self, source):
        with pytest.raises(ValidationException):
            PairService(source).get_pair_info("ETHUSDC")

    def test_pairs_map_skips_invalid(self, source):
        source.put_pair({"code": "BAD-USDC", "token1": "BAD", "token2": "USDC", "platformFee": "5"})
        pairs = PairService(source).get_pairs_map()
        assert set(pairs) == {"ETH-USDC", "BTC-USDC"}

    def test_tokens_pair_map(self, source):
        tokens = PairService(source).get_tokens_pair_map()
        assert set(tokens) == {"ETH", "BTC", "USDC"}
        assert [ref["pair_code"] for ref in tokens["USDC"]] == ["ETH-USDC", "BTC-USDC"]
        assert tokens["ETH"] == [{"pair_code": "ETH-USDC", "pair_id": "ETH-USDC"}]

    def test_tokens_list(self, source):
        assert sorted(PairService(source).get_tokens_list()) == ["BTC", "ETH", "USDC"]


class TestQuoteService:
    """Test cases for quoting through the service layer."""

    def test_buy_quote(self, source):
        result = QuoteService(source).quote("ETH-USDC", OrderSide.BUY, Decimal("7"))

        assert result.status == QuoteStatus.QUOTED
        assert result.quote.pay == Decimal("71.14")
        assert result.quote.fee == Decimal("0.14")
        assert result.order.owner == "quote"
        assert result.order.status == OrderStatus.SUBMITTING

    def test_sell_by_value(self, source):
        result = QuoteService(source).quote(
            "ETH-USDC", OrderSide.SELL, Decimal("40"), quantity_specified=False
        )
        assert result.quote.pay == Decimal("4.09")
        assert result.quote.receive == Decimal("40")

    def test_insufficient_liquidity(self, source):
        result = QuoteService(source).quote("ETH-USDC", OrderSide.BUY, Decimal("11"))
        assert result.status == QuoteStatus.INSUFFICIENT_LIQUIDITY

    def test_price_limit(self, source):
        result = QuoteService(source).quote(
            "ETH-USDC", OrderSide.BUY, Decimal("7"), price_limit=Decimal("10")
        )
        assert result.status == QuoteStatus.INSUFFICIENT_LIQUIDITY

    def test_invalid_amount(self, source):
        with pytest.raises(InvalidQuantityException):
            QuoteService(source).quote("ETH-USDC", OrderSide.BUY, Decimal("0"))

    def test_invalid_price_limit(self, source):
        with pytest.raises(PriceOutOfBoundsException):
            QuoteService(source).quote(
                "ETH-USDC", OrderSide.BUY, Decimal("1"), price_limit=Decimal("-1")
            )

    def test_unknown_pair(self, source):
        with pytest.raises(PairNotFoundException):
            QuoteService(source).quote("DOGE-USDC", OrderSide.BUY, Decimal("1"))

    def test_quote_does_not_change_snapshot(self, source):
        before = source.get_resting_orders("ETH-USDC", OrderSide.SELL)
        QuoteService(source).quote("ETH-USDC", OrderSide.BUY, Decimal("7"))
        assert source.get_resting_orders("ETH-USDC", OrderSide.SELL) == before

    def test_limit_order_reports_not_market(self, source):
        result = QuoteService(source).quote_order(bid("10", "1"))
        assert result.status == QuoteStatus.NOT_MARKET_ORDER

    def test_pair_read_once_per_quote(self, asks):
        source = CountingSource(pairs=[ETH_USDC], orders=[o.to_dict() for o in asks])
        QuoteService(source).quote("ETH-USDC", OrderSide.BUY, Decimal("7"))
        assert source.pair_reads == 1

    def test_quote_order_looks_up_pair_when_omitted(self, source):
        order = market(OrderSide.BUY, quantity="1")
        result = QuoteService(source).quote_order(order)
        assert result.quote.fee == Decimal("0.02")


class TestMarketDataService:
    """Test cases for depth views."""

    def test_bid_depth_highest_first(self, source):
        entries = MarketDataService(source).get_depth("ETH-USDC", OrderSide.BUY)
        assert [e.price for e in entries] == [Decimal("9.90"), Decimal("9.50")]

    def test_ask_depth_lowest_first(self, source):
        entries = MarketDataService(source).get_depth("ETH-USDC", OrderSide.SELL, levels=1)
        assert [e.price for e in entries] == [Decimal("10.00")]

    def test_orderbook_snapshot(self, source):
        source.put_order(ask("11.00", "2").to_dict())
        snapshot = MarketDataService(source).get_orderbook("ETH-USDC", levels=2)

        assert snapshot["pair"] == "ETH-USDC"
        assert [e.price for e in snapshot["bids"]] == [Decimal("9.90"), Decimal("9.50")]
        # best two asks, displayed high to low
        assert [e.price for e in snapshot["asks"]] == [Decimal("10.50"), Decimal("10.00")]
        assert snapshot["bbo"] == {
            "best_bid": Decimal("9.90"),
            "best_ask": Decimal("10.00"),
            "spread": Decimal("0.10"),
        }

    def test_levels_capped(self, source, monkeypatch):
        from tokenx_quote.config import settings
        monkeypatch.setattr(settings, "max_depth_levels", 1)
        entries = MarketDataService(source).get_depth("ETH-USDC", OrderSide.BUY, levels=50)
        assert len(entries) == 1

    @pytest.mark.parametrize("levels", [0, -1])
    def test_levels_below_one_rejected(self, source, levels):
        service = MarketDataService(source)
        with pytest.raises(ValidationException) as exc_info:
            service.get_depth("ETH-USDC", OrderSide.SELL, levels=levels)
        assert exc_info.value.field == "levels"
        with pytest.raises(ValidationException):
            service.get_orderbook("ETH-USDC", levels=levels)

    def test_empty_pair(self, source):
        snapshot = MarketDataService(source).get_orderbook("BTC-USDC")
        assert snapshot["bids"] == []
        assert snapshot["asks"] == []
        assert snapshot["bbo"]["spread"] is None
