# backend/tests/services/test_portfolio_aggregator.py
"""
Tests for PortfolioAggregator.

This module tests:
- Concurrent valuation keeps asset order
- Single-asset failures degrade to `unavailable` rows
- Deadline handling for slow valuations and in-flight upstream calls
- Caller cancellation
- Correlation ID propagation into worker threads
- Performance summary: totals, allocation, performers, status counts
"""

import threading
import time
from decimal import Decimal

import httpx
import pytest

from wealthtrack.models import AssetStatus, AssetType
from wealthtrack.services.cache import MemoryCache
from wealthtrack.services.exceptions import ProviderUnavailableError
from wealthtrack.services.market_data import (
    CoinGeckoProvider,
    MarketPriceClient,
    YahooChartProvider,
)
from wealthtrack.services.performance import PerformanceCalculator
from wealthtrack.services.portfolio import PortfolioAggregator
from wealthtrack.services.portfolio.aggregator import rank_performers
from wealthtrack.services.portfolio.types import PerformerSummary
from wealthtrack.services.valuation import PriceSource, ValuationResolver
from wealthtrack.utils.context import (
    Deadline,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from tests.conftest import FakePriceClient, make_asset


@pytest.fixture
def aggregator(price_client, history_repo, fixed_clock):
    return PortfolioAggregator(
        ValuationResolver(price_client, history_repo),
        PerformanceCalculator(clock=fixed_clock),
        max_workers=4,
        timeout=5.0,
    )


class BlockingPriceClient(FakePriceClient):
    """Blocks lookups of one symbol until released."""

    def __init__(self, slow_symbol: str) -> None:
        super().__init__()
        self.slow_symbol = slow_symbol
        self.release = threading.Event()

    def get_price(self, asset_type, symbol, currency=None):
        if symbol.upper() == self.slow_symbol:
            self.release.wait(timeout=10)
        return super().get_price(asset_type, symbol, currency)


class CorrelationRecordingClient(FakePriceClient):
    """Records the correlation ID visible inside each lookup."""

    def __init__(self) -> None:
        super().__init__()
        self.seen: list[str | None] = []
        self.threads: set[str] = set()

    def get_price(self, asset_type, symbol, currency=None):
        with self._lock:
            self.seen.append(get_correlation_id())
            self.threads.add(threading.current_thread().name)
        return super().get_price(asset_type, symbol, currency)


# =============================================================================
# CONSTRUCTION
# =============================================================================

class TestConstruction:

    @pytest.mark.parametrize("workers", [0, -1])
    def test_rejects_non_positive_workers(self, price_client, history_repo, workers):
        with pytest.raises(ValueError):
            PortfolioAggregator(
                ValuationResolver(price_client, history_repo),
                PerformanceCalculator(),
                max_workers=workers,
            )


# =============================================================================
# VALUE ALL
# =============================================================================

class TestValueAll:

    def test_empty(self, aggregator):
        assert aggregator.value_all([], "IDR") == []

    def test_keeps_asset_order(self, aggregator, price_client):
        symbols = ["BTC", "ETH", "SOL", "ADA", "DOT", "LTC"]
        for i, symbol in enumerate(symbols, start=1):
            price_client.add_quote(AssetType.CRYPTO, symbol, str(i * 10), currency="IDR")
        assets = [make_asset(name=symbol, symbol=symbol) for symbol in symbols]

        values = aggregator.value_all(assets, "IDR")

        assert [v.uuid for v in values] == [a.uuid for a in assets]
        assert [v.value for v in values] == [Decimal(i * 10) for i in range(1, 7)]
        assert len(price_client.calls) == 6

    def test_failure_without_fallback_is_unavailable(self, aggregator, price_client):
        price_client.add_quote(AssetType.CRYPTO, "BTC", "100", currency="IDR")
        ok = make_asset(symbol="BTC")
        broken = make_asset(symbol="ZZZ", purchase_price="0")

        values = aggregator.value_all([ok, broken], "IDR")

        assert values[0].valuation.price_source == PriceSource.EXTERNAL_LIVE
        assert values[1].valuation.price_source == PriceSource.UNAVAILABLE
        assert values[1].value == Decimal("0")
        assert values[1].currency == "IDR"
        assert values[1].valuation.warnings

    def test_unexpected_error_is_unavailable(self, aggregator, price_client):
        price_client.add_error(AssetType.CRYPTO, "BTC", RuntimeError("bug"))

        values = aggregator.value_all([make_asset(symbol="BTC", purchase_price="5")], "USD")

        assert values[0].valuation.price_source == PriceSource.UNAVAILABLE
        assert values[0].valuation.warnings == ("internal error",)

    def test_provider_failure_with_purchase_price_is_fallback(self, aggregator, price_client):
        price_client.add_error(AssetType.STOCK, "AAPL", ProviderUnavailableError("yahoo", "HTTP 503"))
        asset = make_asset(type=AssetType.STOCK, symbol="AAPL", quantity="2", purchase_price="150")

        values = aggregator.value_all([asset], "USD")

        assert values[0].valuation.price_source == PriceSource.PURCHASE_PRICE_FALLBACK
        assert values[0].value == Decimal("300")

    def test_deadline_marks_slow_asset_unavailable(self, history_repo, fixed_clock):
        client = BlockingPriceClient("SLOW")
        client.add_quote(AssetType.CRYPTO, "BTC", "100", currency="USD")
        client.add_quote(AssetType.CRYPTO, "SLOW", "1", currency="USD")
        aggregator = PortfolioAggregator(
            ValuationResolver(client, history_repo),
            PerformanceCalculator(clock=fixed_clock),
            max_workers=2,
            timeout=0.2,
        )
        try:
            values = aggregator.value_all(
                [make_asset(symbol="BTC"), make_asset(symbol="SLOW")], "USD",
            )
        finally:
            client.release.set()

        assert values[0].value == Decimal("100")
        assert values[1].valuation.price_source == PriceSource.UNAVAILABLE
        assert values[1].valuation.warnings == ("valuation timed out",)

    def test_correlation_id_reaches_workers(self, history_repo, fixed_clock):
        client = CorrelationRecordingClient()
        for symbol in ("BTC", "ETH", "SOL"):
            client.add_quote(AssetType.CRYPTO, symbol, "1")
        aggregator = PortfolioAggregator(
            ValuationResolver(client, history_repo),
            PerformanceCalculator(clock=fixed_clock),
            max_workers=3,
        )

        set_correlation_id("req-42")
        try:
            aggregator.value_all([make_asset(symbol=s) for s in ("BTC", "ETH", "SOL")], "USD")
        finally:
            clear_correlation_id()

        assert client.seen == ["req-42"] * 3
        assert all(name.startswith("valuation") for name in client.threads)


# =============================================================================
# DEADLINES
# =============================================================================

class SlowYahoo:
    """
    Yahoo chart handler that answers after `delay` seconds.

    When `honor_timeout` is set it behaves like a real socket: a read timeout
    shorter than the delay ends the call with httpx.ReadTimeout.
    """

    def __init__(self, delay: float, honor_timeout: bool = True) -> None:
        self.delay = delay
        self.honor_timeout = honor_timeout
        self.read_timeouts: list[float | None] = []
        self.paths: list[str] = []
        self.finished = threading.Event()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        read_timeout = request.extensions["timeout"]["read"]
        self.read_timeouts.append(read_timeout)
        self.paths.append(request.url.path)
        try:
            if self.honor_timeout and read_timeout is not None and read_timeout < self.delay:
                time.sleep(read_timeout)
                raise httpx.ReadTimeout("read timed out", request=request)
            time.sleep(self.delay)
            meta = {"regularMarketPrice": 200, "currency": "USD"}
            return httpx.Response(200, json={"chart": {"result": [{"meta": meta}], "error": None}})
        finally:
            self.finished.set()


def live_aggregator(handler, history_repo, fixed_clock, timeout: float) -> PortfolioAggregator:
    http = httpx.Client(transport=httpx.MockTransport(handler), timeout=15.0)
    client = MarketPriceClient(
        MemoryCache(),
        CoinGeckoProvider("https://api.coingecko.test/api/v3", client=http),
        YahooChartProvider("https://query1.finance.yahoo.test", client=http),
    )
    return PortfolioAggregator(
        ValuationResolver(client, history_repo),
        PerformanceCalculator(clock=fixed_clock),
        max_workers=2,
        timeout=timeout,
    )


class TestDeadlines:

    def test_in_flight_call_ends_by_deadline(self, history_repo, fixed_clock):
        upstream = SlowYahoo(delay=10.0)
        aggregator = live_aggregator(upstream, history_repo, fixed_clock, timeout=0.3)
        asset = make_asset(type=AssetType.STOCK, symbol="AAPL", purchase_price="0")

        started = time.monotonic()
        values = aggregator.value_all([asset], "USD")

        assert values[0].valuation.price_source == PriceSource.UNAVAILABLE
        assert upstream.finished.wait(timeout=2.0)
        assert time.monotonic() - started < 2.0
        assert upstream.read_timeouts[0] <= 0.3

    def test_no_upstream_call_after_deadline(self, history_repo, fixed_clock):
        upstream = SlowYahoo(delay=0.4, honor_timeout=False)
        aggregator = live_aggregator(upstream, history_repo, fixed_clock, timeout=0.2)
        asset = make_asset(type=AssetType.STOCK, symbol="AAPL", purchase_price="0")

        values = aggregator.value_all([asset], "IDR")
        assert upstream.finished.wait(timeout=2.0)
        time.sleep(0.1)

        assert values[0].valuation.warnings == ("valuation timed out",)
        assert upstream.paths == ["/v8/finance/chart/AAPL"]

    def test_caller_cancellation_returns_promptly(self, history_repo, fixed_clock):
        client = BlockingPriceClient("SLOW")
        client.add_quote(AssetType.CRYPTO, "SLOW", "1", currency="USD")
        aggregator = PortfolioAggregator(
            ValuationResolver(client, history_repo),
            PerformanceCalculator(clock=fixed_clock),
            timeout=30.0,
        )
        deadline = Deadline(30.0)
        timer = threading.Timer(0.1, deadline.cancel)

        started = time.monotonic()
        timer.start()
        try:
            values = aggregator.value_all([make_asset(symbol="SLOW")], "USD", deadline=deadline)
        finally:
            client.release.set()
            timer.cancel()

        assert time.monotonic() - started < 5.0
        assert values[0].valuation.warnings == ("valuation cancelled",)

    def test_summarize_uses_caller_deadline(self, history_repo, fixed_clock):
        client = BlockingPriceClient("SLOW")
        aggregator = PortfolioAggregator(
            ValuationResolver(client, history_repo),
            PerformanceCalculator(clock=fixed_clock),
            timeout=30.0,
        )
        deadline = Deadline(0.1)
        try:
            summary = aggregator.summarize([make_asset(symbol="SLOW", total_cost="10")], "USD", deadline=deadline)
        finally:
            client.release.set()

        assert summary.unavailable_assets != []
        assert deadline.cancelled


# =============================================================================
# SUMMARY
# =============================================================================

class TestSummarize:

    @pytest.fixture
    def portfolio(self, price_client, history_repo):
        price_client.add_quote(AssetType.CRYPTO, "BTC", "1200000", currency="IDR")
        price_client.add_quote(AssetType.STOCK, "BBRI", "4000", currency="IDR")
        return [
            make_asset(name="Bitcoin", symbol="BTC", quantity="1", total_cost="1000000", purchase_currency="IDR"),
            make_asset(
                name="Bank Rakyat", type=AssetType.STOCK, symbol="BBRI",
                quantity="1", total_cost="500000", purchase_currency="IDR",
            ),
            make_asset(
                name="Savings", type=AssetType.CASH, symbol=None,
                quantity="300000", total_cost="300000", purchase_currency="IDR", status=None,
            ),
            make_asset(
                name="Ethereum wish", symbol="ETH", quantity="1",
                total_cost="999", status=AssetStatus.PLANNED,
            ),
        ]

    def test_overview_totals(self, aggregator, portfolio):
        summary = aggregator.summarize(portfolio, "IDR")

        overview = summary.overview
        assert overview.total_invested == Decimal("1800000")
        assert overview.current_value == Decimal("1900000")
        assert overview.total_profit_loss == Decimal("100000")
        assert overview.total_profit_loss_percent == Decimal("5.56")
        assert overview.total_roi == overview.total_profit_loss_percent
        assert overview.currency == "IDR"

    def test_planned_assets_not_priced(self, aggregator, portfolio, price_client):
        aggregator.summarize(portfolio, "IDR")
        assert all(call[1] != "ETH" for call in price_client.calls)

    def test_status_counts(self, aggregator, portfolio):
        portfolio.append(make_asset(symbol=None, type=AssetType.OTHER, status=AssetStatus.SOLD))

        summary = aggregator.summarize(portfolio, "IDR")

        assert summary.status_summary.active == 2
        assert summary.status_summary.sold == 1
        assert summary.status_summary.planned == 1

    def test_unset_status_counted_nowhere_but_valued(self, aggregator, portfolio):
        summary = aggregator.summarize(portfolio, "IDR")

        counts = summary.status_summary
        assert counts.active + counts.sold + counts.planned == len(portfolio) - 1
        assert summary.asset_allocation["CASH"].current_value == Decimal("300000")

    def test_allocation(self, aggregator, portfolio):
        allocation = aggregator.summarize(portfolio, "IDR").asset_allocation

        assert set(allocation) == {"CRYPTO", "STOCK", "CASH"}
        assert allocation["CRYPTO"].current_value == Decimal("1200000")
        assert allocation["CRYPTO"].percentage == Decimal("63.16")
        assert allocation["CRYPTO"].roi == Decimal("20.00")
        assert allocation["STOCK"].current_value == Decimal("400000")
        assert allocation["STOCK"].percentage == Decimal("21.05")
        assert allocation["STOCK"].roi == Decimal("-20.00")
        assert allocation["CASH"].percentage == Decimal("15.79")
        assert allocation["CASH"].count == 1

    def test_allocation_values_sum_to_total(self, aggregator, portfolio):
        summary = aggregator.summarize(portfolio, "IDR")
        total = sum(bucket.current_value for bucket in summary.asset_allocation.values())
        assert total == summary.overview.current_value

    def test_gainers_and_losers(self, aggregator, portfolio):
        summary = aggregator.summarize(portfolio, "IDR")

        assert [p.name for p in summary.top_gainers] == ["Bitcoin"]
        assert [p.name for p in summary.top_losers] == ["Bank Rakyat"]

    def test_unavailable_assets_listed(self, aggregator, portfolio):
        broken = make_asset(symbol="ZZZ", total_cost="100")
        portfolio.append(broken)

        summary = aggregator.summarize(portfolio, "IDR")

        assert summary.unavailable_assets == [broken.uuid]
        assert summary.overview.total_invested == Decimal("1800100")

    def test_empty_portfolio(self, aggregator):
        summary = aggregator.summarize([], "USD")

        assert summary.overview.total_invested == Decimal("0")
        assert summary.overview.total_profit_loss_percent == Decimal("0")
        assert summary.asset_allocation == {}
        assert summary.top_gainers == []


class TestRankPerformers:

    @staticmethod
    def performer(name: str, percent: str) -> PerformerSummary:
        return PerformerSummary(
            uuid=name,
            name=name,
            type=AssetType.CRYPTO,
            profit_loss_percent=Decimal(percent),
            profit_loss=Decimal(percent),
        )

    def test_limits_to_five(self):
        performers = [self.performer(f"g{i}", str(i)) for i in range(1, 8)]
        performers += [self.performer(f"l{i}", str(-i)) for i in range(1, 8)]

        gainers, losers = rank_performers(performers)

        assert [p.name for p in gainers] == ["g7", "g6", "g5", "g4", "g3"]
        assert [p.name for p in losers] == ["l7", "l6", "l5", "l4", "l3"]

    def test_break_even_in_neither(self):
        gainers, losers = rank_performers([self.performer("flat", "0")])
        assert gainers == []
        assert losers == []
