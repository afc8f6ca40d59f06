# backend/tests/services/test_yahoo_chart_provider.py
"""
Tests for the YahooChartProvider.

This module tests:
- IDX ticker rewrite to the .JK listing
- Quote and FX parsing from chart meta
- Chart parsing, null closes and parameter validation
- Chart error objects and empty results

Note: HTTP is served by httpx.MockTransport; no network access.
"""

from decimal import Decimal

import httpx
import pytest

from wealthtrack.services.exceptions import (
    InvalidChartParameterError,
    ProviderUnavailableError,
    QuoteNotFoundError,
    ValidationError,
)
from wealthtrack.services.market_data import YahooChartProvider

BASE_URL = "https://query1.finance.yahoo.test"


def chart_body(meta: dict | None = None, timestamps=None, closes=None) -> dict:
    result: dict = {"meta": meta or {}}
    if timestamps is not None:
        result["timestamp"] = timestamps
    if closes is not None:
        result["indicators"] = {"quote": [{"close": closes}]}
    return {"chart": {"result": [result], "error": None}}


def raw_chart(meta_json: str) -> str:
    """Chart body with hand-written meta JSON (NaN / Infinity literals)."""
    return '{"chart": {"result": [{"meta": ' + meta_json + '}], "error": null}}'


@pytest.fixture
def provider(http_client):
    return YahooChartProvider(BASE_URL, client=http_client)


# =============================================================================
# SYMBOLS
# =============================================================================

class TestProviderSymbol:

    @pytest.mark.parametrize("symbol,expected", [
        ("BBRI", "BBRI.JK"),
        ("bbca", "BBCA.JK"),
        ("TLKM", "TLKM.JK"),
        ("AAPL", "AAPL"),
        ("MSFT", "MSFT"),
    ])
    def test_rewrite(self, symbol, expected):
        assert YahooChartProvider.provider_symbol(symbol) == expected

    def test_provider_name(self, provider):
        assert provider.name == "yahoo"


# =============================================================================
# QUOTES
# =============================================================================

class TestQuote:

    def test_idx_quote_uses_jk_suffix(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/BBRI.JK",
            httpx.Response(200, json=chart_body({"regularMarketPrice": 4550, "currency": "IDR"})),
        )

        price, currency = provider.get_quote("BBRI")

        assert price == Decimal("4550")
        assert currency == "IDR"
        params = http_handler.requests[0].url.params
        assert params["interval"] == "1d"
        assert params["range"] == "1d"

    def test_user_agent_sent(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/AAPL",
            httpx.Response(200, json=chart_body({"regularMarketPrice": 190.12, "currency": "USD"})),
        )
        provider.get_quote("AAPL")
        assert http_handler.requests[0].headers["User-Agent"].startswith("Mozilla")

    def test_blank_currency_returned_empty(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/AAPL",
            httpx.Response(200, json=chart_body({"regularMarketPrice": 190.12})),
        )
        price, currency = provider.get_quote("AAPL")
        assert price == Decimal("190.12")
        assert currency == ""

    def test_missing_price(self, provider, http_handler):
        http_handler.route("/v8/finance/chart/AAPL", httpx.Response(200, json=chart_body({"currency": "USD"})))
        with pytest.raises(QuoteNotFoundError):
            provider.get_quote("AAPL")

    def test_chart_error_object(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/NOPE",
            httpx.Response(200, json={"chart": {
                "result": None,
                "error": {"code": "Not Found", "description": "No data found, symbol may be delisted"},
            }}),
        )
        with pytest.raises(QuoteNotFoundError, match="delisted"):
            provider.get_quote("NOPE")

    def test_empty_result(self, provider, http_handler):
        http_handler.route("/v8/finance/chart/AAPL", httpx.Response(200, json={"chart": {"result": []}}))
        with pytest.raises(QuoteNotFoundError, match="empty result"):
            provider.get_quote("AAPL")

    def test_missing_chart_is_malformed(self, provider, http_handler):
        http_handler.route("/v8/finance/chart/AAPL", httpx.Response(200, json={"finance": {}}))
        with pytest.raises(ProviderUnavailableError, match="malformed"):
            provider.get_quote("AAPL")

    def test_unknown_symbol_404(self, provider, http_handler):
        with pytest.raises(ProviderUnavailableError) as exc_info:
            provider.get_quote("AAPL")
        assert exc_info.value.status_code == 404

    def test_non_finite_price(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/AAPL",
            httpx.Response(200, text=raw_chart('{"currency": "USD", "regularMarketPrice": Infinity}')),
        )
        with pytest.raises(QuoteNotFoundError):
            provider.get_quote("AAPL")

    @pytest.mark.parametrize("result", [{"x": 1}, "AAPL", 7])
    def test_result_not_a_list_is_malformed(self, provider, http_handler, result):
        http_handler.route("/v8/finance/chart/AAPL", httpx.Response(200, json={"chart": {"result": result}}))
        with pytest.raises(ProviderUnavailableError, match="malformed"):
            provider.get_quote("AAPL")


# =============================================================================
# FX
# =============================================================================

class TestFxRate:

    def test_pair_symbol(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/USDIDR=X",
            httpx.Response(200, json=chart_body({"regularMarketPrice": 16250.5})),
        )
        assert provider.get_fx_rate("usd", "idr") == Decimal("16250.5")

    @pytest.mark.parametrize("meta", [{}, {"regularMarketPrice": 0}, {"regularMarketPrice": -1}])
    def test_missing_or_non_positive_rate(self, provider, http_handler, meta):
        http_handler.route("/v8/finance/chart/USDIDR=X", httpx.Response(200, json=chart_body(meta)))
        with pytest.raises(QuoteNotFoundError):
            provider.get_fx_rate("USD", "IDR")

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_rate(self, provider, http_handler, literal):
        http_handler.route(
            "/v8/finance/chart/USDIDR=X",
            httpx.Response(200, text=raw_chart(f'{{"regularMarketPrice": {literal}}}')),
        )
        with pytest.raises(QuoteNotFoundError):
            provider.get_fx_rate("USD", "IDR")


# =============================================================================
# CHARTS
# =============================================================================

class TestChart:

    def test_pairs_timestamps_with_closes(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/AAPL",
            httpx.Response(200, json=chart_body(
                {"currency": "USD"},
                timestamps=[1704067200, 1704153600, 1704240000],
                closes=[185.5, None, 187.25],
            )),
        )

        currency, points = provider.get_chart("AAPL", "1mo", "1d")

        assert currency == "USD"
        assert [p.t for p in points] == [1704067200, 1704240000]
        assert points[1].p == Decimal("187.25")
        params = http_handler.requests[0].url.params
        assert params["range"] == "1mo"
        assert params["interval"] == "1d"

    def test_shorter_array_bounds_pairs(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/AAPL",
            httpx.Response(200, json=chart_body({}, timestamps=[1, 2, 3], closes=[10, 11])),
        )
        _, points = provider.get_chart("AAPL", "5d", "1d")
        assert len(points) == 2

    def test_no_closes(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/AAPL",
            httpx.Response(200, json=chart_body({}, timestamps=[1, 2])),
        )
        with pytest.raises(QuoteNotFoundError):
            provider.get_chart("AAPL", "5d", "1d")

    @pytest.mark.parametrize("range_,interval,field", [
        ("2w", "1d", "range"),
        ("1mo", "7d", "interval"),
    ])
    def test_invalid_parameters_rejected_without_request(self, provider, http_handler, range_, interval, field):
        with pytest.raises(InvalidChartParameterError) as exc_info:
            provider.get_chart("AAPL", range_, interval)

        assert exc_info.value.field == field
        assert isinstance(exc_info.value, ValidationError)
        assert http_handler.requests == []

    def test_non_finite_closes_skipped(self, provider, http_handler):
        http_handler.route(
            "/v8/finance/chart/AAPL",
            httpx.Response(200, text=(
                '{"chart": {"result": [{"meta": {"currency": "USD"}, "timestamp": [1, 2, 3],'
                ' "indicators": {"quote": [{"close": [10.5, NaN, 11]}]}}], "error": null}}'
            )),
        )

        _, points = provider.get_chart("AAPL", "5d", "1d")

        assert [p.t for p in points] == [1, 3]

    @pytest.mark.parametrize("result", [
        {"meta": {}, "timestamp": [1], "indicators": {"quote": {"close": [10]}}},
        {"meta": {}, "timestamp": [1], "indicators": {"quote": [{"close": {"0": 10}}]}},
        {"meta": {}, "timestamp": {"0": 1}, "indicators": {"quote": [{"close": [10]}]}},
    ])
    def test_non_list_series_is_malformed(self, provider, http_handler, result):
        http_handler.route(
            "/v8/finance/chart/AAPL",
            httpx.Response(200, json={"chart": {"result": [result], "error": None}}),
        )
        with pytest.raises(ProviderUnavailableError, match="malformed"):
            provider.get_chart("AAPL", "5d", "1d")
