# backend/wealthtrack/services/market_data/yahoo.py
"""
Yahoo Finance chart API provider for stock quotes, FX rates and charts.

Everything goes through one endpoint, `/v8/finance/chart/{symbol}`:
- spot quote:  ?interval=1d&range=1d  -> meta.regularMarketPrice, meta.currency
- FX rate:     same, with the synthetic symbol "{FROM}{TO}=X"
- chart:       ?range=..&interval=.. -> timestamp[] + indicators.quote[0].close[]

Jakarta (IDX) tickers are listed by Yahoo with a ".JK" suffix; the rewrite
happens here so callers always work with the bare ticker.

Limitations:
- Unofficial API, requires a browser-like User-Agent
- Data may be delayed 15-20 minutes for some markets
"""

import logging
from decimal import Decimal
from typing import Any

import httpx

from wealthtrack.schemas.market_data import ChartPoint
from wealthtrack.services.constants import IDX_SUFFIX, IDX_TICKERS
from wealthtrack.services.exceptions import (
    InvalidChartParameterError,
    QuoteNotFoundError,
)
from wealthtrack.services.market_data.base import QuoteProvider, to_decimal

logger = logging.getLogger(__name__)


VALID_RANGES: frozenset[str] = frozenset({
    "1d", "5d", "1mo", "3mo", "6mo", "1y", "2y", "5y", "10y", "ytd", "max",
})

VALID_INTERVALS: frozenset[str] = frozenset({
    "1m", "2m", "5m", "15m", "30m", "60m", "90m", "1h",
    "1d", "5d", "1wk", "1mo", "3mo",
})


class YahooChartProvider(QuoteProvider):
    """
    Yahoo Finance implementation of QuoteProvider.

    Example:
        provider = YahooChartProvider("https://query1.finance.yahoo.com", client)
        price, currency = provider.get_quote("BBCA")   # fetches BBCA.JK
    """

    def __init__(self, base_url: str, client: httpx.Client | None = None) -> None:
        super().__init__(
            base_url,
            client=client,
            headers={"Accept": "application/json", "User-Agent": "Mozilla/5.0"},
        )

    @property
    def name(self) -> str:
        return "yahoo"

    @staticmethod
    def provider_symbol(symbol: str) -> str:
        """Bare ticker to Yahoo symbol ("BBRI" -> "BBRI.JK", "AAPL" -> "AAPL")."""
        symbol = symbol.strip().upper()
        if symbol in IDX_TICKERS:
            return f"{symbol}{IDX_SUFFIX}"
        return symbol

    # =========================================================================
    # QUOTES
    # =========================================================================

    def get_quote(self, symbol: str) -> tuple[Decimal, str]:
        """
        Latest market price and the currency Yahoo reports it in.

        The currency may be blank for some instruments; callers decide what
        to assume in that case.

        Raises:
            QuoteNotFoundError: Chart error object, empty result, no price
            ProviderUnavailableError: Transport, status or body failure
        """
        yahoo_symbol = self.provider_symbol(symbol)
        result = self._chart_result(yahoo_symbol, {"interval": "1d", "range": "1d"})

        meta = result.get("meta")
        if not isinstance(meta, dict):
            raise self._malformed(yahoo_symbol, "missing 'meta'")

        price = to_decimal(meta.get("regularMarketPrice"))
        if price is None:
            raise QuoteNotFoundError(yahoo_symbol, self.name, detail="no regularMarketPrice")

        currency = str(meta.get("currency") or "").strip().upper()
        return price, currency

    def get_fx_rate(self, from_currency: str, to_currency: str) -> Decimal:
        """Units of `to_currency` per one `from_currency`."""
        fx_symbol = f"{from_currency.upper()}{to_currency.upper()}=X"
        result = self._chart_result(fx_symbol, {"interval": "1d", "range": "1d"})

        meta = result.get("meta") if isinstance(result.get("meta"), dict) else {}
        rate = to_decimal(meta.get("regularMarketPrice"))
        if rate is None or rate <= 0:
            raise QuoteNotFoundError(fx_symbol, self.name, detail="no exchange rate")
        return rate

    # =========================================================================
    # CHARTS
    # =========================================================================

    def get_chart(self, symbol: str, range_: str, interval: str) -> tuple[str, list[ChartPoint]]:
        """
        Close-price series for `symbol`.

        Returns:
            (reported currency, points oldest first). Null closes are skipped;
            timestamps and closes are paired up to the shorter array.

        Raises:
            InvalidChartParameterError: Unknown range or interval
        """
        if range_ not in VALID_RANGES:
            raise InvalidChartParameterError("range", range_, ", ".join(sorted(VALID_RANGES)))
        if interval not in VALID_INTERVALS:
            raise InvalidChartParameterError("interval", interval, ", ".join(sorted(VALID_INTERVALS)))

        yahoo_symbol = self.provider_symbol(symbol)
        result = self._chart_result(yahoo_symbol, {"range": range_, "interval": interval})

        meta = result.get("meta") if isinstance(result.get("meta"), dict) else {}
        currency = str(meta.get("currency") or "").strip().upper()

        timestamps = result.get("timestamp") or []
        indicators = result.get("indicators") or {}
        quotes = indicators.get("quote") if isinstance(indicators, dict) else None
        if quotes is not None and not isinstance(quotes, list):
            raise self._malformed(yahoo_symbol, "'indicators.quote' is not a list")
        if not quotes or not isinstance(quotes[0], dict) or not quotes[0].get("close"):
            raise QuoteNotFoundError(yahoo_symbol, self.name, detail="no close prices")
        closes = quotes[0]["close"]
        if not isinstance(timestamps, list) or not isinstance(closes, list):
            raise self._malformed(yahoo_symbol, "'timestamp' and 'close' must be lists")

        points: list[ChartPoint] = []
        for ts, close in zip(timestamps, closes):
            price = to_decimal(close)
            if ts is None or price is None:
                continue
            points.append(ChartPoint(t=int(ts), p=price))
        return currency, points

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _chart_result(self, yahoo_symbol: str, params: dict[str, str]) -> dict[str, Any]:
        """Fetch the chart endpoint and return `chart.result[0]`."""
        payload = self._get_json(
            f"/v8/finance/chart/{yahoo_symbol}",
            params=params,
            symbol=yahoo_symbol,
        )
        chart = payload.get("chart") if isinstance(payload, dict) else None
        if not isinstance(chart, dict):
            raise self._malformed(yahoo_symbol, "missing 'chart'")

        error = chart.get("error")
        if error:
            description = error.get("description") if isinstance(error, dict) else str(error)
            raise QuoteNotFoundError(yahoo_symbol, self.name, detail=description)

        results = chart.get("result")
        if results is not None and not isinstance(results, list):
            raise self._malformed(yahoo_symbol, "'chart.result' is not a list")
        if not results or not isinstance(results[0], dict):
            raise QuoteNotFoundError(yahoo_symbol, self.name, detail="empty result")
        return results[0]
