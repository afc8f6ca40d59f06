# backend/wealthtrack/services/market_data/coingecko.py
"""
CoinGecko provider for crypto spot prices, history, OHLC and charts.

Endpoints used (all GET, JSON):
    /simple/price?ids={id}&vs_currencies={cur}
    /coins/{id}/history?date=dd-mm-yyyy&localization=false
    /coins/{id}/ohlc?vs_currency={cur}&days={n}
    /coins/{id}/market_chart?vs_currency={cur}&days={n}

Tickers are mapped to CoinGecko coin ids through a static table. An unmapped
ticker is a caller error and raises UnsupportedSymbolError before any request.
"""

import datetime as dt
import logging
from decimal import Decimal
from typing import Any

import httpx

from wealthtrack.schemas.market_data import ChartPoint, OHLCVCandle
from wealthtrack.services.exceptions import (
    QuoteNotFoundError,
    UnsupportedSymbolError,
)
from wealthtrack.services.market_data.base import QuoteProvider, to_decimal

logger = logging.getLogger(__name__)


CRYPTO_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "USDT": "tether",
    "BNB": "binancecoin",
    "XRP": "ripple",
    "ADA": "cardano",
    "DOGE": "dogecoin",
    "AVAX": "avalanche-2",
    "DOT": "polkadot",
    "MATIC": "matic-network",
    "LINK": "chainlink",
    "ATOM": "cosmos",
    "UNI": "uniswap",
    "LTC": "litecoin",
}

API_KEY_HEADER = "x-cg-demo-api-key"


class CoinGeckoProvider(QuoteProvider):
    """
    CoinGecko implementation of QuoteProvider.

    Example:
        provider = CoinGeckoProvider("https://api.coingecko.com/api/v3", client)
        price = provider.get_spot_price("BTC", "USD")
    """

    def __init__(
            self,
            base_url: str,
            client: httpx.Client | None = None,
            api_key: str | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers[API_KEY_HEADER] = api_key
        super().__init__(base_url, client=client, headers=headers)

    @property
    def name(self) -> str:
        return "coingecko"

    def coin_id(self, symbol: str) -> str:
        """Map a ticker to its CoinGecko coin id."""
        coin_id = CRYPTO_IDS.get(symbol.strip().upper())
        if coin_id is None:
            raise UnsupportedSymbolError(symbol, provider=self.name)
        return coin_id

    # =========================================================================
    # PRICES
    # =========================================================================

    def get_spot_price(self, symbol: str, currency: str) -> Decimal:
        """
        Current price of `symbol` in `currency`.

        Raises:
            UnsupportedSymbolError: Ticker not in CRYPTO_IDS
            QuoteNotFoundError: Coin or currency missing from the response
            ProviderUnavailableError: Transport, status or body failure
        """
        coin_id = self.coin_id(symbol)
        vs_currency = currency.lower()
        payload = self._get_json(
            "/simple/price",
            params={"ids": coin_id, "vs_currencies": vs_currency},
            symbol=symbol,
        )
        if not isinstance(payload, dict):
            raise self._malformed(symbol, "expected an object")

        coin_prices = payload.get(coin_id)
        if not isinstance(coin_prices, dict):
            raise QuoteNotFoundError(symbol, self.name, detail=f"coin '{coin_id}' absent")

        price = to_decimal(coin_prices.get(vs_currency))
        if price is None:
            raise QuoteNotFoundError(symbol, self.name, detail=f"no {currency} price")
        return price

    def get_historical_price(self, symbol: str, currency: str, at: dt.datetime) -> Decimal:
        """Price on the UTC calendar day of `at` (CoinGecko daily snapshot)."""
        coin_id = self.coin_id(symbol)
        payload = self._get_json(
            f"/coins/{coin_id}/history",
            params={"date": history_date(at), "localization": "false"},
            symbol=symbol,
        )
        if not isinstance(payload, dict):
            raise self._malformed(symbol, "expected an object")

        market_data = payload.get("market_data") or {}
        current_price = market_data.get("current_price") if isinstance(market_data, dict) else None
        if not isinstance(current_price, dict):
            raise QuoteNotFoundError(symbol, self.name, detail=f"no history on {history_date(at)}")

        price = to_decimal(current_price.get(currency.lower()))
        if price is None:
            raise QuoteNotFoundError(symbol, self.name, detail=f"no {currency} price on {history_date(at)}")
        return price

    # =========================================================================
    # SERIES
    # =========================================================================

    def get_ohlc(self, symbol: str, currency: str, days: int) -> list[OHLCVCandle]:
        """
        Candles for the last `days` days.

        Rows are `[timestamp_ms, open, high, low, close]`; short rows are
        skipped. CoinGecko reports no volume, so volume is zero.
        """
        coin_id = self.coin_id(symbol)
        rows = self._get_json(
            f"/coins/{coin_id}/ohlc",
            params={"vs_currency": currency.lower(), "days": days},
            symbol=symbol,
        )
        if not isinstance(rows, list):
            raise self._malformed(symbol, "expected a list of candles")

        candles: list[OHLCVCandle] = []
        for row in rows:
            if not isinstance(row, list) or len(row) < 5:
                continue
            values = [to_decimal(v) for v in row[:5]]
            if any(v is None for v in values):
                continue
            ts = _from_millis(values[0])
            candles.append(OHLCVCandle(
                symbol=symbol,
                time_open=ts,
                time_close=ts,
                open=values[1],
                high=values[2],
                low=values[3],
                close=values[4],
                currency=currency,
                source=self.name,
            ))
        return candles

    def get_market_chart(self, symbol: str, currency: str, days: int) -> list[ChartPoint]:
        """Price series from `market_chart.prices` as unix-second points."""
        coin_id = self.coin_id(symbol)
        payload = self._get_json(
            f"/coins/{coin_id}/market_chart",
            params={"vs_currency": currency.lower(), "days": days},
            symbol=symbol,
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("prices"), list):
            raise self._malformed(symbol, "missing 'prices'")

        points: list[ChartPoint] = []
        for pair in payload["prices"]:
            if not isinstance(pair, list) or len(pair) < 2:
                continue
            ms, price = to_decimal(pair[0]), to_decimal(pair[1])
            if ms is None or price is None:
                continue
            points.append(ChartPoint(t=int(ms) // 1000, p=price))
        return points


def history_date(at: dt.datetime) -> str:
    """CoinGecko history date format: dd-mm-yyyy of the UTC day."""
    if at.tzinfo is not None:
        at = at.astimezone(dt.timezone.utc)
    return at.strftime("%d-%m-%Y")


def _from_millis(value: Any) -> dt.datetime:
    return dt.datetime.fromtimestamp(int(value) / 1000, tz=dt.timezone.utc)
