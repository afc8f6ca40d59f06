# backend/wealthtrack/services/market_data/client.py
"""
Market price client: cached quotes, FX rates and charts.

This is the single entry point the rest of the engine uses for market data.
It normalizes symbols and currencies, consults the price cache, calls the
right provider on a miss and stores the result.

Cache keys (namespaces never collide):
    crypto:{SYM}:{CUR}                      spot crypto   (price TTL)
    stock:{SYM}:{CUR}                       spot stock    (price TTL)
    fx:{FROM}:{TO}                          FX rate       (price TTL)
    history:crypto:{SYM}:{CUR}:{DD-MM-YYYY} daily crypto  (chart TTL)
    ohlcv:crypto:{SYM}:{CUR}:{DAYS}         crypto OHLC   (chart TTL)
    chart:crypto:{SYM}:{CUR}:{DAYS}         crypto chart  (chart TTL)
    chart:stock:{YAHOO_SYM}:{RANGE}:{INT}   stock chart   (chart TTL)

Cached values are the JSON form of the schemas in
`wealthtrack.schemas.market_data`. An entry that no longer decodes is
treated as a miss and overwritten.

Errors from providers propagate unchanged; there are no retries.
"""

import datetime as dt
import logging
from decimal import Decimal
from typing import TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from wealthtrack.models import AssetType
from wealthtrack.schemas.market_data import (
    ChartSeries,
    OHLCVCandle,
    OHLCVSeries,
    PriceQuote,
)
from wealthtrack.services.cache import CacheMiss, PriceCache
from wealthtrack.services.constants import (
    DEFAULT_CHART_TTL_SECONDS,
    DEFAULT_PRICE_TTL_SECONDS,
    MAX_CHART_POINTS,
    MAX_OHLC_DAYS,
)
from wealthtrack.services.exceptions import (
    InvalidChartParameterError,
    MarketDataError,
    UnsupportedAssetTypeError,
)
from wealthtrack.services.market_data.charts import downsample
from wealthtrack.services.market_data.coingecko import CoinGeckoProvider, history_date
from wealthtrack.services.market_data.yahoo import YahooChartProvider

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class MarketPriceClient:
    """
    Cached access to crypto and stock prices.

    Example:
        client = MarketPriceClient(cache, coingecko, yahoo, default_currency="IDR")
        quote = client.get_stock_price("BBCA")          # IDR, BBCA.JK upstream
        quote = client.get_crypto_price("btc", "usd")   # normalized to BTC/USD
    """

    def __init__(
            self,
            cache: PriceCache,
            crypto_provider: CoinGeckoProvider,
            stock_provider: YahooChartProvider,
            price_ttl: float = DEFAULT_PRICE_TTL_SECONDS,
            chart_ttl: float = DEFAULT_CHART_TTL_SECONDS,
            max_chart_points: int = MAX_CHART_POINTS,
            default_currency: str = "IDR",
    ) -> None:
        self._cache = cache
        self._crypto = crypto_provider
        self._stock = stock_provider
        self._price_ttl = price_ttl if price_ttl > 0 else DEFAULT_PRICE_TTL_SECONDS
        self._chart_ttl = chart_ttl if chart_ttl > 0 else DEFAULT_CHART_TTL_SECONDS
        self._max_chart_points = max_chart_points
        self._default_currency = default_currency.strip().upper()

    @property
    def default_currency(self) -> str:
        return self._default_currency

    def close(self) -> None:
        self._crypto.close()
        self._stock.close()
        self._cache.close()

    # =========================================================================
    # SPOT PRICES
    # =========================================================================

    def get_price(
            self,
            asset_type: AssetType,
            symbol: str,
            currency: str | None = None,
    ) -> PriceQuote:
        """
        Dispatch a spot lookup on asset type.

        Raises:
            UnsupportedAssetTypeError: Type other than CRYPTO or STOCK
            MarketDataError: From the provider
        """
        if asset_type == AssetType.CRYPTO:
            return self.get_crypto_price(symbol, currency)
        if asset_type == AssetType.STOCK:
            return self.get_stock_price(symbol, currency)
        raise UnsupportedAssetTypeError(getattr(asset_type, "value", str(asset_type)))

    def get_crypto_price(self, symbol: str, currency: str | None = None) -> PriceQuote:
        """Current crypto price from CoinGecko, cached for the price TTL."""
        symbol = _normalize_symbol(symbol)
        currency = self._currency(currency)
        self._crypto.coin_id(symbol)

        key = f"crypto:{symbol}:{currency}"
        cached = self._read(key, PriceQuote)
        if cached is not None:
            return cached

        price = self._crypto.get_spot_price(symbol, currency)
        quote = PriceQuote(
            symbol=symbol,
            price=price,
            currency=currency,
            source=self._crypto.name,
            fetched_at=_utcnow(),
        )
        logger.info(f"Fetched crypto price {symbol}={price} {currency}")
        self._write(key, quote, self._price_ttl)
        return quote

    def get_stock_price(self, symbol: str, currency: str | None = None) -> PriceQuote:
        """
        Current stock price from Yahoo, converted to `currency` when needed.

        If the FX conversion fails the quote comes back in the exchange's
        own currency and is not cached; callers must check `quote.currency`.
        """
        symbol = _normalize_symbol(symbol)
        currency = self._currency(currency)

        key = f"stock:{symbol}:{currency}"
        cached = self._read(key, PriceQuote)
        if cached is not None:
            return cached

        price, source_currency = self._stock.get_quote(symbol)
        if not source_currency:
            logger.info(f"Yahoo reported no currency for {symbol}; assuming {currency}")
            source_currency = currency

        if source_currency != currency:
            try:
                rate = self.get_fx_rate(source_currency, currency)
            except MarketDataError as e:
                logger.warning(
                    f"FX {source_currency}->{currency} unavailable for {symbol}, "
                    f"returning price in {source_currency}: {e}"
                )
                return PriceQuote(
                    symbol=symbol,
                    price=price,
                    currency=source_currency,
                    source=self._stock.name,
                    fetched_at=_utcnow(),
                )
            price = price * rate

        quote = PriceQuote(
            symbol=symbol,
            price=price,
            currency=currency,
            source=self._stock.name,
            fetched_at=_utcnow(),
        )
        logger.info(f"Fetched stock price {symbol}={price} {currency}")
        self._write(key, quote, self._price_ttl)
        return quote

    def get_fx_rate(self, from_currency: str, to_currency: str) -> Decimal:
        """Units of `to_currency` per `from_currency`; 1 for an identity pair."""
        from_currency = _normalize_symbol(from_currency)
        to_currency = _normalize_symbol(to_currency)
        if from_currency == to_currency:
            return Decimal("1")

        key = f"fx:{from_currency}:{to_currency}"
        cached = self._read(key, PriceQuote)
        if cached is not None:
            return cached.price

        rate = self._stock.get_fx_rate(from_currency, to_currency)
        self._write(
            key,
            PriceQuote(
                symbol=f"{from_currency}{to_currency}",
                price=rate,
                currency=to_currency,
                source=self._stock.name,
                fetched_at=_utcnow(),
            ),
            self._price_ttl,
        )
        logger.debug(f"Fetched FX rate {from_currency}->{to_currency}={rate}")
        return rate

    # =========================================================================
    # HISTORY
    # =========================================================================

    def get_historical_crypto_price(
            self,
            symbol: str,
            at: dt.datetime,
            currency: str | None = None,
    ) -> PriceQuote:
        """Crypto price on the UTC day of `at`; `fetched_at` is `at`."""
        symbol = _normalize_symbol(symbol)
        currency = self._currency(currency)
        self._crypto.coin_id(symbol)

        key = f"history:crypto:{symbol}:{currency}:{history_date(at)}"
        cached = self._read(key, PriceQuote)
        if cached is not None:
            return cached

        price = self._crypto.get_historical_price(symbol, currency, at)
        quote = PriceQuote(
            symbol=symbol,
            price=price,
            currency=currency,
            source=self._crypto.name,
            fetched_at=at,
        )
        self._write(key, quote, self._chart_ttl)
        return quote

    def get_crypto_ohlcv(
            self,
            symbol: str,
            start: dt.datetime,
            end: dt.datetime,
            currency: str | None = None,
    ) -> list[OHLCVCandle]:
        """
        OHLC candles covering `start`..`end`.

        The window is requested as a whole number of days (1..365) and the
        provider's candles are returned as-is, without trimming to the range.
        """
        symbol = _normalize_symbol(symbol)
        currency = self._currency(currency)
        self._crypto.coin_id(symbol)
        days = ohlc_days(start, end)

        key = f"ohlcv:crypto:{symbol}:{currency}:{days}"
        cached = self._read(key, OHLCVSeries)
        if cached is not None:
            return list(cached.candles)

        candles = self._crypto.get_ohlc(symbol, currency, days)
        self._write(key, OHLCVSeries(candles=candles), self._chart_ttl)
        return candles

    # =========================================================================
    # CHARTS
    # =========================================================================

    def get_crypto_chart(
            self,
            symbol: str,
            currency: str | None = None,
            days: int = 7,
    ) -> ChartSeries:
        """Downsampled crypto price chart for the last `days` days."""
        if days < 1:
            raise InvalidChartParameterError("days", days, "a positive integer")
        symbol = _normalize_symbol(symbol)
        currency = self._currency(currency)
        self._crypto.coin_id(symbol)

        key = f"chart:crypto:{symbol}:{currency}:{days}"
        cached = self._read(key, ChartSeries)
        if cached is not None:
            return cached

        points = self._crypto.get_market_chart(symbol, currency, days)
        series = ChartSeries(
            symbol=symbol,
            currency=currency,
            data=downsample(points, self._max_chart_points),
        )
        logger.info(f"Fetched crypto chart {symbol}/{currency} {days}d: {len(points)} -> {len(series.data)} points")
        self._write(key, series, self._chart_ttl)
        return series

    def get_stock_chart(
            self,
            symbol: str,
            range_: str = "1mo",
            interval: str = "1d",
    ) -> ChartSeries:
        """
        Downsampled stock close-price chart.

        The series is in the currency Yahoo reports, falling back to the
        default currency when none is reported. No FX conversion is applied.
        """
        symbol = _normalize_symbol(symbol)
        yahoo_symbol = self._stock.provider_symbol(symbol)

        key = f"chart:stock:{yahoo_symbol}:{range_}:{interval}"
        cached = self._read(key, ChartSeries)
        if cached is not None:
            return cached

        currency, points = self._stock.get_chart(symbol, range_, interval)
        series = ChartSeries(
            symbol=symbol,
            currency=currency or self._default_currency,
            data=downsample(points, self._max_chart_points),
        )
        logger.info(f"Fetched stock chart {yahoo_symbol} {range_}/{interval}: {len(points)} -> {len(series.data)} points")
        self._write(key, series, self._chart_ttl)
        return series

    # =========================================================================
    # CACHE HELPERS
    # =========================================================================

    def _currency(self, currency: str | None) -> str:
        currency = (currency or "").strip().upper()
        return currency or self._default_currency

    def _read(self, key: str, model: type[M]) -> M | None:
        try:
            raw = self._cache.get(key)
        except CacheMiss:
            logger.debug(f"cache miss {key}")
            return None

        try:
            value = model.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Discarding corrupt cache entry {key}: {e.error_count()} error(s)")
            return None

        logger.debug(f"cache hit {key}")
        return value

    def _write(self, key: str, value: BaseModel, ttl: float) -> None:
        self._cache.set(key, value.model_dump_json().encode(), ttl)


def ohlc_days(start: dt.datetime, end: dt.datetime) -> int:
    """Whole days spanned by start..end, plus one, clamped to 1..365."""
    days = (end - start).days + 1
    return max(1, min(days, MAX_OHLC_DAYS))


def _normalize_symbol(value: str) -> str:
    return (value or "").strip().upper()


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)
