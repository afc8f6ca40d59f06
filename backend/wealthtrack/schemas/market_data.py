# backend/wealthtrack/schemas/market_data.py
"""
Pydantic schemas for market data.

These models are both the public response shapes of the price and chart
operations and the JSON wire format stored in the price cache:

    raw = quote.model_dump_json().encode()
    quote = PriceQuote.model_validate_json(raw)

Prices are Decimal end to end. Upstream JSON numbers are decoded straight
into Decimal at the HTTP boundary, so no float ever reaches these models.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# QUOTES
# =============================================================================

class PriceQuote(BaseModel):
    """A single upstream-reported price for a symbol in a currency."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., description="Symbol as requested (uppercase, no exchange suffix)")
    price: Decimal = Field(..., description="Price per unit in `currency`")
    currency: str = Field(..., description="ISO 4217 code; may be the source currency if FX failed")
    source: str = Field(..., description="Upstream identifier, e.g. 'coingecko' or 'yahoo'")
    fetched_at: dt.datetime = Field(..., description="When the quote was fetched (or the historical instant)")


class OHLCVCandle(BaseModel):
    """One OHLC candle. CoinGecko's OHLC endpoint does not report volume."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    time_open: dt.datetime
    time_close: dt.datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal = Decimal("0")
    currency: str
    source: str


class OHLCVSeries(BaseModel):
    """Cache envelope for a list of candles."""

    candles: list[OHLCVCandle] = Field(default_factory=list)


# =============================================================================
# CHARTS
# =============================================================================

class ChartPoint(BaseModel):
    """One line-chart point: unix seconds and price."""

    model_config = ConfigDict(frozen=True)

    t: int = Field(..., description="Unix timestamp in seconds")
    p: Decimal = Field(..., description="Price")


class ChartSeries(BaseModel):
    """Chart response for crypto and stock charts; data is oldest first."""

    symbol: str
    currency: str
    data: list[ChartPoint] = Field(default_factory=list)
