# backend/wealthtrack/services/constants.py
"""
Centralized constants for the valuation engine.

Usage:
    from wealthtrack.services.constants import (
        CALENDAR_DAYS_PER_YEAR,
        IDX_LOT_SIZE,
        TOP_PERFORMERS_LIMIT,
    )
"""

from decimal import Decimal


# =============================================================================
# CURRENCIES
# =============================================================================

CURRENCY_USD: str = "USD"
CURRENCY_IDR: str = "IDR"

# Currency reported for non-market assets whose purchase currency is blank
ASSET_FALLBACK_CURRENCY: str = CURRENCY_USD


# =============================================================================
# FINANCIAL CALENDAR
# =============================================================================

# Used for annualizing returns
CALENDAR_DAYS_PER_YEAR: int = 365

# Assets bought "today" still count as held for one day
MIN_HOLDING_PERIOD_DAYS: int = 1


# =============================================================================
# JAKARTA STOCK EXCHANGE (IDX)
# =============================================================================

# Shares per lot. IDX holdings are recorded in lots.
IDX_LOT_SIZE: int = 100

# Yahoo Finance suffix for IDX listings
IDX_SUFFIX: str = ".JK"

# Known IDX tickers. Only these get the suffix rewrite and lot multiplier.
IDX_TICKERS: frozenset[str] = frozenset({
    "BBRI", "BBCA", "BMRI", "BBNI", "BRIS",
    "TLKM", "ASII", "UNVR", "HMSP", "GGRM",
    "ICBP", "INDF", "KLBF", "PGAS", "SMGR",
    "ANTM", "PTBA", "ADRO", "ITMG", "INCO",
    "EXCL", "ISAT", "TOWR", "MNCN", "SIDO",
    "EMTK", "BUKA", "GOTO", "ACES", "MDKA",
})


# =============================================================================
# CACHE
# =============================================================================

# Backends replace a non-positive TTL with this instead of "never expire"
DEFAULT_CACHE_TTL_SECONDS: int = 24 * 60 * 60

# Spot price TTL used when the configured value is non-positive
DEFAULT_PRICE_TTL_SECONDS: int = 60

# Charts are heavier and change slowly
DEFAULT_CHART_TTL_SECONDS: int = 15 * 60


# =============================================================================
# CHARTS
# =============================================================================

MAX_CHART_POINTS: int = 200

# CoinGecko's OHLC endpoint accepts at most a year
MAX_OHLC_DAYS: int = 365


# =============================================================================
# PERFORMANCE
# =============================================================================

# Percent values are rounded to this precision for presentation and ranking
PERCENT_QUANTUM: Decimal = Decimal("0.01")

# Size of the gainers and losers lists
TOP_PERFORMERS_LIMIT: int = 5
