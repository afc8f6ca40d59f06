# backend/wealthtrack/schemas/__init__.py
"""
Pydantic schemas for the engine's public results.

- market_data: Quotes, candles and charts (also the cache wire format)
- valuation: Asset and portfolio value responses
- performance: Asset and portfolio performance responses

Usage:
    from wealthtrack.schemas import PriceQuote, ChartSeries
    from wealthtrack.schemas import PortfolioValueResponse
    from wealthtrack.schemas import AssetPerformanceResponse
"""

# market_data must load first: the service layer imports it during the
# valuation/performance imports below
from wealthtrack.schemas.market_data import (
    ChartPoint,
    ChartSeries,
    OHLCVCandle,
    OHLCVSeries,
    PriceQuote,
)
from wealthtrack.schemas.performance import (
    AssetPerformanceResponse,
    AssetTypeAllocationSchema,
    PerformerSummarySchema,
    PortfolioPerformanceResponse,
)
from wealthtrack.schemas.valuation import (
    AssetValueResponse,
    PortfolioValueResponse,
    ValuationDetail,
)

__all__ = [
    # Market data
    "ChartPoint",
    "ChartSeries",
    "OHLCVCandle",
    "OHLCVSeries",
    "PriceQuote",
    # Valuation
    "AssetValueResponse",
    "PortfolioValueResponse",
    "ValuationDetail",
    # Performance
    "AssetPerformanceResponse",
    "AssetTypeAllocationSchema",
    "PerformerSummarySchema",
    "PortfolioPerformanceResponse",
]
