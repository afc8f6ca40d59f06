# backend/wealthtrack/services/__init__.py
"""
Service layer for valuation and performance.

Services:
- Have NO knowledge of HTTP (no status codes)
- Raise domain-specific exceptions (see exceptions.py)
- Receive repositories and clients through their constructors

Usage:
    from wealthtrack.services import PortfolioService, PerformanceService
    from wealthtrack.services import MarketPriceClient
    from wealthtrack.services import AssetNotFoundError, MarketDataError

Architecture:
    services/
    ├── exceptions.py      # Domain exceptions
    ├── constants.py       # Business constants
    ├── protocols.py       # Repository / client interfaces
    ├── cache/             # Price cache (memory, redis)
    ├── market_data/       # Providers, MarketPriceClient, downsampling
    ├── valuation/         # ValuationResolver and pricing policies
    ├── performance/       # PerformanceCalculator and advisory text
    └── portfolio/         # Aggregator, PortfolioService, PerformanceService
"""

from wealthtrack.services.exceptions import (
    AssetNotFoundError,
    InvalidChartParameterError,
    MarketDataError,
    NotFoundError,
    ProviderUnavailableError,
    QuoteNotFoundError,
    RateLimitError,
    ServiceError,
    UnsupportedAssetTypeError,
    UnsupportedSymbolError,
    ValidationError,
)
from wealthtrack.services.market_data import MarketPriceClient
from wealthtrack.services.performance import PerformanceCalculator
from wealthtrack.services.portfolio import (
    PerformanceService,
    PortfolioAggregator,
    PortfolioService,
)
from wealthtrack.services.valuation import PriceSource, ValuationResolver

__all__ = [
    # Services
    "MarketPriceClient",
    "ValuationResolver",
    "PerformanceCalculator",
    "PortfolioAggregator",
    "PortfolioService",
    "PerformanceService",
    "PriceSource",
    # Exceptions
    "ServiceError",
    "ValidationError",
    "InvalidChartParameterError",
    "NotFoundError",
    "AssetNotFoundError",
    "MarketDataError",
    "UnsupportedSymbolError",
    "ProviderUnavailableError",
    "RateLimitError",
    "QuoteNotFoundError",
    "UnsupportedAssetTypeError",
]
