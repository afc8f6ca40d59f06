# backend/wealthtrack/dependencies.py
"""
Dependency wiring.

Process-wide objects (cache, HTTP client, providers, price client) are
lazily created singletons, so the cache and connection pool are shared by
every request. Request-scoped services are built per Session.

Order matters: define dependencies before dependents
1. get_price_cache, get_http_client (no deps)
2. get_crypto_provider, get_stock_provider (depend on the HTTP client)
3. get_price_client (depends on all of the above)
4. build_* (depend on the price client and a Session)

Usage:
    from wealthtrack.database import session_scope
    from wealthtrack.dependencies import build_portfolio_service

    with session_scope() as db:
        portfolio = build_portfolio_service(db).get_portfolio_value(user_id=1)
"""

import logging
from functools import lru_cache

import httpx
from sqlalchemy.orm import Session

from wealthtrack.config import settings
from wealthtrack.repositories import (
    SqlAlchemyAssetRepository,
    SqlAlchemyPriceHistoryRepository,
)
from wealthtrack.services.cache import PriceCache, create_price_cache
from wealthtrack.services.market_data import (
    CoinGeckoProvider,
    MarketPriceClient,
    YahooChartProvider,
    build_http_client,
)
from wealthtrack.services.performance import PerformanceCalculator
from wealthtrack.services.portfolio import (
    PerformanceService,
    PortfolioAggregator,
    PortfolioService,
)
from wealthtrack.services.valuation import ValuationResolver

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETONS
# =============================================================================

@lru_cache(maxsize=1)
def get_price_cache() -> PriceCache:
    cache = create_price_cache(settings)
    logger.debug(f"Initializing singleton price cache ({cache.name})")
    return cache


@lru_cache(maxsize=1)
def get_http_client() -> httpx.Client:
    """Shared connection pool for all upstream providers."""
    return build_http_client(
        timeout=settings.http_timeout,
        connect_timeout=settings.http_connect_timeout,
    )


@lru_cache(maxsize=1)
def get_crypto_provider() -> CoinGeckoProvider:
    return CoinGeckoProvider(
        settings.crypto_price_api,
        client=get_http_client(),
        api_key=settings.crypto_price_api_key,
    )


@lru_cache(maxsize=1)
def get_stock_provider() -> YahooChartProvider:
    return YahooChartProvider(settings.stock_price_api, client=get_http_client())


@lru_cache(maxsize=1)
def get_price_client() -> MarketPriceClient:
    """
    Get the singleton MarketPriceClient.

    Every request shares its cache, so repeated lookups within the price TTL
    do not reach the upstream providers.
    """
    logger.debug("Initializing singleton MarketPriceClient")
    return MarketPriceClient(
        cache=get_price_cache(),
        crypto_provider=get_crypto_provider(),
        stock_provider=get_stock_provider(),
        price_ttl=settings.effective_price_cache_ttl,
        chart_ttl=settings.chart_cache_ttl,
        max_chart_points=settings.max_chart_points,
        default_currency=settings.default_currency,
    )


def close_singletons() -> None:
    """Release the shared HTTP client and cache (process shutdown)."""
    if get_price_client.cache_info().currsize:
        get_price_client().close()
    if get_http_client.cache_info().currsize:
        get_http_client().close()
    for factory in (
        get_price_client,
        get_stock_provider,
        get_crypto_provider,
        get_http_client,
        get_price_cache,
    ):
        factory.cache_clear()


# =============================================================================
# REQUEST-SCOPED BUILDERS
# =============================================================================

def build_resolver(db: Session) -> ValuationResolver:
    return ValuationResolver(get_price_client(), SqlAlchemyPriceHistoryRepository(db))


def build_aggregator(db: Session) -> PortfolioAggregator:
    return PortfolioAggregator(
        build_resolver(db),
        PerformanceCalculator(),
        max_workers=settings.valuation_max_workers,
        timeout=settings.portfolio_timeout,
    )


def build_portfolio_service(db: Session) -> PortfolioService:
    return PortfolioService(
        SqlAlchemyAssetRepository(db),
        build_resolver(db),
        build_aggregator(db),
        default_currency=settings.default_currency,
    )


def build_performance_service(db: Session) -> PerformanceService:
    return PerformanceService(
        SqlAlchemyAssetRepository(db),
        build_resolver(db),
        PerformanceCalculator(),
        build_aggregator(db),
        default_currency=settings.default_currency,
    )
