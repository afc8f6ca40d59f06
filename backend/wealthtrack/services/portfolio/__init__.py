# backend/wealthtrack/services/portfolio/__init__.py
"""
Portfolio package.

Usage:
    from wealthtrack.services.portfolio import PortfolioService, PerformanceService

Architecture:
    portfolio/
    ├── types.py       # PortfolioValue, PortfolioPerformance, ...
    ├── aggregator.py  # Concurrent fan-out + roll-ups
    └── service.py     # Outward operations
"""

from wealthtrack.services.portfolio.aggregator import PortfolioAggregator, rank_performers
from wealthtrack.services.portfolio.service import PerformanceService, PortfolioService
from wealthtrack.services.portfolio.types import (
    AssetTypeAllocation,
    PerformerSummary,
    PortfolioOverview,
    PortfolioPerformance,
    PortfolioValue,
    StatusSummary,
)

__all__ = [
    "PortfolioAggregator",
    "rank_performers",
    "PortfolioService",
    "PerformanceService",
    "AssetTypeAllocation",
    "PerformerSummary",
    "PortfolioOverview",
    "PortfolioPerformance",
    "PortfolioValue",
    "StatusSummary",
]
