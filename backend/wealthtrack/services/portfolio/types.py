# backend/wealthtrack/services/portfolio/types.py
"""
Internal data types for portfolio-level results.

Type Hierarchy:
    PortfolioValue        - Every asset's value + currency-safe total
    AssetTypeAllocation   - Per-AssetType aggregate
    PerformerSummary      - One row of the gainers/losers lists
    StatusSummary         - Asset counts by lifecycle status
    PortfolioOverview     - Portfolio totals
    PortfolioPerformance  - Overview + allocation + performers + statuses
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from wealthtrack.models import AssetType
from wealthtrack.services.valuation.types import AssetValue


@dataclass(frozen=True)
class PortfolioValue:
    """
    Current value of every asset a user holds.

    Attributes:
        total_value: Sum of asset values whose currency equals `currency`
        currency: Requested currency
        assets: One AssetValue per asset, in repository order
        totals_by_currency: Subtotal for every currency present, so values
            in other currencies are reported rather than dropped
        fetched_at: When the valuation ran
    """

    total_value: Decimal
    currency: str
    assets: list[AssetValue]
    totals_by_currency: dict[str, Decimal]
    fetched_at: datetime


@dataclass
class AssetTypeAllocation:
    """Aggregate for one asset type; percentage and roi set in a second pass."""

    count: int = 0
    total_invested: Decimal = Decimal("0")
    current_value: Decimal = Decimal("0")
    profit_loss: Decimal = Decimal("0")
    percentage: Decimal = Decimal("0")
    roi: Decimal = Decimal("0")


@dataclass(frozen=True)
class PerformerSummary:
    uuid: str
    name: str
    type: AssetType
    profit_loss_percent: Decimal
    profit_loss: Decimal


@dataclass
class StatusSummary:
    active: int = 0
    sold: int = 0
    planned: int = 0


@dataclass(frozen=True)
class PortfolioOverview:
    total_invested: Decimal
    current_value: Decimal
    total_profit_loss: Decimal
    total_profit_loss_percent: Decimal
    total_roi: Decimal
    currency: str


@dataclass(frozen=True)
class PortfolioPerformance:
    """Portfolio-wide performance summary."""

    overview: PortfolioOverview
    asset_allocation: dict[str, AssetTypeAllocation]
    top_gainers: list[PerformerSummary]
    top_losers: list[PerformerSummary]
    status_summary: StatusSummary
    last_updated: datetime
    unavailable_assets: list[str] = field(default_factory=list)
