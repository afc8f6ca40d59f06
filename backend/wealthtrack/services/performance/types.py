# backend/wealthtrack/services/performance/types.py
"""
Internal data types for performance analysis.

Type Hierarchy:
    PerformanceStatus  - profit / loss / break-even
    PerformanceResult  - P/L, ROI, holding period and advice for one asset
    InvestmentInfo     - What was paid
    CurrentValueInfo   - What it is worth now
    AssetPerformance   - Identity + the three above
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from wealthtrack.models import AssetType
from wealthtrack.services.valuation.types import PriceSource


class PerformanceStatus(str, enum.Enum):
    PROFIT = "profit"
    LOSS = "loss"
    BREAK_EVEN = "break-even"


@dataclass(frozen=True)
class PerformanceResult:
    """
    Performance metrics for one asset.

    Attributes:
        profit_loss: Current value minus total cost
        profit_loss_percent: profit_loss / total_cost × 100, 2 dp (0 if no cost)
        roi: Same as profit_loss_percent
        status: Sign of profit_loss
        holding_period_days: Whole days held, at least 1
        annualized_return: profit_loss_percent × 365 / days, 2 dp
        message: One-line summary
        recommendation: Threshold-based advice
        target_reached: Unit price at or above the target price
    """

    profit_loss: Decimal
    profit_loss_percent: Decimal
    roi: Decimal
    status: PerformanceStatus
    holding_period_days: int
    annualized_return: Decimal
    message: str
    recommendation: str
    target_reached: bool


@dataclass(frozen=True)
class InvestmentInfo:
    quantity: Decimal
    purchase_price: Decimal
    purchase_date: datetime | None
    total_cost: Decimal
    currency: str
    transaction_fee: Decimal
    days_held: int


@dataclass(frozen=True)
class CurrentValueInfo:
    unit_price: Decimal
    value: Decimal
    currency: str
    price_source: PriceSource
    last_updated: datetime


@dataclass(frozen=True)
class AssetPerformance:
    """Full performance report for a single asset."""

    asset_uuid: str
    asset_name: str
    type: AssetType
    symbol: str | None
    investment: InvestmentInfo
    current: CurrentValueInfo
    performance: PerformanceResult
