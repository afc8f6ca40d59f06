# backend/wealthtrack/schemas/performance.py
"""
Pydantic schemas for asset and portfolio performance.

Built from the service dataclasses with `from_attributes=True`.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from wealthtrack.models import AssetType
from wealthtrack.services.performance.types import AssetPerformance, PerformanceStatus
from wealthtrack.services.portfolio.types import PortfolioPerformance
from wealthtrack.services.valuation.types import PriceSource


# =============================================================================
# SINGLE ASSET
# =============================================================================

class InvestmentInfoSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    quantity: Decimal
    purchase_price: Decimal
    purchase_date: dt.datetime | None = None
    total_cost: Decimal
    currency: str
    transaction_fee: Decimal
    days_held: int


class CurrentValueSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    unit_price: Decimal
    value: Decimal
    currency: str
    price_source: PriceSource
    last_updated: dt.datetime


class PerformanceMetricsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    profit_loss: Decimal
    profit_loss_percent: Decimal = Field(..., description="Percent, 2 decimal places")
    roi: Decimal
    status: PerformanceStatus
    holding_period_days: int = Field(..., ge=1)
    annualized_return: Decimal
    message: str
    recommendation: str
    target_reached: bool


class AssetPerformanceResponse(BaseModel):
    """Performance report for one asset."""

    model_config = ConfigDict(from_attributes=True)

    asset_uuid: str
    asset_name: str
    type: AssetType
    symbol: str | None = None
    investment: InvestmentInfoSchema
    current: CurrentValueSchema
    performance: PerformanceMetricsSchema

    @classmethod
    def from_performance(cls, report: AssetPerformance) -> "AssetPerformanceResponse":
        return cls.model_validate(report, from_attributes=True)


# =============================================================================
# PORTFOLIO
# =============================================================================

class PortfolioOverviewSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_invested: Decimal
    current_value: Decimal
    total_profit_loss: Decimal
    total_profit_loss_percent: Decimal
    total_roi: Decimal
    currency: str


class AssetTypeAllocationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    count: int
    total_invested: Decimal
    current_value: Decimal
    profit_loss: Decimal
    percentage: Decimal = Field(..., description="Share of portfolio current value, percent")
    roi: Decimal


class PerformerSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uuid: str
    name: str
    type: AssetType
    profit_loss_percent: Decimal
    profit_loss: Decimal


class StatusSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    active: int = 0
    sold: int = 0
    planned: int = 0


class PortfolioPerformanceResponse(BaseModel):
    """Portfolio-wide performance summary."""

    model_config = ConfigDict(from_attributes=True)

    overview: PortfolioOverviewSchema
    asset_allocation: dict[str, AssetTypeAllocationSchema] = Field(default_factory=dict)
    top_gainers: list[PerformerSummarySchema] = Field(default_factory=list, max_length=5)
    top_losers: list[PerformerSummarySchema] = Field(default_factory=list, max_length=5)
    status_summary: StatusSummarySchema
    last_updated: dt.datetime
    unavailable_assets: list[str] = Field(default_factory=list)

    @classmethod
    def from_performance(cls, summary: PortfolioPerformance) -> "PortfolioPerformanceResponse":
        return cls.model_validate(summary, from_attributes=True)
