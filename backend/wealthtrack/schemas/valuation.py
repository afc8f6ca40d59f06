# backend/wealthtrack/schemas/valuation.py
"""
Pydantic schemas for asset and portfolio valuation.

Built from the service dataclasses:

    AssetValueResponse.from_asset_value(service.get_asset_value(...))
    PortfolioValueResponse.from_portfolio_value(service.get_portfolio_value(...))
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from wealthtrack.models import AssetType
from wealthtrack.services.portfolio.types import PortfolioValue
from wealthtrack.services.valuation.types import AssetValue, PriceSource


class ValuationDetail(BaseModel):
    """How a single asset was priced."""

    model_config = ConfigDict(from_attributes=True)

    unit_price: Decimal = Field(..., description="Price per effective unit")
    total_value: Decimal = Field(..., description="effective_quantity × unit_price")
    currency: str = Field(..., description="Currency of unit_price and total_value")
    price_source: PriceSource = Field(..., description="Which pricing policy produced the value")
    quantity: Decimal = Field(..., description="Stored quantity (lots for IDX stocks)")
    effective_quantity: Decimal = Field(..., description="Quantity used for valuation")
    quote_source: str | None = Field(None, description="Upstream provider for live prices")
    warnings: list[str] = Field(default_factory=list)


class AssetValueResponse(BaseModel):
    """Current value of one asset."""

    model_config = ConfigDict(from_attributes=True)

    uuid: str
    name: str
    type: AssetType
    symbol: str | None = None
    valuation: ValuationDetail

    @classmethod
    def from_asset_value(cls, value: AssetValue) -> "AssetValueResponse":
        return cls.model_validate(value, from_attributes=True)


class PortfolioValueResponse(BaseModel):
    """Current value of every asset a user holds."""

    model_config = ConfigDict(from_attributes=True)

    total_value: Decimal = Field(..., description="Sum of values in `currency` only")
    currency: str
    assets: list[AssetValueResponse] = Field(default_factory=list)
    totals_by_currency: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Subtotal per currency, including currencies excluded from total_value",
    )
    fetched_at: dt.datetime

    @classmethod
    def from_portfolio_value(cls, value: PortfolioValue) -> "PortfolioValueResponse":
        return cls.model_validate(value, from_attributes=True)
