# backend/wealthtrack/services/valuation/types.py
"""
Internal data types for valuation.

These dataclasses are NOT Pydantic schemas - those are defined in
wealthtrack/schemas/valuation.py for serialization.

Design Principles:
- Immutable value objects (frozen=True)
- Decimal for ALL financial values (never float)
- Every result carries a PriceSource tag saying where its price came from

Type Hierarchy:
    PriceSource      - Provenance of a unit price
    ValuationResult  - Unit price, total value and provenance for one asset
    AssetValue       - Asset identity + ValuationResult
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal

from wealthtrack.models import AssetType


class PriceSource(str, enum.Enum):
    """Where a valuation's unit price came from."""

    EXTERNAL_LIVE = "external-live"
    MANUAL_OVERRIDE = "manual-override"
    PURCHASE_PRICE_FALLBACK = "purchase-price-fallback"
    CASH_UNIT = "cash-unit"
    UNSUPPORTED_TYPE = "unsupported-type"
    NO_SYMBOL = "no-symbol"
    UNAVAILABLE = "unavailable"

    @property
    def is_degraded(self) -> bool:
        """True when the value is not backed by a live or manual price."""
        return self in (
            PriceSource.PURCHASE_PRICE_FALLBACK,
            PriceSource.UNSUPPORTED_TYPE,
            PriceSource.NO_SYMBOL,
            PriceSource.UNAVAILABLE,
        )


@dataclass(frozen=True)
class ValuationResult:
    """
    Current value of one asset.

    Attributes:
        unit_price: Price per effective unit in `currency`
        total_value: effective_quantity × unit_price
        currency: Currency of unit_price and total_value
        price_source: Provenance tag (mandatory)
        quantity: Stored quantity
        effective_quantity: Quantity used for valuation (IDX lots × 100)
        quote_source: Upstream identifier for live prices ("coingecko", "yahoo")
        warnings: Human-readable notes on degraded valuations
    """

    unit_price: Decimal
    total_value: Decimal
    currency: str
    price_source: PriceSource
    quantity: Decimal
    effective_quantity: Decimal
    quote_source: str | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def zero(
            cls,
            currency: str,
            price_source: PriceSource,
            quantity: Decimal,
            effective_quantity: Decimal,
            warning: str | None = None,
    ) -> ValuationResult:
        """A zero-valued result carrying only provenance."""
        return cls(
            unit_price=Decimal("0"),
            total_value=Decimal("0"),
            currency=currency,
            price_source=price_source,
            quantity=quantity,
            effective_quantity=effective_quantity,
            warnings=(warning,) if warning else (),
        )


@dataclass(frozen=True)
class AssetValue:
    """One asset's identity plus its valuation."""

    uuid: str
    name: str
    type: AssetType
    symbol: str | None
    valuation: ValuationResult

    @property
    def value(self) -> Decimal:
        return self.valuation.total_value

    @property
    def currency(self) -> str:
        return self.valuation.currency
