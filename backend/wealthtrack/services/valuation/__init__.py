# backend/wealthtrack/services/valuation/__init__.py
"""
Valuation package.

Usage:
    from wealthtrack.services.valuation import ValuationResolver

    resolver = ValuationResolver(price_client, history_repo)
    result = resolver.resolve(asset, "IDR")

Architecture:
    valuation/
    ├── types.py     # PriceSource, ValuationResult, AssetValue
    ├── quantity.py  # Lot-size aware effective quantity
    └── resolver.py  # Per-asset-type pricing policies
"""

from wealthtrack.services.valuation.quantity import effective_quantity, is_idx_stock
from wealthtrack.services.valuation.resolver import ValuationResolver, asset_currency
from wealthtrack.services.valuation.types import AssetValue, PriceSource, ValuationResult

__all__ = [
    "ValuationResolver",
    "asset_currency",
    "effective_quantity",
    "is_idx_stock",
    "AssetValue",
    "PriceSource",
    "ValuationResult",
]
