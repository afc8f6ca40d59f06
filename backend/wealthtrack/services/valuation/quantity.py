# backend/wealthtrack/services/valuation/quantity.py
"""Effective quantity: Indonesian stocks are held in lots of 100 shares."""

from decimal import Decimal

from wealthtrack.models import Asset, AssetType
from wealthtrack.services.constants import IDX_LOT_SIZE, IDX_TICKERS


def is_idx_stock(symbol: str | None) -> bool:
    """True if the bare ticker trades on the Indonesia Stock Exchange."""
    if not symbol:
        return False
    return symbol.strip().upper() in IDX_TICKERS


def effective_quantity(asset: Asset) -> Decimal:
    """
    Quantity used for valuation and performance.

    IDX stocks store quantity in lots; everything else stores units.
    """
    quantity = asset.quantity if asset.quantity is not None else Decimal("0")
    if asset.type == AssetType.STOCK and is_idx_stock(asset.symbol):
        return quantity * IDX_LOT_SIZE
    return quantity
