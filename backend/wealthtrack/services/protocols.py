# backend/wealthtrack/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- The SQLAlchemy repositories satisfy these without inheritance
- Test doubles are plain classes or MagicMock
"""

from __future__ import annotations

import datetime as dt
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from wealthtrack.models import Asset, AssetPriceHistory, AssetType
    from wealthtrack.schemas.market_data import PriceQuote


class AssetRepository(Protocol):
    """Read access (plus update) to a user's assets."""

    def get_by_uuid(self, asset_uuid: str, user_id: int) -> Asset | None:
        ...

    def list_by_user_id(self, user_id: int) -> list[Asset]:
        ...

    def update(self, asset: Asset) -> Asset:
        ...


class PriceHistoryRepository(Protocol):
    """Manual price records (valuations entered by the user)."""

    def get_latest_by_asset_id(self, asset_id: int) -> AssetPriceHistory | None:
        ...


class PriceClientProtocol(Protocol):
    """Interface required by ValuationResolver."""

    def get_price(
        self,
        asset_type: AssetType,
        symbol: str,
        currency: str | None = None,
    ) -> PriceQuote:
        ...


class Clock(Protocol):
    """Current time source, injectable for holding-period tests."""

    def __call__(self) -> dt.datetime:
        ...
