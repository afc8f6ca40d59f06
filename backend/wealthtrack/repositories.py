# backend/wealthtrack/repositories.py
"""
SQLAlchemy implementations of the repository protocols.

Each repository wraps a Session owned by the caller; none of them commit
except `update`, which persists the asset it is given.
"""

import logging
import threading

from sqlalchemy import select
from sqlalchemy.orm import Session

from wealthtrack.models import Asset, AssetPriceHistory

logger = logging.getLogger(__name__)


class SqlAlchemyAssetRepository:
    """AssetRepository over a Session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_by_uuid(self, asset_uuid: str, user_id: int) -> Asset | None:
        """Asset with this uuid owned by user_id, else None."""
        return self._db.scalar(
            select(Asset).where(Asset.uuid == asset_uuid, Asset.user_id == user_id)
        )

    def list_by_user_id(self, user_id: int) -> list[Asset]:
        """All of a user's assets in creation order."""
        return list(self._db.scalars(
            select(Asset).where(Asset.user_id == user_id).order_by(Asset.id)
        ))

    def update(self, asset: Asset) -> Asset:
        self._db.add(asset)
        self._db.commit()
        self._db.refresh(asset)
        logger.debug(f"Updated asset {asset.uuid}")
        return asset


class SqlAlchemyPriceHistoryRepository:
    """
    PriceHistoryRepository over a Session.

    Portfolio valuation calls this from worker threads while the Session is
    not thread-safe, so queries are serialized with a lock.
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._lock = threading.Lock()

    def get_latest_by_asset_id(self, asset_id: int) -> AssetPriceHistory | None:
        """Most recent record by recorded_at; ties broken by insertion order."""
        with self._lock:
            return self._db.scalar(
                select(AssetPriceHistory)
                .where(AssetPriceHistory.asset_id == asset_id)
                .order_by(AssetPriceHistory.recorded_at.desc(), AssetPriceHistory.id.desc())
                .limit(1)
            )
