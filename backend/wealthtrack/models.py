# backend/wealthtrack/models.py
import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, DateTime, ForeignKey, Enum, Numeric, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_uuid() -> str:
    return str(uuid.uuid4())


# Enums help enforce data integrity at the database level
class AssetType(str, enum.Enum):
    CRYPTO = "CRYPTO"
    STOCK = "STOCK"
    CASH = "CASH"
    REAL_ESTATE = "REAL_ESTATE"
    LIVESTOCK = "LIVESTOCK"
    OTHER = "OTHER"


class AssetStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    PLANNED = "PLANNED"  # Wish-list entry; never part of monetary totals


class Asset(Base):
    """
    A single holding owned by one user.

    The valuation engine only reads assets. Quantity and every monetary
    field are exact decimals: a cash balance is adjusted on every linked
    income/expense, and float drift would accumulate across those updates.

    For Jakarta-exchange stocks `quantity` is expressed in lots (100 shares).
    """
    __tablename__ = "assets"
    __table_args__ = (
        Index("ix_assets_user_type", "user_id", "type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    uuid: Mapped[str] = mapped_column(String(36), unique=True, index=True, default=_new_uuid)
    user_id: Mapped[int] = mapped_column(index=True)
    name: Mapped[str] = mapped_column(String)
    type: Mapped[AssetType] = mapped_column(Enum(AssetType))
    symbol: Mapped[str | None] = mapped_column(String, nullable=True)  # e.g. "BTC", "BBRI", "AAPL"

    quantity: Mapped[Decimal] = mapped_column(Numeric(20, 8), default=Decimal(0))

    # Purchase data
    purchase_price: Mapped[Decimal] = mapped_column(Numeric(20, 8), default=Decimal(0))  # Per unit (per share for IDX)
    purchase_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    purchase_currency: Mapped[str] = mapped_column(String(3), default="USD")
    total_cost: Mapped[Decimal] = mapped_column(Numeric(20, 8), default=Decimal(0))  # Cost basis incl. fees
    transaction_fee: Mapped[Decimal | None] = mapped_column(Numeric(20, 8), nullable=True)

    # Goals
    target_price: Mapped[Decimal | None] = mapped_column(Numeric(20, 8), nullable=True)
    target_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Lifecycle
    status: Mapped[AssetStatus | None] = mapped_column(Enum(AssetStatus), nullable=True, default=AssetStatus.ACTIVE)
    sold_price: Mapped[Decimal | None] = mapped_column(Numeric(20, 8), nullable=True)
    sold_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    price_history: Mapped[list["AssetPriceHistory"]] = relationship(
        back_populates="asset",
        cascade="all, delete-orphan",
    )


class AssetPriceHistory(Base):
    """
    Manually recorded unit price for an asset.

    Assets without a live quote (CASH, LIVESTOCK, REAL_ESTATE) are valued from
    their most recent record, which overrides the purchase price. Records are
    written by the "record price" action and are read-only to the engine.
    """
    __tablename__ = "asset_price_history"
    __table_args__ = (
        # Covers the "latest record for asset" lookup
        Index("ix_price_history_asset_recorded", "asset_id", "recorded_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    uuid: Mapped[str] = mapped_column(String(36), unique=True, default=_new_uuid)
    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id", ondelete="CASCADE"), index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(20, 8))
    source: Mapped[str] = mapped_column(String(50))  # e.g. "manual", "appraisal"
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    asset: Mapped["Asset"] = relationship(back_populates="price_history")
