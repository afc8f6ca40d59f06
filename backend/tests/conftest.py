# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- Fake price client / history repository
- HTTP client backed by httpx.MockTransport
- Sample data factories
"""

import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterator
from uuid import uuid4

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from wealthtrack.models import (
    Base,
    Asset,
    AssetPriceHistory,
    AssetStatus,
    AssetType,
)
from wealthtrack.schemas.market_data import PriceQuote
from wealthtrack.services.cache import MemoryCache
from wealthtrack.services.exceptions import QuoteNotFoundError


FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================

class FakePriceClient:
    """
    In-memory stand-in for MarketPriceClient.get_price.

    Quotes are keyed by (asset_type, SYMBOL). Unknown symbols raise
    QuoteNotFoundError, like a provider with no data.
    """

    def __init__(self) -> None:
        self._quotes: dict[tuple[AssetType, str], PriceQuote] = {}
        self._errors: dict[tuple[AssetType, str], Exception] = {}
        self._lock = threading.Lock()
        self.calls: list[tuple[AssetType, str, str | None]] = []

    def add_quote(
            self,
            asset_type: AssetType,
            symbol: str,
            price: str | Decimal,
            currency: str = "USD",
            source: str = "fake",
    ) -> None:
        self._quotes[(asset_type, symbol.upper())] = PriceQuote(
            symbol=symbol.upper(),
            price=Decimal(str(price)),
            currency=currency,
            source=source,
            fetched_at=FIXED_NOW,
        )

    def add_error(self, asset_type: AssetType, symbol: str, error: Exception) -> None:
        self._errors[(asset_type, symbol.upper())] = error

    def get_price(self, asset_type: AssetType, symbol: str, currency: str | None = None) -> PriceQuote:
        with self._lock:
            self.calls.append((asset_type, symbol, currency))
        key = (asset_type, symbol.upper())
        if key in self._errors:
            raise self._errors[key]
        if key in self._quotes:
            return self._quotes[key]
        raise QuoteNotFoundError(symbol, "fake")


class FakeHistoryRepository:
    """Latest manual price per asset id."""

    def __init__(self) -> None:
        self._latest: dict[int, AssetPriceHistory] = {}

    def set_latest(self, asset_id: int, price: str | Decimal) -> None:
        self._latest[asset_id] = AssetPriceHistory(
            asset_id=asset_id,
            price=Decimal(str(price)),
            source="manual",
            recorded_at=FIXED_NOW,
        )

    def get_latest_by_asset_id(self, asset_id: int) -> AssetPriceHistory | None:
        return self._latest.get(asset_id)


class FakeAssetRepository:
    """AssetRepository over a list."""

    def __init__(self, assets: list[Asset] | None = None) -> None:
        self.assets = list(assets or [])

    def get_by_uuid(self, asset_uuid: str, user_id: int) -> Asset | None:
        for asset in self.assets:
            if asset.uuid == asset_uuid and asset.user_id == user_id:
                return asset
        return None

    def list_by_user_id(self, user_id: int) -> list[Asset]:
        return [asset for asset in self.assets if asset.user_id == user_id]

    def update(self, asset: Asset) -> Asset:
        return asset


@pytest.fixture
def price_client() -> FakePriceClient:
    return FakePriceClient()


@pytest.fixture
def history_repo() -> FakeHistoryRepository:
    return FakeHistoryRepository()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


# =============================================================================
# HTTP
# =============================================================================

def make_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    """httpx.Client whose requests are answered by `handler`."""
    return httpx.Client(transport=httpx.MockTransport(handler))


class RecordingHandler:
    """
    MockTransport handler that records requests and routes by path.

    Routes map a path suffix to a response or a callable returning one.
    Unrouted requests get a 404.
    """

    def __init__(self) -> None:
        self.routes: dict[str, httpx.Response | Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def route(self, path: str, response) -> None:
        self.routes[path] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for path, response in self.routes.items():
            if request.url.path.endswith(path):
                return response(request) if callable(response) else response
        return httpx.Response(404, json={"error": "not routed"})

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def http_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def http_client(http_handler: RecordingHandler) -> Iterator[httpx.Client]:
    client = make_http_client(http_handler)
    yield client
    client.close()


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

_next_id = iter(range(1, 1_000_000))


def make_asset(
        name: str = "Bitcoin",
        type: AssetType = AssetType.CRYPTO,
        symbol: str | None = "BTC",
        quantity: str | Decimal = "1",
        purchase_price: str | Decimal = "0",
        total_cost: str | Decimal = "0",
        purchase_currency: str = "USD",
        purchase_date: datetime | None = None,
        target_price: str | Decimal | None = None,
        status: AssetStatus | None = AssetStatus.ACTIVE,
        user_id: int = 1,
        id: int | None = None,
        uuid: str | None = None,
) -> Asset:
    """Factory for transient (unsaved) Asset objects with every field set."""
    asset_id = id if id is not None else next(_next_id)
    return Asset(
        id=asset_id,
        uuid=uuid or f"asset-{asset_id}",
        user_id=user_id,
        name=name,
        type=type,
        symbol=symbol,
        quantity=Decimal(str(quantity)),
        purchase_price=Decimal(str(purchase_price)),
        total_cost=Decimal(str(total_cost)),
        purchase_currency=purchase_currency,
        purchase_date=purchase_date,
        transaction_fee=None,
        target_price=Decimal(str(target_price)) if target_price is not None else None,
        status=status,
    )


def create_asset(db: Session, **kwargs) -> Asset:
    """Factory function for creating Asset entities in the database."""
    asset = make_asset(**kwargs)
    if kwargs.get("id") is None:
        asset.id = None
    if kwargs.get("uuid") is None:
        asset.uuid = str(uuid4())
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return asset


def create_price_record(
        db: Session,
        asset: Asset,
        price: str | Decimal,
        recorded_at: datetime = FIXED_NOW,
        source: str = "manual",
) -> AssetPriceHistory:
    """Factory function for creating AssetPriceHistory entities in the database."""
    record = AssetPriceHistory(
        asset_id=asset.id,
        price=Decimal(str(price)),
        source=source,
        recorded_at=recorded_at,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record
