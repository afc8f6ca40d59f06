# backend/wealthtrack/services/portfolio/service.py
"""
Portfolio and performance services.

These are the outward operations of the engine. They look assets up through
the AssetRepository protocol, value them with the ValuationResolver and
roll them up with the PortfolioAggregator.

Error policy:
- Single-asset operations raise AssetNotFoundError for a missing asset and
  let resolver errors propagate.
- Portfolio operations never fail because one asset could not be priced.
  They take an optional Deadline; cancelling it (e.g. on client disconnect)
  stops further upstream calls and returns what finished as-is.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal

from wealthtrack.models import AssetType
from wealthtrack.services.exceptions import AssetNotFoundError
from wealthtrack.services.performance.calculator import PerformanceCalculator
from wealthtrack.services.performance.types import (
    AssetPerformance,
    CurrentValueInfo,
    InvestmentInfo,
)
from wealthtrack.services.portfolio.aggregator import PortfolioAggregator
from wealthtrack.services.portfolio.types import PortfolioPerformance, PortfolioValue
from wealthtrack.services.protocols import AssetRepository
from wealthtrack.services.valuation.resolver import ValuationResolver
from wealthtrack.services.valuation.types import AssetValue
from wealthtrack.utils.context import Deadline

logger = logging.getLogger(__name__)


def _normalize_currency(currency: str | None, default: str) -> str:
    currency = (currency or "").strip().upper()
    return currency or default


class PortfolioService:
    """
    Current value of single assets and whole portfolios.

    Example:
        service = PortfolioService(asset_repo, resolver, aggregator, "IDR")
        portfolio = service.get_portfolio_value(user_id=1, currency="IDR")
        portfolio.total_value, portfolio.totals_by_currency
    """

    def __init__(
            self,
            asset_repository: AssetRepository,
            resolver: ValuationResolver,
            aggregator: PortfolioAggregator,
            default_currency: str,
    ) -> None:
        self._assets = asset_repository
        self._resolver = resolver
        self._aggregator = aggregator
        self._default_currency = default_currency

    def get_asset_value(self, user_id: int, asset_uuid: str, currency: str | None = None) -> AssetValue:
        """
        Value one asset.

        Raises:
            AssetNotFoundError: No such asset for this user
            MarketDataError: Live price failed and no purchase price exists
        """
        currency = _normalize_currency(currency, self._default_currency)
        asset = self._assets.get_by_uuid(asset_uuid, user_id)
        if asset is None:
            raise AssetNotFoundError(asset_uuid)

        valuation = self._resolver.resolve(asset, currency)
        return AssetValue(
            uuid=asset.uuid,
            name=asset.name,
            type=AssetType(asset.type),
            symbol=asset.symbol,
            valuation=valuation,
        )

    def get_portfolio_value(
            self,
            user_id: int,
            currency: str | None = None,
            deadline: Deadline | None = None,
    ) -> PortfolioValue:
        """
        Value every asset of a user.

        `total_value` only sums assets valued in the requested currency;
        `totals_by_currency` carries the subtotal of every currency present.
        """
        currency = _normalize_currency(currency, self._default_currency)
        assets = self._assets.list_by_user_id(user_id)
        values = self._aggregator.value_all(assets, currency, deadline)

        totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for value in values:
            totals[value.currency] += value.value

        skipped = [v.uuid for v in values if v.currency != currency]
        if skipped:
            logger.info(
                f"Portfolio for user {user_id}: {len(skipped)} asset(s) not in {currency} "
                f"excluded from total_value"
            )

        return PortfolioValue(
            total_value=totals.get(currency, Decimal("0")),
            currency=currency,
            assets=values,
            totals_by_currency=dict(totals),
            fetched_at=datetime.now(timezone.utc),
        )


class PerformanceService:
    """
    Profit/loss analysis for single assets and whole portfolios.

    Example:
        service = PerformanceService(asset_repo, resolver, calculator, aggregator, "IDR")
        report = service.get_asset_performance(user_id=1, asset_uuid="...")
        report.performance.recommendation
    """

    def __init__(
            self,
            asset_repository: AssetRepository,
            resolver: ValuationResolver,
            calculator: PerformanceCalculator,
            aggregator: PortfolioAggregator,
            default_currency: str,
    ) -> None:
        self._assets = asset_repository
        self._resolver = resolver
        self._calculator = calculator
        self._aggregator = aggregator
        self._default_currency = default_currency

    def get_asset_performance(
            self,
            user_id: int,
            asset_uuid: str,
            currency: str | None = None,
    ) -> AssetPerformance:
        """
        Performance report for one asset.

        With no currency given, the asset's purchase currency is used, then
        the configured default.

        Raises:
            AssetNotFoundError: No such asset for this user
            MarketDataError: Live price failed and no purchase price exists
        """
        asset = self._assets.get_by_uuid(asset_uuid, user_id)
        if asset is None:
            raise AssetNotFoundError(asset_uuid)

        currency = _normalize_currency(
            currency,
            _normalize_currency(asset.purchase_currency, self._default_currency),
        )
        valuation = self._resolver.resolve(asset, currency)
        performance = self._calculator.evaluate(asset, valuation)

        return AssetPerformance(
            asset_uuid=asset.uuid,
            asset_name=asset.name,
            type=AssetType(asset.type),
            symbol=asset.symbol,
            investment=InvestmentInfo(
                quantity=valuation.quantity,
                purchase_price=asset.purchase_price if asset.purchase_price is not None else Decimal("0"),
                purchase_date=asset.purchase_date,
                total_cost=asset.total_cost if asset.total_cost is not None else Decimal("0"),
                currency=currency,
                transaction_fee=asset.transaction_fee if asset.transaction_fee is not None else Decimal("0"),
                days_held=performance.holding_period_days,
            ),
            current=CurrentValueInfo(
                unit_price=valuation.unit_price,
                value=valuation.total_value,
                currency=valuation.currency,
                price_source=valuation.price_source,
                last_updated=datetime.now(timezone.utc),
            ),
            performance=performance,
        )

    def get_portfolio_performance(
            self,
            user_id: int,
            currency: str | None = None,
            deadline: Deadline | None = None,
    ) -> PortfolioPerformance:
        currency = _normalize_currency(currency, self._default_currency)
        assets = self._assets.list_by_user_id(user_id)
        summary = self._aggregator.summarize(assets, currency, deadline)
        if summary.unavailable_assets:
            logger.warning(
                f"Portfolio performance for user {user_id}: "
                f"{len(summary.unavailable_assets)} asset(s) unavailable"
            )
        return summary
