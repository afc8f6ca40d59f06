# backend/wealthtrack/services/portfolio/aggregator.py
"""
Portfolio aggregator: concurrent per-asset valuation and roll-ups.

Each asset is resolved on a bounded thread pool. Every task runs inside a
copy of the caller's context, so the correlation ID appears on log lines
emitted from worker threads. Results land in an index-addressed list and
aggregation starts only after the join.

One Deadline bounds the fan-in and travels with the tasks, so every upstream
HTTP call is capped at the time left on it. Tasks that have not finished when
the deadline expires, or when the caller cancels it, are reported as
`unavailable`; the deadline is then cancelled so their workers start no
further upstream calls, and any call still in flight ends by the deadline.
Late results are discarded. A single asset's failure never fails the
portfolio.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from decimal import Decimal
from typing import Sequence

from wealthtrack.models import Asset, AssetStatus, AssetType
from wealthtrack.services.constants import TOP_PERFORMERS_LIMIT
from wealthtrack.services.exceptions import ServiceError
from wealthtrack.services.performance.calculator import (
    PerformanceCalculator,
    percent_of,
    quantize_percent,
)
from wealthtrack.services.portfolio.types import (
    AssetTypeAllocation,
    PerformerSummary,
    PortfolioOverview,
    PortfolioPerformance,
    StatusSummary,
)
from wealthtrack.services.valuation.quantity import effective_quantity
from wealthtrack.services.valuation.resolver import ValuationResolver
from wealthtrack.services.valuation.types import AssetValue, PriceSource, ValuationResult
from wealthtrack.utils.context import Deadline, bind_context, deadline_scope

logger = logging.getLogger(__name__)


DEFAULT_MAX_WORKERS = 8
DEFAULT_TIMEOUT_SECONDS = 30.0
CANCEL_POLL_SECONDS = 0.05


class PortfolioAggregator:
    """
    Value and summarize a list of assets.

    Example:
        aggregator = PortfolioAggregator(resolver, PerformanceCalculator())
        values = aggregator.value_all(assets, "IDR")
        summary = aggregator.summarize(assets, "IDR")
    """

    def __init__(
            self,
            resolver: ValuationResolver,
            calculator: PerformanceCalculator,
            max_workers: int = DEFAULT_MAX_WORKERS,
            timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._resolver = resolver
        self._calculator = calculator
        self._max_workers = max_workers
        self._timeout = timeout

    # =========================================================================
    # VALUATION
    # =========================================================================

    def value_all(
            self,
            assets: Sequence[Asset],
            currency: str,
            deadline: Deadline | None = None,
    ) -> list[AssetValue]:
        """
        Value every asset; failures become zero-valued `unavailable` rows.

        Args:
            deadline: Caller-owned deadline, cancellable e.g. on client
                disconnect. Defaults to one of `timeout` seconds.
        """
        valuations = self._resolve_all(assets, currency, deadline)
        return [
            AssetValue(
                uuid=asset.uuid,
                name=asset.name,
                type=AssetType(asset.type),
                symbol=asset.symbol,
                valuation=valuation,
            )
            for asset, valuation in zip(assets, valuations)
        ]

    def _resolve_all(
            self,
            assets: Sequence[Asset],
            currency: str,
            deadline: Deadline | None = None,
    ) -> list[ValuationResult]:
        if not assets:
            return []

        if deadline is None:
            deadline = Deadline(self._timeout)
        results: list[ValuationResult | None] = [None] * len(assets)
        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(assets)),
            thread_name_prefix="valuation",
        )
        try:
            with deadline_scope(deadline):
                futures: list[Future] = [
                    executor.submit(bind_context(self._resolver.resolve), asset, currency)
                    for asset in assets
                ]
            not_done = _wait_until(futures, deadline)
            reason = "valuation cancelled" if deadline.cancelled else "valuation timed out"
            if not_done:
                deadline.cancel()
                logger.warning(
                    f"Portfolio {reason}: {len(not_done)}/{len(assets)} assets unfinished"
                )

            for index, (asset, future) in enumerate(zip(assets, futures)):
                if future in not_done:
                    future.cancel()
                    results[index] = _unavailable(asset, currency, reason)
                    continue
                results[index] = self._collect(asset, currency, future)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return results

    @staticmethod
    def _collect(asset: Asset, currency: str, future: Future) -> ValuationResult:
        try:
            return future.result()
        except ServiceError as e:
            logger.warning(f"Asset {asset.uuid} unavailable: {e.message}")
            return _unavailable(asset, currency, e.message)
        except Exception as e:
            logger.error(f"Unexpected error valuing asset {asset.uuid}: {e}", exc_info=True)
            return _unavailable(asset, currency, "internal error")

    # =========================================================================
    # PERFORMANCE SUMMARY
    # =========================================================================

    def summarize(
            self,
            assets: Sequence[Asset],
            currency: str,
            deadline: Deadline | None = None,
    ) -> PortfolioPerformance:
        """
        Portfolio-wide performance.

        Status counts cover every asset with a status; an asset whose status
        is unset is valued but counted in no bucket. PLANNED assets are
        excluded from all monetary aggregates. Allocation percentages are
        computed against the final total in a second pass.
        """
        status_summary = StatusSummary()
        for asset in assets:
            if asset.status == AssetStatus.ACTIVE:
                status_summary.active += 1
            elif asset.status == AssetStatus.SOLD:
                status_summary.sold += 1
            elif asset.status == AssetStatus.PLANNED:
                status_summary.planned += 1

        held = [asset for asset in assets if asset.status != AssetStatus.PLANNED]
        valuations = self._resolve_all(held, currency, deadline)

        total_invested = Decimal("0")
        total_value = Decimal("0")
        allocation: dict[str, AssetTypeAllocation] = {}
        performers: list[PerformerSummary] = []
        unavailable: list[str] = []

        for asset, valuation in zip(held, valuations):
            if valuation.price_source == PriceSource.UNAVAILABLE:
                unavailable.append(asset.uuid)

            performance = self._calculator.evaluate(asset, valuation)
            cost = asset.total_cost if asset.total_cost is not None else Decimal("0")
            total_invested += cost
            total_value += valuation.total_value

            bucket = allocation.setdefault(AssetType(asset.type).value, AssetTypeAllocation())
            bucket.count += 1
            bucket.total_invested += cost
            bucket.current_value += valuation.total_value
            bucket.profit_loss += performance.profit_loss

            performers.append(PerformerSummary(
                uuid=asset.uuid,
                name=asset.name,
                type=AssetType(asset.type),
                profit_loss_percent=performance.profit_loss_percent,
                profit_loss=performance.profit_loss,
            ))

        for bucket in allocation.values():
            bucket.percentage = quantize_percent(percent_of(bucket.current_value, total_value))
            bucket.roi = quantize_percent(percent_of(bucket.profit_loss, bucket.total_invested))

        total_profit_loss = total_value - total_invested
        total_percent = quantize_percent(percent_of(total_profit_loss, total_invested))
        gainers, losers = rank_performers(performers)

        return PortfolioPerformance(
            overview=PortfolioOverview(
                total_invested=total_invested,
                current_value=total_value,
                total_profit_loss=total_profit_loss,
                total_profit_loss_percent=total_percent,
                total_roi=total_percent,
                currency=currency,
            ),
            asset_allocation=allocation,
            top_gainers=gainers,
            top_losers=losers,
            status_summary=status_summary,
            last_updated=datetime.now(timezone.utc),
            unavailable_assets=unavailable,
        )


def rank_performers(
        performers: Sequence[PerformerSummary],
        limit: int = TOP_PERFORMERS_LIMIT,
) -> tuple[list[PerformerSummary], list[PerformerSummary]]:
    """
    Top gainers (P/L % > 0, best first) and losers (P/L % < 0, worst first).

    Break-even entries appear in neither list.
    """
    ranked = sorted(performers, key=lambda p: p.profit_loss_percent, reverse=True)
    gainers = [p for p in ranked if p.profit_loss_percent > 0][:limit]
    losers = [p for p in reversed(ranked) if p.profit_loss_percent < 0][:limit]
    return gainers, losers


def _unavailable(asset: Asset, currency: str, reason: str) -> ValuationResult:
    quantity = asset.quantity if asset.quantity is not None else Decimal("0")
    return ValuationResult.zero(
        currency,
        PriceSource.UNAVAILABLE,
        quantity,
        effective_quantity(asset),
        warning=reason,
    )


def _wait_until(futures: Sequence[Future], deadline: Deadline) -> set[Future]:
    """Wait for `futures` until the deadline expires or is cancelled; return the unfinished."""
    not_done = set(futures)
    while not_done:
        remaining = deadline.remaining()
        if remaining <= 0:
            break
        _, not_done = wait(not_done, timeout=min(remaining, CANCEL_POLL_SECONDS))
    return not_done
