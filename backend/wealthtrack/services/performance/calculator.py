# backend/wealthtrack/services/performance/calculator.py
"""
Performance calculator: P/L, ROI, holding period and annualized return.

Pure arithmetic over an Asset and its ValuationResult; no I/O. Percentages
are quantized to 2 decimal places with ROUND_HALF_UP. Thresholds for the
recommendation are applied to the unrounded percentage.
"""

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from wealthtrack.models import Asset
from wealthtrack.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    MIN_HOLDING_PERIOD_DAYS,
    PERCENT_QUANTUM,
)
from wealthtrack.services.performance.advisory import performance_message, recommend
from wealthtrack.services.performance.types import PerformanceResult, PerformanceStatus
from wealthtrack.services.protocols import Clock
from wealthtrack.services.valuation.types import ValuationResult

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")
_SECONDS_PER_DAY = 86400


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def quantize_percent(value: Decimal) -> Decimal:
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole × 100, unrounded; 0 when whole is zero."""
    if whole == 0:
        return Decimal("0")
    return part / whole * _HUNDRED


class PerformanceCalculator:
    """
    Evaluate one asset's performance.

    Example:
        calculator = PerformanceCalculator()
        result = calculator.evaluate(asset, valuation)
        result.profit_loss_percent   # Decimal("20.00")
    """

    def __init__(self, clock: Clock | None = None) -> None:
        """
        Args:
            clock: Returns the current aware datetime (injectable for tests)
        """
        self._clock = clock or _utcnow

    def holding_period_days(self, purchase_date: datetime | None) -> int:
        """
        Whole UTC days since purchase, at least 1.

        A missing purchase date counts as 1 day. Naive datetimes (SQLite
        drops tzinfo) are taken as UTC.
        """
        if purchase_date is None:
            return MIN_HOLDING_PERIOD_DAYS
        if purchase_date.tzinfo is None:
            purchase_date = purchase_date.replace(tzinfo=timezone.utc)
        elapsed = self._clock() - purchase_date
        days = int(elapsed.total_seconds() // _SECONDS_PER_DAY)
        return max(days, MIN_HOLDING_PERIOD_DAYS)

    def evaluate(self, asset: Asset, valuation: ValuationResult) -> PerformanceResult:
        total_cost = asset.total_cost if asset.total_cost is not None else Decimal("0")
        profit_loss = valuation.total_value - total_cost
        raw_percent = percent_of(profit_loss, total_cost)
        profit_loss_percent = quantize_percent(raw_percent)

        days = self.holding_period_days(asset.purchase_date)
        annualized = quantize_percent(raw_percent * CALENDAR_DAYS_PER_YEAR / days) if days else Decimal("0")

        if profit_loss > 0:
            status = PerformanceStatus.PROFIT
        elif profit_loss < 0:
            status = PerformanceStatus.LOSS
        else:
            status = PerformanceStatus.BREAK_EVEN

        target_reached = asset.target_price is not None and valuation.unit_price >= asset.target_price

        return PerformanceResult(
            profit_loss=profit_loss,
            profit_loss_percent=profit_loss_percent,
            roi=profit_loss_percent,
            status=status,
            holding_period_days=days,
            annualized_return=annualized,
            message=performance_message(asset.name, profit_loss_percent, status),
            recommendation=recommend(raw_percent, target_reached),
            target_reached=target_reached,
        )
