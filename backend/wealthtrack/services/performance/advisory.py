# backend/wealthtrack/services/performance/advisory.py
"""
Human-readable performance messages and recommendations.

Recommendations come from an ordered threshold table; the first matching
rule wins. A reached target price overrides every threshold.
"""

from decimal import Decimal
from typing import Callable

from wealthtrack.services.performance.types import PerformanceStatus

TARGET_REACHED = "Target price reached! Consider taking profit."
DEFAULT_RECOMMENDATION = "Monitor regularly and stick to your investment plan."

# (predicate on P/L percent, recommendation), evaluated in order
RECOMMENDATION_RULES: tuple[tuple[Callable[[Decimal], bool], str], ...] = (
    (lambda pct: pct > 50, "Strong performance! Consider taking partial profits or rebalancing."),
    (lambda pct: pct > 20, "Good performance! Continue holding or consider your exit strategy."),
    (lambda pct: pct < -20, "Significant loss. Review your investment thesis and consider cutting losses."),
    (lambda pct: pct < -10, "Currently in loss. Hold if you believe in long-term prospects."),
)


def recommend(profit_loss_percent: Decimal, target_reached: bool) -> str:
    if target_reached:
        return TARGET_REACHED
    for matches, recommendation in RECOMMENDATION_RULES:
        if matches(profit_loss_percent):
            return recommendation
    return DEFAULT_RECOMMENDATION


def performance_message(asset_name: str, profit_loss_percent: Decimal, status: PerformanceStatus) -> str:
    """E.g. "Your Bitcoin investment is up 20.00%"."""
    if status == PerformanceStatus.BREAK_EVEN:
        return f"Your {asset_name} investment is at break-even"
    verb = "up" if status == PerformanceStatus.PROFIT else "down"
    return f"Your {asset_name} investment is {verb} {abs(profit_loss_percent):.2f}%"
