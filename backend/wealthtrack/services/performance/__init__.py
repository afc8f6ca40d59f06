# backend/wealthtrack/services/performance/__init__.py
"""
Performance package.

Architecture:
    performance/
    ├── types.py       # PerformanceResult, AssetPerformance, ...
    ├── advisory.py    # Messages and recommendation thresholds
    └── calculator.py  # PerformanceCalculator (pure arithmetic)
"""

from wealthtrack.services.performance.advisory import performance_message, recommend
from wealthtrack.services.performance.calculator import (
    PerformanceCalculator,
    percent_of,
    quantize_percent,
)
from wealthtrack.services.performance.types import (
    AssetPerformance,
    CurrentValueInfo,
    InvestmentInfo,
    PerformanceResult,
    PerformanceStatus,
)

__all__ = [
    "PerformanceCalculator",
    "percent_of",
    "quantize_percent",
    "performance_message",
    "recommend",
    "AssetPerformance",
    "CurrentValueInfo",
    "InvestmentInfo",
    "PerformanceResult",
    "PerformanceStatus",
]
