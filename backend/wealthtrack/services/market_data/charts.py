# backend/wealthtrack/services/market_data/charts.py
"""
Chart downsampling.

Upstream chart responses can hold hundreds of points (CoinGecko returns
5-minute data for short ranges). Renderers want a bounded, visually even
sample, so series are reduced to at most `max_points` by even index stride:

    index_i = i * (n - 1) // (max_points - 1)   for i in 0 .. max_points-1

The first (i = 0) and last (i = max_points-1) points are always kept. The
result is deterministic, and a series already within the bound is returned
unchanged, which makes the operation idempotent.
"""

from typing import Sequence, TypeVar

T = TypeVar("T")


def downsample(points: Sequence[T], max_points: int) -> list[T]:
    """
    Reduce points to at most max_points, keeping both endpoints.

    Args:
        points: Ordered series (oldest first)
        max_points: Upper bound; <= 0 disables downsampling

    Returns:
        New list with min(len(points), max_points) elements
    """
    n = len(points)
    if n <= max_points or max_points <= 0:
        return list(points)
    if max_points == 1:
        return [points[0]]

    return [points[i * (n - 1) // (max_points - 1)] for i in range(max_points)]
