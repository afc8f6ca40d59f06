# backend/wealthtrack/__init__.py
"""
Wealth Tracker valuation and performance engine.

Values a user's assets (cash, crypto, stocks, real estate, livestock) from
live market quotes or stored reference prices, and computes profit/loss,
ROI and portfolio-level aggregates using exact decimal arithmetic.
"""

__version__ = "0.1.0"
