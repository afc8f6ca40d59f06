# backend/wealthtrack/services/market_data/__init__.py
"""
Market data package.

Usage:
    from wealthtrack.services.market_data import MarketPriceClient

Architecture:
    market_data/
    ├── base.py       # QuoteProvider + shared httpx request helper
    ├── coingecko.py  # Crypto prices, history, OHLC, charts
    ├── yahoo.py      # Stock quotes, FX rates, charts
    ├── charts.py     # Downsampling
    └── client.py     # MarketPriceClient (cache + dispatch)
"""

from wealthtrack.services.market_data.base import QuoteProvider, build_http_client
from wealthtrack.services.market_data.charts import downsample
from wealthtrack.services.market_data.client import MarketPriceClient
from wealthtrack.services.market_data.coingecko import CRYPTO_IDS, CoinGeckoProvider
from wealthtrack.services.market_data.yahoo import YahooChartProvider

__all__ = [
    "QuoteProvider",
    "build_http_client",
    "downsample",
    "MarketPriceClient",
    "CRYPTO_IDS",
    "CoinGeckoProvider",
    "YahooChartProvider",
]
