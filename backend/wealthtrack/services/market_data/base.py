# backend/wealthtrack/services/market_data/base.py
"""
Abstract base for upstream quote providers.

Every provider talks JSON over HTTP through one shared `httpx.Client`.
The base class owns the request helper so the failure taxonomy is applied
identically everywhere:

    transport error / timeout       -> ProviderUnavailableError
    HTTP 429                        -> RateLimitError (with Retry-After)
    any other non-2xx               -> ProviderUnavailableError
    body that is not valid JSON     -> ProviderUnavailableError

JSON numbers are decoded straight into Decimal (`parse_float=Decimal`), so
upstream floats never pass through binary floating point.

There are no retries here. A failed call surfaces immediately and each
request is bounded by the client timeout. When the calling context carries a
Deadline (see `wealthtrack.utils.context`), the per-request timeout is capped
at the time left, and no request is started once the deadline has expired or
been cancelled.
"""

import json
import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from wealthtrack.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)
from wealthtrack.utils.context import get_deadline

logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0


def build_http_client(
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """
    Create the HTTP client shared by all providers.

    Args:
        timeout: Total per-request bound in seconds
        connect_timeout: Connection establishment bound in seconds
        transport: Optional transport override (tests pass httpx.MockTransport)
    """
    return httpx.Client(
        timeout=httpx.Timeout(timeout, connect=connect_timeout),
        transport=transport,
        follow_redirects=True,
    )


def to_decimal(value: Any) -> Decimal | None:
    """
    Convert a decoded JSON value to Decimal.

    None for null, booleans, garbage and non-finite values; the JSON decoder
    accepts NaN and Infinity literals.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


class QuoteProvider(ABC):
    """
    Base class for CoinGecko / Yahoo style JSON providers.

    Subclasses supply `name` and build their endpoint paths; `_get_json`
    performs the request and maps every failure onto the domain taxonomy.
    """

    def __init__(
            self,
            base_url: str,
            client: httpx.Client | None = None,
            headers: dict[str, str] | None = None,
    ) -> None:
        """
        Args:
            base_url: Provider API root, without trailing slash
            client: Shared HTTP client; one is created if omitted
            headers: Extra headers sent with every request
        """
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or build_http_client()
        self._headers = dict(headers or {})

    @property
    @abstractmethod
    def name(self) -> str:
        """Upstream identifier used in logs, errors and PriceQuote.source."""
        pass

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            self._client.close()

    # =========================================================================
    # REQUEST HELPER
    # =========================================================================

    def _get_json(
            self,
            path: str,
            params: dict[str, Any] | None = None,
            symbol: str | None = None,
    ) -> Any:
        """
        GET `{base_url}{path}` and decode the JSON body.

        Raises:
            RateLimitError: HTTP 429
            ProviderUnavailableError: Network failure, non-2xx, invalid JSON,
                deadline expired or cancelled before the request
        """
        url = f"{self._base_url}{path}"
        timeout = self._request_timeout(symbol)
        logger.debug(f"{self.name} GET {path} params={params}")

        try:
            response = self._client.get(url, params=params, headers=self._headers, timeout=timeout)
        except httpx.TimeoutException as e:
            logger.warning(f"{self.name} request timed out for {symbol or path}: {e}")
            raise ProviderUnavailableError(
                provider=self.name, reason=f"timeout: {e}", symbol=symbol,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} request failed for {symbol or path}: {e}")
            raise ProviderUnavailableError(
                provider=self.name, reason=str(e), symbol=symbol,
            ) from e

        if response.status_code == 429:
            retry_after = self._parse_retry_after(response.headers.get("Retry-After"))
            logger.warning(f"{self.name} rate limited (retry_after={retry_after})")
            raise RateLimitError(provider=self.name, retry_after=retry_after, symbol=symbol)

        if not response.is_success:
            logger.warning(f"{self.name} returned HTTP {response.status_code} for {symbol or path}")
            raise ProviderUnavailableError(
                provider=self.name,
                reason=f"HTTP {response.status_code}",
                symbol=symbol,
                status_code=response.status_code,
            )

        try:
            return response.json(parse_float=Decimal)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProviderUnavailableError(
                provider=self.name, reason=f"invalid JSON body: {e}", symbol=symbol,
            ) from e

    def _request_timeout(self, symbol: str | None) -> httpx.Timeout:
        """Client timeout, capped at the time left on the context deadline."""
        configured = self._client.timeout
        deadline = get_deadline()
        if deadline is None:
            return configured

        remaining = deadline.remaining()
        if remaining <= 0:
            reason = "request cancelled" if deadline.cancelled else "deadline exceeded"
            logger.info(f"{self.name} skipping request for {symbol}: {reason}")
            raise ProviderUnavailableError(provider=self.name, reason=reason, symbol=symbol)

        return httpx.Timeout(
            connect=_cap(configured.connect, remaining),
            read=_cap(configured.read, remaining),
            write=_cap(configured.write, remaining),
            pool=_cap(configured.pool, remaining),
        )

    def _malformed(self, symbol: str | None, detail: str) -> ProviderUnavailableError:
        """Build the error for a 2xx body with an unexpected shape."""
        logger.warning(f"{self.name} returned malformed payload for {symbol}: {detail}")
        return ProviderUnavailableError(
            provider=self.name, reason=f"malformed response: {detail}", symbol=symbol,
        )

    @staticmethod
    def _parse_retry_after(value: str | None) -> int | None:
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            return None


def _cap(value: float | None, limit: float) -> float:
    return limit if value is None else min(value, limit)
