# backend/wealthtrack/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The (external) handler layer is responsible for mapping them to responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── InvalidChartParameterError
    ├── NotFoundError
    │   └── AssetNotFoundError
    ├── MarketDataError
    │   ├── UnsupportedSymbolError      - no provider mapping for the ticker
    │   ├── ProviderUnavailableError    - network / non-2xx / malformed body
    │   │   └── RateLimitError
    │   └── QuoteNotFoundError          - quote absent in a successful response
    └── UnsupportedAssetTypeError       - asset type has no price lookup

Propagation:
    The market price client raises these unchanged. The valuation resolver
    absorbs MarketDataError into degraded results wherever a fallback price
    exists. Portfolio-level operations never propagate a single-asset failure.
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when a programmatic parameter is invalid.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidChartParameterError(ValidationError):
    """Raised for an unknown chart range/interval or a non-positive day count."""

    def __init__(self, field: str, value: object, valid: str) -> None:
        self.value = value
        super().__init__(
            f"Invalid {field}: '{value}'. Valid options: {valid}",
            field=field,
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Asset")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class AssetNotFoundError(NotFoundError):
    """Raised when an asset does not exist or belongs to another user."""

    def __init__(self, asset_uuid: str) -> None:
        self.asset_uuid = asset_uuid
        super().__init__(
            f"Asset {asset_uuid} not found",
            resource_type="Asset",
            resource_id=asset_uuid,
        )


# =============================================================================
# MARKET DATA ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for market price lookups.

    Attributes:
        provider: Name of the provider involved (None when no call was made)
        symbol: Symbol being looked up
    """

    def __init__(
            self,
            message: str,
            provider: str | None = None,
            symbol: str | None = None,
    ) -> None:
        self.provider = provider
        self.symbol = symbol
        super().__init__(message)


class UnsupportedSymbolError(MarketDataError):
    """
    Raised when a ticker has no known provider mapping.

    This is a caller error (e.g. a crypto ticker missing from the id table),
    not a transient failure. No upstream call is made.
    """

    def __init__(self, symbol: str, provider: str | None = None) -> None:
        super().__init__(
            f"Unsupported symbol: '{symbol}'",
            provider=provider,
            symbol=symbol,
        )


class ProviderUnavailableError(MarketDataError):
    """
    Raised when an upstream provider cannot produce a usable response.

    Examples:
    - Network error or timeout
    - Non-2xx status
    - Body that is not valid JSON or has an unexpected shape

    Transient; this engine never retries it internally.
    """

    def __init__(
            self,
            provider: str,
            reason: str,
            symbol: str | None = None,
            status_code: int | None = None,
    ) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(
            f"Provider '{provider}' is unavailable: {reason}",
            provider=provider,
            symbol=symbol,
        )


class RateLimitError(ProviderUnavailableError):
    """
    Raised on HTTP 429 from a provider.

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by the API)
    """

    def __init__(
            self,
            provider: str,
            retry_after: int | None = None,
            symbol: str | None = None,
    ) -> None:
        self.retry_after = retry_after
        reason = "rate limit exceeded"
        if retry_after:
            reason += f" (retry after {retry_after}s)"
        super().__init__(provider, reason, symbol=symbol, status_code=429)


class QuoteNotFoundError(MarketDataError):
    """
    Raised when a provider responds successfully but has no quote.

    Examples:
    - CoinGecko omits the coin or the requested vs-currency
    - Yahoo returns an empty result list or a chart error object
    """

    def __init__(self, symbol: str, provider: str, detail: str | None = None) -> None:
        message = f"No quote for '{symbol}' from {provider}"
        if detail:
            message += f": {detail}"
        super().__init__(message, provider=provider, symbol=symbol)


# =============================================================================
# VALUATION ERRORS
# =============================================================================


class UnsupportedAssetTypeError(ServiceError):
    """Raised when a price lookup is requested for a type with no market."""

    def __init__(self, asset_type: str) -> None:
        self.asset_type = asset_type
        super().__init__(f"Unsupported asset type for price lookup: {asset_type}")


__all__ = [
    # Base
    "ServiceError",
    # Validation
    "ValidationError",
    "InvalidChartParameterError",
    # Not Found
    "NotFoundError",
    "AssetNotFoundError",
    # Market Data
    "MarketDataError",
    "UnsupportedSymbolError",
    "ProviderUnavailableError",
    "RateLimitError",
    "QuoteNotFoundError",
    # Valuation
    "UnsupportedAssetTypeError",
]
