# backend/wealthtrack/services/valuation/resolver.py
"""
Valuation resolver: decides which price to trust for an asset.

Dispatch is an explicit table keyed by AssetType, checked for exhaustiveness
at construction so a new enum member cannot silently fall through.

Policies:
    CASH                  latest manual record -> unit 1
    LIVESTOCK/REAL_ESTATE latest manual record -> purchase price -> zero
    CRYPTO/STOCK          no symbol -> zero
                          live quote -> purchase price -> error
    OTHER                 zero

Manual records and purchase prices are in the asset's purchase currency;
live quotes are in whatever currency the price client returned.
"""

import logging
from decimal import Decimal
from typing import Callable

from wealthtrack.models import Asset, AssetType
from wealthtrack.services.constants import ASSET_FALLBACK_CURRENCY
from wealthtrack.services.exceptions import MarketDataError
from wealthtrack.services.protocols import PriceClientProtocol, PriceHistoryRepository
from wealthtrack.services.valuation.quantity import effective_quantity
from wealthtrack.services.valuation.types import PriceSource, ValuationResult

logger = logging.getLogger(__name__)


Policy = Callable[[Asset, str], ValuationResult]


def asset_currency(asset: Asset) -> str:
    """The currency an asset's own prices are recorded in."""
    return (asset.purchase_currency or ASSET_FALLBACK_CURRENCY).strip().upper()


class ValuationResolver:
    """
    Resolve the current value of a single asset.

    Example:
        resolver = ValuationResolver(price_client, history_repo)
        result = resolver.resolve(asset, "IDR")
        result.total_value, result.price_source
    """

    def __init__(
            self,
            price_client: PriceClientProtocol,
            history_repository: PriceHistoryRepository,
    ) -> None:
        self._prices = price_client
        self._history = history_repository
        self._policies: dict[AssetType, Policy] = {
            AssetType.CASH: self._value_cash,
            AssetType.LIVESTOCK: self._value_manual,
            AssetType.REAL_ESTATE: self._value_manual,
            AssetType.CRYPTO: self._value_market,
            AssetType.STOCK: self._value_market,
            AssetType.OTHER: self._value_unsupported,
        }
        missing = set(AssetType) - set(self._policies)
        if missing:
            raise RuntimeError(f"No valuation policy for: {sorted(m.value for m in missing)}")

    def resolve(self, asset: Asset, currency: str) -> ValuationResult:
        """
        Value an asset in (preferably) `currency`.

        Raises:
            MarketDataError: Live quote failed and there is no purchase price
        """
        policy = self._policies[AssetType(asset.type)]
        return policy(asset, currency.strip().upper())

    # =========================================================================
    # POLICIES
    # =========================================================================

    def _value_cash(self, asset: Asset, currency: str) -> ValuationResult:
        latest = self._history.get_latest_by_asset_id(asset.id)
        if latest is not None:
            return self._priced(asset, latest.price, asset_currency(asset), PriceSource.MANUAL_OVERRIDE)
        return self._priced(asset, Decimal("1"), asset_currency(asset), PriceSource.CASH_UNIT)

    def _value_manual(self, asset: Asset, currency: str) -> ValuationResult:
        latest = self._history.get_latest_by_asset_id(asset.id)
        if latest is not None:
            return self._priced(asset, latest.price, asset_currency(asset), PriceSource.MANUAL_OVERRIDE)
        if _has_purchase_price(asset):
            return self._priced(
                asset,
                asset.purchase_price,
                asset_currency(asset),
                PriceSource.PURCHASE_PRICE_FALLBACK,
                warning="No recorded valuation; using purchase price",
            )
        return ValuationResult.zero(
            asset_currency(asset),
            PriceSource.UNAVAILABLE,
            _raw_quantity(asset),
            effective_quantity(asset),
            warning="No recorded valuation or purchase price",
        )

    def _value_market(self, asset: Asset, currency: str) -> ValuationResult:
        symbol = (asset.symbol or "").strip()
        if not symbol:
            return ValuationResult.zero(
                asset_currency(asset),
                PriceSource.NO_SYMBOL,
                _raw_quantity(asset),
                effective_quantity(asset),
                warning="Asset has no symbol",
            )

        try:
            quote = self._prices.get_price(AssetType(asset.type), symbol, currency)
        except MarketDataError as e:
            if not _has_purchase_price(asset):
                logger.warning(f"No price for asset {asset.uuid} ({symbol}) and no purchase price: {e}")
                raise
            logger.warning(f"Valuing asset {asset.uuid} ({symbol}) at purchase price: {e}")
            return self._priced(
                asset,
                asset.purchase_price,
                asset_currency(asset),
                PriceSource.PURCHASE_PRICE_FALLBACK,
                warning=f"Live price unavailable: {e.message}",
            )

        return self._priced(
            asset,
            quote.price,
            quote.currency,
            PriceSource.EXTERNAL_LIVE,
            quote_source=quote.source,
        )

    def _value_unsupported(self, asset: Asset, currency: str) -> ValuationResult:
        return ValuationResult.zero(
            currency,
            PriceSource.UNSUPPORTED_TYPE,
            _raw_quantity(asset),
            effective_quantity(asset),
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _priced(
            asset: Asset,
            unit_price: Decimal,
            currency: str,
            source: PriceSource,
            quote_source: str | None = None,
            warning: str | None = None,
    ) -> ValuationResult:
        quantity = effective_quantity(asset)
        return ValuationResult(
            unit_price=unit_price,
            total_value=quantity * unit_price,
            currency=currency,
            price_source=source,
            quantity=_raw_quantity(asset),
            effective_quantity=quantity,
            quote_source=quote_source,
            warnings=(warning,) if warning else (),
        )


def _has_purchase_price(asset: Asset) -> bool:
    return asset.purchase_price is not None and asset.purchase_price != 0


def _raw_quantity(asset: Asset) -> Decimal:
    return asset.quantity if asset.quantity is not None else Decimal("0")
