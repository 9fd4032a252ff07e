# fleet_gps_sync/adapters/base.py
"""
Common interface for GPS vendor adapters.

Each adapter isolates one vendor's quirks (auth scheme, payload shape,
pagination, field naming) behind three operations:

- validate_credentials: structural check of the credential mapping, no I/O.
- fetch_data: vendor call(s) normalized into Asset objects.
- get_status: connectivity check reporting status and asset count.

Adapters never swallow vendor failures: transport, auth and vendor-reported
errors surface as VendorConnectionError for the orchestrator to record.
Individual malformed assets are skipped and logged so one bad record never
fails the batch.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError

from fleet_gps_sync.client import VendorClient, VendorConnectionError
from fleet_gps_sync.config import VendorConfig
from fleet_gps_sync.models import Asset, ProviderStatus, ProviderType, VendorCredentials

__all__: list[str] = ['ProviderAdapter', 'ProviderStatusReport']

logger: logging.Logger = logging.getLogger(__name__)


class ProviderStatusReport(BaseModel):
    """
    Result of a connectivity check.

    Attributes:
        status: CONNECTED when the vendor answered, ERROR otherwise.
        trailer_count: Assets returned by the check (0 on error).
        error: Failure message when status is ERROR.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    status: ProviderStatus
    trailer_count: int = 0
    error: str | None = None


class ProviderAdapter[CredT: VendorCredentials](ABC):
    """
    Abstract base for vendor adapters.

    Subclasses declare their ProviderType and credential model and implement
    `_fetch_assets`. The base class handles credential parsing, the status
    check and per-asset error isolation.

    Attributes:
        provider_type: Vendor this adapter serves.
        credentials_model: Pydantic model for the vendor's credential JSON.
    """

    provider_type: ClassVar[ProviderType]
    credentials_model: ClassVar[type[VendorCredentials]]

    def __init__(self, client: VendorClient, vendor_config: VendorConfig) -> None:
        """
        Args:
            client: Shared HTTP client used for all vendor calls.
            vendor_config: Vendor defaults, notably the fallback base URL.
        """
        self._client: VendorClient = client
        self._vendor_config: VendorConfig = vendor_config

    @property
    def default_base_url(self) -> str:
        """Base URL used when the credentials do not carry one."""
        return self._vendor_config.base_url

    # -------------------------------------------------------------------------
    # Credentials
    # -------------------------------------------------------------------------

    def validate_credentials(self, credentials: dict[str, Any]) -> bool:
        """
        Check that every required credential field is present and non-blank.

        This is a structural check only; no vendor call is made.
        """
        try:
            self.credentials_model.model_validate(credentials)
        except ValidationError:
            return False
        return True

    def parse_credentials(self, credentials: dict[str, Any]) -> CredT:
        """
        Validate and type the credential mapping.

        Raises:
            VendorConnectionError: If required fields are missing or blank.
        """
        try:
            parsed: Any = self.credentials_model.model_validate(credentials)
        except ValidationError as error:
            missing: list[str] = sorted(
                str(detail['loc'][0]) for detail in error.errors() if detail['loc']
            )
            raise VendorConnectionError(
                f'Invalid {self.provider_type.value} credentials: '
                f'missing or blank {", ".join(missing) or "fields"}'
            ) from error
        return parsed

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def fetch_data(self, credentials: dict[str, Any]) -> list[Asset]:
        """
        Fetch all assets for one account and normalize them.

        Args:
            credentials: Decrypted credential mapping for this vendor.

        Returns:
            Normalized assets; optional fields are None when the vendor
            omitted them.

        Raises:
            VendorConnectionError: On invalid credentials or any vendor
                failure (network, auth, vendor-reported error, bad payload).
        """
        typed_credentials: CredT = self.parse_credentials(credentials)
        assets: list[Asset] = self._fetch_assets(typed_credentials)
        logger.info(
            '%s fetch complete: %d assets', self.provider_type.value, len(assets)
        )
        return assets

    def get_status(self, credentials: dict[str, Any]) -> ProviderStatusReport:
        """
        Probe connectivity by running a full fetch.

        Never raises for vendor failures; they are reported as ERROR.
        """
        try:
            assets: list[Asset] = self.fetch_data(credentials)
        except VendorConnectionError as error:
            logger.warning(
                '%s status check failed: %s', self.provider_type.value, error
            )
            return ProviderStatusReport(status=ProviderStatus.ERROR, error=str(error))

        return ProviderStatusReport(
            status=ProviderStatus.CONNECTED,
            trailer_count=len(assets),
        )

    @abstractmethod
    def _fetch_assets(self, credentials: CredT) -> list[Asset]:
        """Vendor-specific fetch and normalization."""
        ...

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _normalize_each[RawT](
        self,
        raw_items: Iterable[RawT],
        to_asset: Callable[[RawT], Asset | None],
    ) -> list[Asset]:
        """
        Convert vendor records one at a time, skipping the unusable ones.

        `to_asset` returns None for records without an identifier; records
        that fail validation are logged and skipped.
        """
        assets: list[Asset] = []
        skipped: int = 0

        for index, raw_item in enumerate(raw_items):
            try:
                asset: Asset | None = to_asset(raw_item)
            except (ValueError, TypeError, ArithmeticError) as error:
                logger.warning(
                    'Skipping malformed %s record #%d: %s',
                    self.provider_type.value,
                    index,
                    error,
                )
                skipped += 1
                continue

            if asset is None:
                logger.warning(
                    'Skipping %s record #%d without an identifier',
                    self.provider_type.value,
                    index,
                )
                skipped += 1
                continue

            assets.append(asset)

        if skipped:
            logger.info(
                '%s: normalized %d assets, skipped %d',
                self.provider_type.value,
                len(assets),
                skipped,
            )
        return assets
