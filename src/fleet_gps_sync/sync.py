# fleet_gps_sync/sync.py
"""
Sync orchestrator: credentials -> adapter -> assets -> trailers.

Control flow for one provider:

    ProviderStore (load) -> CredentialVault (decrypt) -> ProviderFactory
    (resolve adapter) -> adapter.fetch_data (vendor HTTP) -> reconcile
    -> TrailerStore (create/update) -> ProviderStore (record status)

Credential, vendor-type and vendor-connection failures abort the sync of
that provider and come back as a structured failure; they are never raised
past `sync_provider`. Every sync is a single best-effort attempt triggered
by an explicit request; retry policy is the caller's decision.
"""

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from fleet_gps_sync.adapters import ProviderAdapter, ProviderStatusReport
from fleet_gps_sync.client import VendorConnectionError
from fleet_gps_sync.config import SyncPolicyConfig
from fleet_gps_sync.factory import ProviderFactory, UnsupportedProviderError
from fleet_gps_sync.models import Asset, CamelModel, ProviderRecord, ProviderStatus
from fleet_gps_sync.reconcile import (
    ReconcileReport,
    RefreshReport,
    reconcile_assets,
    refresh_trailer_locations,
)
from fleet_gps_sync.store import ProviderStore, TrailerStore
from fleet_gps_sync.vault import CredentialError, CredentialVault

__all__: list[str] = [
    'ConnectionTestResult',
    'RefreshResult',
    'SyncErrorType',
    'SyncOrchestrator',
    'SyncReport',
    'SyncResult',
]

logger: logging.Logger = logging.getLogger(__name__)

SyncErrorType = Literal['credential', 'unsupported_provider', 'vendor_connection']


class SyncResult(BaseModel):
    """
    Outcome of fetching one provider's assets.

    Attributes:
        success: True when assets were fetched.
        assets: Tagged assets (empty on failure).
        error: Failure message when success is False.
        error_type: Which stage failed.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    success: bool
    assets: list[Asset] = Field(default_factory=list)
    error: str | None = None
    error_type: SyncErrorType | None = None


class SyncReport(CamelModel):
    """Outcome of a full sync, as reported to the caller."""

    model_config = ConfigDict(frozen=True)

    success: bool
    created_count: int = 0
    updated_count: int = 0
    failed_count: int = 0
    error: str | None = None


class RefreshResult(CamelModel):
    """Outcome of a location refresh, as reported to the caller."""

    model_config = ConfigDict(frozen=True)

    success: bool
    updated_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    error: str | None = None


class ConnectionTestResult(CamelModel):
    """Outcome of a connection test."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    error: str | None = None
    trailer_count: int = 0


class SyncOrchestrator:
    """
    Runs syncs, connection tests and location refreshes for providers.

    Args:
        provider_store: Provider records and status tracking.
        trailer_store: Trailer persistence.
        vault: Decrypts stored credentials.
        factory: Resolves adapters by provider type.
        policy: Reconciliation policy.
    """

    def __init__(
        self,
        provider_store: ProviderStore,
        trailer_store: TrailerStore,
        vault: CredentialVault,
        factory: ProviderFactory,
        policy: SyncPolicyConfig,
    ) -> None:
        self._provider_store: ProviderStore = provider_store
        self._trailer_store: TrailerStore = trailer_store
        self._vault: CredentialVault = vault
        self._factory: ProviderFactory = factory
        self._policy: SyncPolicyConfig = policy

    # -------------------------------------------------------------------------
    # Fetch
    # -------------------------------------------------------------------------

    def sync_provider(self, provider: ProviderRecord) -> SyncResult:
        """
        Fetch and tag the assets of one provider.

        Steps: decrypt credentials, resolve the adapter, fetch, then tag every
        asset with the provider's company_id, provider_id and tenant_id.

        Returns:
            SyncResult; failures are reported, not raised.
        """
        try:
            credentials: dict[str, Any] = self._vault.decrypt_credentials(
                provider.credentials_encrypted
            )
        except CredentialError as error:
            logger.error('Provider %d: credential decryption failed: %s', provider.id, error)
            return SyncResult(success=False, error=str(error), error_type='credential')

        try:
            adapter: ProviderAdapter[Any] = self._factory.get_provider(
                provider.provider_type
            )
        except UnsupportedProviderError as error:
            return SyncResult(
                success=False, error=str(error), error_type='unsupported_provider'
            )

        try:
            assets: list[Asset] = adapter.fetch_data(credentials)
        except VendorConnectionError as error:
            logger.error(
                'Provider %d (%s): vendor fetch failed: %s',
                provider.id,
                provider.provider_type,
                error,
            )
            return SyncResult(
                success=False, error=str(error), error_type='vendor_connection'
            )

        tagged_assets: list[Asset] = [
            asset.tagged(provider.company_id, provider.id, provider.tenant_id)
            for asset in assets
        ]
        logger.info(
            'Provider %d (%s): fetched %d assets',
            provider.id,
            provider.provider_type,
            len(tagged_assets),
        )
        return SyncResult(success=True, assets=tagged_assets)

    # -------------------------------------------------------------------------
    # Full operations
    # -------------------------------------------------------------------------

    def sync_and_reconcile(self, provider_id: int) -> SyncReport:
        """
        Sync one provider end to end and record its status.

        Raises:
            ProviderNotFoundError: If the provider does not exist.
            PersistenceError: If the provider status cannot be recorded.
        """
        provider: ProviderRecord = self._provider_store.get_provider(provider_id)
        result: SyncResult = self.sync_provider(provider)

        if not result.success:
            self._provider_store.update_status(
                provider_id, ProviderStatus.ERROR, error=result.error
            )
            return SyncReport(success=False, error=result.error)

        report: ReconcileReport = reconcile_assets(
            result.assets, self._trailer_store, self._policy
        )
        self._provider_store.update_status(
            provider_id,
            ProviderStatus.CONNECTED,
            trailer_count=len(result.assets),
        )
        return SyncReport(
            success=True,
            created_count=report.created_count,
            updated_count=report.updated_count,
            failed_count=report.failed_count,
        )

    def test_connection(self, provider_id: int) -> ConnectionTestResult:
        """
        Probe a provider's credentials against the vendor and record status.

        Raises:
            ProviderNotFoundError: If the provider does not exist.
        """
        provider: ProviderRecord = self._provider_store.get_provider(provider_id)

        try:
            credentials: dict[str, Any] = self._vault.decrypt_credentials(
                provider.credentials_encrypted
            )
            adapter: ProviderAdapter[Any] = self._factory.get_provider(
                provider.provider_type
            )
        except (CredentialError, UnsupportedProviderError) as error:
            return self._record_test_failure(provider_id, str(error))

        if not adapter.validate_credentials(credentials):
            return self._record_test_failure(provider_id, 'Invalid credentials')

        status_report: ProviderStatusReport = adapter.get_status(credentials)
        if status_report.status is not ProviderStatus.CONNECTED:
            return self._record_test_failure(
                provider_id, status_report.error or 'Connection failed'
            )

        self._provider_store.update_status(
            provider_id,
            ProviderStatus.CONNECTED,
            trailer_count=status_report.trailer_count,
        )
        logger.info(
            'Provider %d connection test passed: %d trailers',
            provider_id,
            status_report.trailer_count,
        )
        return ConnectionTestResult(
            success=True,
            message=(
                f'Connected to {provider.provider_type}: '
                f'{status_report.trailer_count} trailers found'
            ),
            trailer_count=status_report.trailer_count,
        )

    def refresh_locations(self, provider_id: int) -> RefreshResult:
        """
        Refresh locations of existing trailers without creating new ones.

        A failed fetch is recorded on the provider and reported, not raised.

        Raises:
            ProviderNotFoundError: If the provider does not exist.
        """
        provider: ProviderRecord = self._provider_store.get_provider(provider_id)
        result: SyncResult = self.sync_provider(provider)

        if not result.success:
            self._provider_store.update_status(
                provider_id, ProviderStatus.ERROR, error=result.error
            )
            return RefreshResult(success=False, error=result.error)

        report: RefreshReport = refresh_trailer_locations(
            result.assets, self._trailer_store, self._policy
        )
        return RefreshResult(
            success=True,
            updated_count=report.updated_count,
            skipped_count=report.skipped_count,
            failed_count=report.failed_count,
        )

    def _record_test_failure(self, provider_id: int, message: str) -> ConnectionTestResult:
        logger.warning('Provider %d connection test failed: %s', provider_id, message)
        self._provider_store.update_status(provider_id, ProviderStatus.ERROR, error=message)
        return ConnectionTestResult(
            success=False,
            message='Connection test failed',
            error=message,
        )
