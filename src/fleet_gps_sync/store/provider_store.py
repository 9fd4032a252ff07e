# fleet_gps_sync/store/provider_store.py
"""
Provider lifecycle: add, read, update, delete and status tracking.

Credentials enter in plaintext, are checked structurally against the
vendor's credential model, and are stored only as vault ciphertext.
Reads by id go through a TTLCache owned by the store; every write
invalidates the affected key.

Provider state machine:
    untested --(test/sync ok)--> connected
    untested --(test/sync failed)--> error
    connected <-> error on later attempts
    any --(credentials changed)--> untested
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, sessionmaker

from fleet_gps_sync.cache import TTLCache
from fleet_gps_sync.factory import ProviderFactory
from fleet_gps_sync.models import (
    ProviderCreate,
    ProviderRecord,
    ProviderStatus,
    ProviderType,
    ProviderUpdate,
)
from fleet_gps_sync.store.database import transaction
from fleet_gps_sync.store.mapping import provider_row_to_record
from fleet_gps_sync.store.tables import ProviderRow, TrailerRow
from fleet_gps_sync.vault import CredentialVault

__all__: list[str] = [
    'InvalidCredentialsError',
    'ProviderNotFoundError',
    'ProviderStore',
]

logger: logging.Logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH: int = 2000


class ProviderNotFoundError(Exception):
    """
    Raised when a provider id does not exist.

    Attributes:
        provider_id: The id that was requested.
    """

    def __init__(self, provider_id: int) -> None:
        self.provider_id: int = provider_id
        super().__init__(f'Provider {provider_id} not found')


class InvalidCredentialsError(Exception):
    """
    Raised when credentials lack required fields for their vendor.

    Attributes:
        provider_type: Vendor the credentials were checked against.
    """

    def __init__(self, provider_type: ProviderType) -> None:
        self.provider_type: ProviderType = provider_type
        super().__init__(
            f'Invalid {provider_type.value} credentials: required fields are '
            'missing or blank'
        )


class ProviderStore:
    """
    Persistence and caching for GPS providers.

    Args:
        session_factory: SQLAlchemy session factory.
        vault: Encrypts credentials before they are stored.
        factory: Supplies the vendor adapter used for structural validation.
        cache: Read-through cache for provider records.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        vault: CredentialVault,
        factory: ProviderFactory,
        cache: TTLCache[int, ProviderRecord],
    ) -> None:
        self._session_factory: sessionmaker[Session] = session_factory
        self._vault: CredentialVault = vault
        self._factory: ProviderFactory = factory
        self._cache: TTLCache[int, ProviderRecord] = cache

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_provider(self, provider_id: int) -> ProviderRecord:
        """
        Load one provider, from cache when fresh.

        Raises:
            ProviderNotFoundError: If the id does not exist.
        """
        record: ProviderRecord | None = self._cache.get_or_load(
            provider_id, lambda: self._load(provider_id)
        )
        if record is None:
            raise ProviderNotFoundError(provider_id)
        return record

    def list_company_providers(self, company_id: str) -> list[ProviderRecord]:
        with transaction(self._session_factory, 'Provider listing') as session:
            rows = session.scalars(
                select(ProviderRow)
                .where(ProviderRow.company_id == company_id)
                .order_by(ProviderRow.name)
            ).all()
            return [provider_row_to_record(row) for row in rows]

    def _load(self, provider_id: int) -> ProviderRecord | None:
        with transaction(self._session_factory, 'Provider lookup') as session:
            row: ProviderRow | None = session.get(ProviderRow, provider_id)
            return provider_row_to_record(row) if row is not None else None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add_provider(self, provider: ProviderCreate) -> ProviderRecord:
        """
        Validate, encrypt and store a new provider with status 'untested'.

        Raises:
            InvalidCredentialsError: If required credential fields are missing.
            PersistenceError: If the company already has a provider with
                this name, or the insert fails.
        """
        self._check_credentials(provider.provider_type, provider.credentials)

        with transaction(self._session_factory, 'Provider create') as session:
            row = ProviderRow(
                company_id=provider.company_id,
                tenant_id=provider.tenant_id,
                provider_type=provider.provider_type.value,
                name=provider.name,
                credentials_encrypted=self._vault.encrypt_credentials(
                    provider.credentials
                ),
                status=ProviderStatus.UNTESTED.value,
                last_trailer_count=0,
            )
            session.add(row)
            session.flush()
            record: ProviderRecord = provider_row_to_record(row)

        logger.info(
            'Added %s provider id=%d name=%r for company %s',
            record.provider_type,
            record.id,
            record.name,
            record.company_id,
        )
        return record

    def update_provider(self, provider_id: int, changes: ProviderUpdate) -> ProviderRecord:
        """
        Rename a provider and/or replace its credentials.

        New credentials are re-encrypted and reset the status to 'untested'.

        Raises:
            ProviderNotFoundError: If the id does not exist.
            InvalidCredentialsError: If new credentials are incomplete.
            UnsupportedProviderError: If the stored provider type is unknown.
            PersistenceError: If the write fails.
        """
        with transaction(self._session_factory, 'Provider update') as session:
            row: ProviderRow | None = session.get(ProviderRow, provider_id)
            if row is None:
                raise ProviderNotFoundError(provider_id)

            if changes.name is not None:
                row.name = changes.name

            if changes.credentials is not None:
                provider_type = self._factory.resolve_type(row.provider_type)
                self._check_credentials(provider_type, changes.credentials)
                row.credentials_encrypted = self._vault.encrypt_credentials(
                    changes.credentials
                )
                row.status = ProviderStatus.UNTESTED.value
                row.last_error = None
                logger.info('Credentials replaced for provider id=%d', provider_id)

            session.flush()
            record: ProviderRecord = provider_row_to_record(row)

        self._cache.invalidate(provider_id)
        return record

    def delete_provider(self, provider_id: int, cascade_trailers: bool = False) -> int:
        """
        Delete a provider.

        Args:
            provider_id: Provider to delete.
            cascade_trailers: Also delete its trailers. When False, trailers
                are kept and detached (provider_id set to NULL).

        Returns:
            Number of trailers deleted (0 without cascade).

        Raises:
            ProviderNotFoundError: If the id does not exist.
            PersistenceError: If the delete fails.
        """
        with transaction(self._session_factory, 'Provider delete') as session:
            row: ProviderRow | None = session.get(ProviderRow, provider_id)
            if row is None:
                raise ProviderNotFoundError(provider_id)

            deleted_trailers: int = 0
            if cascade_trailers:
                result = session.execute(
                    delete(TrailerRow).where(TrailerRow.provider_id == provider_id)
                )
                deleted_trailers = result.rowcount or 0
            else:
                session.execute(
                    update(TrailerRow)
                    .where(TrailerRow.provider_id == provider_id)
                    .values(provider_id=None)
                )
            session.delete(row)

        self._cache.invalidate(provider_id)
        logger.info(
            'Deleted provider id=%d (cascade=%s, trailers deleted=%d)',
            provider_id,
            cascade_trailers,
            deleted_trailers,
        )
        return deleted_trailers

    def update_status(
        self,
        provider_id: int,
        status: ProviderStatus,
        trailer_count: int | None = None,
        error: str | None = None,
    ) -> ProviderRecord:
        """
        Record the outcome of a test or sync.

        CONNECTED clears last_error and stores the trailer count; ERROR
        stores the (truncated) message and keeps the previous count.

        Raises:
            ProviderNotFoundError: If the id does not exist.
            PersistenceError: If the write fails.
        """
        with transaction(self._session_factory, 'Provider status update') as session:
            row: ProviderRow | None = session.get(ProviderRow, provider_id)
            if row is None:
                raise ProviderNotFoundError(provider_id)

            row.status = status.value
            row.last_sync = datetime.now(UTC)
            if status is ProviderStatus.ERROR:
                row.last_error = (error or 'Unknown error')[:MAX_ERROR_LENGTH]
            else:
                row.last_error = None
            if trailer_count is not None:
                row.last_trailer_count = trailer_count

            session.flush()
            record: ProviderRecord = provider_row_to_record(row)

        self._cache.invalidate(provider_id)
        logger.debug('Provider id=%d status -> %s', provider_id, status.value)
        return record

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _check_credentials(
        self, provider_type: ProviderType, credentials: dict[str, Any]
    ) -> None:
        if not self._factory.get_provider(provider_type).validate_credentials(
            credentials
        ):
            raise InvalidCredentialsError(provider_type)
