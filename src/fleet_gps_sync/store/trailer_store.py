# fleet_gps_sync/store/trailer_store.py
"""
Trailer persistence keyed by external id within a company.

Each method runs in its own transaction. Unique constraints on
(company_id, external_id) and (tenant_id, unit_number) are enforced by the
database; a violation surfaces as PersistenceError for the caller to handle
per asset.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from fleet_gps_sync.models import TrailerCreate, TrailerRecord, TrailerUpdate
from fleet_gps_sync.store.database import PersistenceError, transaction
from fleet_gps_sync.store.mapping import (
    apply_trailer_update,
    trailer_create_to_row,
    trailer_row_to_record,
)
from fleet_gps_sync.store.tables import TrailerRow

__all__: list[str] = ['TrailerStore']

logger: logging.Logger = logging.getLogger(__name__)


class TrailerStore:
    """Create, update and query trailers."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory: sessionmaker[Session] = session_factory

    def get_by_external_id(
        self, external_id: str, company_id: str
    ) -> TrailerRecord | None:
        """Find the trailer a vendor asset maps to, scoped to one company."""
        with transaction(self._session_factory, 'Trailer lookup') as session:
            row: TrailerRow | None = session.scalars(
                select(TrailerRow).where(
                    TrailerRow.external_id == external_id,
                    TrailerRow.company_id == company_id,
                )
            ).first()
            return trailer_row_to_record(row) if row is not None else None

    def get_trailer(self, trailer_id: int) -> TrailerRecord | None:
        with transaction(self._session_factory, 'Trailer lookup') as session:
            row: TrailerRow | None = session.get(TrailerRow, trailer_id)
            return trailer_row_to_record(row) if row is not None else None

    def unit_number_taken(self, tenant_id: str, unit_number: str) -> bool:
        """True if the tenant already has a trailer with this unit number."""
        with transaction(self._session_factory, 'Unit number lookup') as session:
            count: int = session.scalar(
                select(func.count())
                .select_from(TrailerRow)
                .where(
                    TrailerRow.tenant_id == tenant_id,
                    TrailerRow.unit_number == unit_number,
                )
            ) or 0
            return count > 0

    def create_trailer(self, trailer: TrailerCreate) -> TrailerRecord:
        """
        Insert a trailer.

        Raises:
            PersistenceError: On a unique-constraint violation or other
                database failure.
        """
        with transaction(self._session_factory, 'Trailer create') as session:
            row: TrailerRow = trailer_create_to_row(trailer)
            session.add(row)
            session.flush()
            record: TrailerRecord = trailer_row_to_record(row)

        logger.debug(
            'Created trailer id=%d unit=%r external_id=%r',
            record.id,
            record.unit_number,
            record.external_id,
        )
        return record

    def update_trailer(self, trailer_id: int, update: TrailerUpdate) -> TrailerRecord:
        """
        Apply a partial update.

        Raises:
            PersistenceError: If the trailer does not exist or the write fails.
        """
        with transaction(self._session_factory, 'Trailer update') as session:
            row: TrailerRow | None = session.get(TrailerRow, trailer_id)
            if row is None:
                raise PersistenceError(f'Trailer {trailer_id} not found')
            written: list[str] = apply_trailer_update(row, update)
            session.flush()
            record: TrailerRecord = trailer_row_to_record(row)

        logger.debug('Updated trailer id=%d columns=%s', trailer_id, written)
        return record

    def list_by_provider(self, provider_id: int) -> list[TrailerRecord]:
        with transaction(self._session_factory, 'Trailer listing') as session:
            rows = session.scalars(
                select(TrailerRow)
                .where(TrailerRow.provider_id == provider_id)
                .order_by(TrailerRow.id)
            ).all()
            return [trailer_row_to_record(row) for row in rows]

    def list_by_company(self, company_id: str) -> list[TrailerRecord]:
        with transaction(self._session_factory, 'Trailer listing') as session:
            rows = session.scalars(
                select(TrailerRow)
                .where(TrailerRow.company_id == company_id)
                .order_by(TrailerRow.id)
            ).all()
            return [trailer_row_to_record(row) for row in rows]
