# fleet_gps_sync/store/mapping.py
"""
Row <-> domain record mapping at the persistence boundary.

This is the only place ORM rows are converted to pydantic records and back.
Enum columns are stored as their string values; timestamps are stored
timezone-aware and re-tagged as UTC when a backend (SQLite) returns them
naive.
"""

from datetime import UTC, datetime
from typing import Any

from fleet_gps_sync.models import (
    GpsStatus,
    ProviderRecord,
    ProviderStatus,
    ProviderType,
    TrailerCreate,
    TrailerRecord,
    TrailerStatus,
    TrailerUpdate,
)
from fleet_gps_sync.store.tables import ProviderRow, TrailerRow

__all__: list[str] = [
    'apply_trailer_update',
    'provider_row_to_record',
    'trailer_create_to_row',
    'trailer_row_to_record',
]

_NOT_NULL_COLUMNS: frozenset[str] = frozenset(
    {'gps_status', 'status', 'gps_enabled', 'manual_location_override'}
)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _column_value(value: Any) -> Any:
    # str-valued enums are persisted as plain strings
    if isinstance(value, GpsStatus | TrailerStatus | ProviderStatus | ProviderType):
        return value.value
    return value


def provider_row_to_record(row: ProviderRow) -> ProviderRecord:
    return ProviderRecord(
        id=row.id,
        company_id=row.company_id,
        tenant_id=row.tenant_id,
        provider_type=row.provider_type,
        name=row.name,
        credentials_encrypted=row.credentials_encrypted,
        status=ProviderStatus(row.status),
        last_error=row.last_error,
        last_trailer_count=row.last_trailer_count,
        last_sync=_as_utc(row.last_sync),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def trailer_row_to_record(row: TrailerRow) -> TrailerRecord:
    return TrailerRecord(
        id=row.id,
        external_id=row.external_id,
        company_id=row.company_id,
        tenant_id=row.tenant_id,
        provider_id=row.provider_id,
        unit_number=row.unit_number,
        vin=row.vin,
        make=row.make,
        model=row.model,
        year=row.year,
        plate=row.plate,
        last_latitude=row.last_latitude,
        last_longitude=row.last_longitude,
        last_address=row.last_address,
        last_gps_update=_as_utc(row.last_gps_update),
        last_sync=_as_utc(row.last_sync),
        gps_status=GpsStatus(row.gps_status),
        gps_enabled=row.gps_enabled,
        status=TrailerStatus(row.status),
        manual_location_override=row.manual_location_override,
    )


def trailer_create_to_row(trailer: TrailerCreate) -> TrailerRow:
    columns: dict[str, Any] = {
        field_name: _column_value(value)
        for field_name, value in trailer.model_dump().items()
    }
    return TrailerRow(**columns)


def apply_trailer_update(row: TrailerRow, update: TrailerUpdate) -> list[str]:
    """
    Copy the explicitly set fields of `update` onto `row`.

    Returns:
        Names of the columns written.
    """
    written: list[str] = []
    for column_name, value in update.changes().items():
        if column_name in _NOT_NULL_COLUMNS and value is None:
            # NOT NULL columns: None means "leave unchanged".
            continue
        setattr(row, column_name, _column_value(value))
        written.append(column_name)
    return written
