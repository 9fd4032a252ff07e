# fleet_gps_sync/models/records.py
"""
Domain records for persisted providers and trailers.

These are the shapes the rest of the package works with. SQLAlchemy rows
never leave the store package; `store/mapping.py` converts between rows and
these models. At the HTTP boundary the same models serialize with camelCase
keys (`model_dump(by_alias=True)`), so field-name translation happens in
exactly two places.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fleet_gps_sync.models.enums import (
    GpsStatus,
    ProviderStatus,
    ProviderType,
    TrailerStatus,
)

__all__: list[str] = [
    'CamelModel',
    'ProviderCreate',
    'ProviderRecord',
    'ProviderUpdate',
    'TrailerCreate',
    'TrailerRecord',
    'TrailerUpdate',
]


class CamelModel(BaseModel):
    """Base for models that cross the HTTP boundary with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
    )


# =============================================================================
# Providers
# =============================================================================


class ProviderRecord(CamelModel):
    """
    A configured GPS provider for one company.

    Attributes:
        id: Primary key.
        company_id: Owning company.
        tenant_id: Owning tenant.
        provider_type: Vendor type string as stored; resolved to an adapter
            by ProviderFactory. Serialized as "type".
        name: User-facing label, unique within the company.
        credentials_encrypted: Vault ciphertext. Never serialized.
        status: Outcome of the last test or sync.
        last_error: Message from the last failure, cleared on success.
        last_trailer_count: Assets seen by the last successful test or sync.
        last_sync: When the last sync or test finished.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    company_id: str
    tenant_id: str
    provider_type: str = Field(alias='type')
    name: str
    credentials_encrypted: str = Field(exclude=True, repr=False)
    status: ProviderStatus = ProviderStatus.UNTESTED
    last_error: str | None = None
    last_trailer_count: int = 0
    last_sync: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProviderCreate(CamelModel):
    """Input for ProviderStore.add_provider; credentials arrive in plaintext."""

    company_id: str = Field(min_length=1)
    tenant_id: str = Field(min_length=1)
    provider_type: ProviderType = Field(alias='type')
    name: str = Field(min_length=1)
    credentials: dict[str, Any]


class ProviderUpdate(CamelModel):
    """Partial update; only fields that were set are applied."""

    name: str | None = Field(default=None, min_length=1)
    credentials: dict[str, Any] | None = None


# =============================================================================
# Trailers
# =============================================================================


class TrailerRecord(CamelModel):
    """
    A persisted trailer.

    `(tenant_id, unit_number)` and `(company_id, external_id)` are unique.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    external_id: str | None
    company_id: str
    tenant_id: str
    provider_id: int | None
    unit_number: str
    vin: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    plate: str | None = None
    last_latitude: float | None = None
    last_longitude: float | None = None
    last_address: str | None = None
    last_gps_update: datetime | None = None
    last_sync: datetime | None = None
    gps_status: GpsStatus = GpsStatus.AVAILABLE
    gps_enabled: bool = True
    status: TrailerStatus = TrailerStatus.AVAILABLE
    manual_location_override: bool = False


class TrailerCreate(CamelModel):
    """Fields for a new trailer row."""

    external_id: str | None
    company_id: str
    tenant_id: str
    provider_id: int | None
    unit_number: str = Field(min_length=1)
    vin: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    plate: str | None = None
    last_latitude: float | None = None
    last_longitude: float | None = None
    last_address: str | None = None
    last_gps_update: datetime | None = None
    last_sync: datetime | None = None
    gps_status: GpsStatus = GpsStatus.AVAILABLE
    gps_enabled: bool = True
    status: TrailerStatus = TrailerStatus.AVAILABLE
    manual_location_override: bool = False


class TrailerUpdate(CamelModel):
    """
    Partial trailer update.

    Only explicitly set fields are written, so setting a field to None clears
    it while leaving a field out keeps the stored value.
    """

    provider_id: int | None = None
    vin: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    plate: str | None = None
    last_latitude: float | None = None
    last_longitude: float | None = None
    last_address: str | None = None
    last_gps_update: datetime | None = None
    last_sync: datetime | None = None
    gps_status: GpsStatus | None = None
    gps_enabled: bool | None = None
    status: TrailerStatus | None = None
    manual_location_override: bool | None = None

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller set, keyed by column name."""
        return self.model_dump(exclude_unset=True)
