# fleet_gps_sync/store/tables.py
"""ORM tables for providers and trailers."""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from fleet_gps_sync.store.database import Base

__all__: list[str] = ['ProviderRow', 'TrailerRow']


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ProviderRow(Base):
    __tablename__ = 'gps_providers'
    __table_args__ = (
        UniqueConstraint('company_id', 'name', name='uq_gps_providers_company_name'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[str] = mapped_column(String(64), index=True)
    tenant_id: Mapped[str] = mapped_column(String(64), index=True)
    provider_type: Mapped[str] = mapped_column(String(32))
    name: Mapped[str] = mapped_column(String(255))
    credentials_encrypted: Mapped[str] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(32), default='untested')
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_trailer_count: Mapped[int] = mapped_column(Integer, default=0)
    last_sync: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )


class TrailerRow(Base):
    __tablename__ = 'trailers'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'unit_number', name='uq_trailers_tenant_unit'),
        UniqueConstraint(
            'company_id', 'external_id', name='uq_trailers_company_external_id'
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company_id: Mapped[str] = mapped_column(String(64), index=True)
    tenant_id: Mapped[str] = mapped_column(String(64), index=True)
    provider_id: Mapped[int | None] = mapped_column(
        ForeignKey('gps_providers.id', ondelete='SET NULL'), nullable=True, index=True
    )
    unit_number: Mapped[str] = mapped_column(String(255))

    vin: Mapped[str | None] = mapped_column(String(64), nullable=True)
    make: Mapped[str | None] = mapped_column(String(128), nullable=True)
    model: Mapped[str | None] = mapped_column(String(128), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    plate: Mapped[str | None] = mapped_column(String(32), nullable=True)

    last_latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    last_longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    last_address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    last_gps_update: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_sync: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    gps_status: Mapped[str] = mapped_column(String(32), default='available')
    gps_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    status: Mapped[str] = mapped_column(String(32), default='available')
    manual_location_override: Mapped[bool] = mapped_column(Boolean, default=False)
