# fleet_gps_sync/models/assets.py
"""
Vendor-normalized asset model.

Every adapter turns its vendor payload into a list of Asset objects. Assets
are transient: they live for one sync operation and are then reconciled
into Trailer rows. Optional fields are None when the vendor omitted them,
so a partial payload never fails the batch.
"""

import logging
import math
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger: logging.Logger = logging.getLogger(__name__)

__all__: list[str] = [
    'Asset',
    'AssetLocation',
    'coerce_datetime',
    'coerce_float',
    'coerce_year',
]

# Plausible model-year window; anything outside is vendor noise.
MIN_MODEL_YEAR: int = 1900
MAX_MODEL_YEAR: int = 2100


def coerce_float(value: Any) -> float | None:
    """
    Parse a vendor number that may arrive as str, int, float or junk.

    NaN and infinities (including "Infinity" strings and JSON 1e999) become
    None.
    """
    parsed: float
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        try:
            parsed = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        stripped: str = value.strip()
        if not stripped:
            return None
        try:
            parsed = float(stripped)
        except ValueError:
            return None
    else:
        return None
    return parsed if math.isfinite(parsed) else None


def coerce_datetime(value: Any) -> datetime | None:
    """
    Parse a vendor timestamp into an aware datetime.

    Accepts datetimes, ISO-8601 strings (including a trailing 'Z') and epoch
    seconds or milliseconds. Naive values are assumed to be UTC. Anything
    unparseable becomes None.
    """
    parsed: datetime | None = None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, int | float) and not isinstance(value, bool):
        epoch_seconds: float = float(value)
        # Values above 1e11 are epoch milliseconds.
        if epoch_seconds > 1e11:  # noqa: PLR2004
            epoch_seconds /= 1000.0
        try:
            parsed = datetime.fromtimestamp(epoch_seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str) and value.strip():
        text: str = value.strip()
        if text.endswith(('Z', 'z')):
            text = f'{text[:-1]}+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            numeric: float | None = coerce_float(text)
            return coerce_datetime(numeric) if numeric is not None else None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def coerce_year(value: Any) -> int | None:
    """Parse a model year, dropping blanks and out-of-range values."""
    parsed: float | None = coerce_float(value)
    if parsed is None:
        return None
    year: int = int(parsed)
    if not MIN_MODEL_YEAR <= year <= MAX_MODEL_YEAR:
        return None
    return year


class AssetLocation(BaseModel):
    """
    Last reported position of an asset.

    Attributes:
        lat: Latitude in decimal degrees (WGS84).
        lng: Longitude in decimal degrees (WGS84).
        address: Short human-readable location, usually "City, ST".
        timestamp: When the vendor recorded the position (UTC when known).
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    lat: float | None = None
    lng: float | None = None
    address: str | None = None
    timestamp: datetime | None = None

    @field_validator('lat', 'lng', mode='before')
    @classmethod
    def parse_coordinate(cls, value: Any) -> float | None:
        return coerce_float(value)

    @field_validator('timestamp', mode='before')
    @classmethod
    def parse_timestamp(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)

    @field_validator('address', mode='before')
    @classmethod
    def blank_address_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value


class Asset(BaseModel):
    """
    One vendor asset normalized to the common schema.

    Attributes:
        external_id: Vendor identifier, stable across syncs. Matched against
            Trailer.external_id within a company.
        name: Vendor display name (may contain the word "trailer").
        vin: Vehicle Identification Number.
        make: Manufacturer.
        model: Model name.
        year: Model year.
        plate: License plate.
        location: Last known position; fields are None when unknown.
        raw_status: Vendor status string, unmapped.
        company_id: Owning company, tagged by the orchestrator.
        provider_id: Source provider row, tagged by the orchestrator.
        tenant_id: Owning tenant, tagged by the orchestrator.
    """

    model_config = ConfigDict(extra='forbid', frozen=True, str_strip_whitespace=True)

    external_id: str = Field(min_length=1)
    name: str | None = None
    vin: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    plate: str | None = None
    location: AssetLocation = Field(default_factory=AssetLocation)
    raw_status: str | None = None

    company_id: str | None = None
    provider_id: int | None = None
    tenant_id: str | None = None

    @field_validator('external_id', mode='before')
    @classmethod
    def stringify_external_id(cls, value: Any) -> Any:
        # Some vendors use numeric ids; rows store them as text.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator('name', 'vin', 'make', 'model', 'plate', 'raw_status', mode='before')
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, int | float) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator('year', mode='before')
    @classmethod
    def parse_year(cls, value: Any) -> int | None:
        return coerce_year(value)

    def tagged(self, company_id: str, provider_id: int, tenant_id: str) -> 'Asset':
        """Return a copy scoped to the provider's company and tenant."""
        return self.model_copy(
            update={
                'company_id': company_id,
                'provider_id': provider_id,
                'tenant_id': tenant_id,
            }
        )
