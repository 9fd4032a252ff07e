# fleet_gps_sync/models/samsara_responses.py
"""
Pydantic models for Samsara fleet API payloads.

Samsara wraps list results as {"data": [...], "pagination": {...}}:
- Fields use camelCase (mapped to snake_case via aliases)
- Pagination is cursor based with endCursor/hasNextPage

Vehicle details come from /fleet/vehicles and the latest GPS fix from
/fleet/vehicles/locations; the adapter joins them on the vehicle id.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__: list[str] = [
    'SamsaraLocationSnapshot',
    'SamsaraModelBase',
    'SamsaraPage',
    'SamsaraPaginationInfo',
    'SamsaraReverseGeo',
    'SamsaraVehicle',
    'SamsaraVehicleLocation',
]

TRAILER_VEHICLE_TYPE: str = 'trailer'


class SamsaraModelBase(BaseModel):
    """
    Base class for all Samsara response models.

    Configuration:
        - extra='ignore': Silently ignore unknown fields from API.
        - populate_by_name=True: Allow both alias (camelCase) and field name.
        - str_strip_whitespace=True: Trim whitespace from strings.
    """

    model_config = ConfigDict(
        extra='ignore',
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )


class SamsaraPaginationInfo(SamsaraModelBase):
    """Cursor metadata; an empty end_cursor means there is no next page."""

    end_cursor: str = Field(default='', alias='endCursor')
    has_next_page: bool = Field(default=False, alias='hasNextPage')


class SamsaraPage(SamsaraModelBase):
    """
    List envelope.

    Items stay as raw dicts so one malformed record can be skipped without
    losing the page.
    """

    data: list[dict[str, Any]] = Field(default_factory=list)
    pagination: SamsaraPaginationInfo = Field(default_factory=SamsaraPaginationInfo)


class SamsaraVehicle(SamsaraModelBase):
    """
    A vehicle (tractor or trailer) from /fleet/vehicles.

    Attributes:
        vehicle_id: Samsara's vehicle id (becomes Asset.external_id).
        vehicle_type: 'trailer' for trailers on accounts that classify them.
        license_plate: Plate; older accounts send it as `plate`.
    """

    vehicle_id: str | None = Field(default=None, alias='id')
    name: str | None = None
    vin: str | None = None
    make: str | None = None
    model: str | None = None
    year: Any = None
    license_plate: str | None = Field(default=None, alias='licensePlate')
    plate: str | None = None
    vehicle_type: str | None = Field(default=None, alias='vehicleType')

    @property
    def is_trailer(self) -> bool:
        """True when Samsara types it as a trailer or its name says so."""
        if (self.vehicle_type or '').lower() == TRAILER_VEHICLE_TYPE:
            return True
        return TRAILER_VEHICLE_TYPE in (self.name or '').lower()


class SamsaraReverseGeo(SamsaraModelBase):
    """Reverse geocoding result attached to a fix."""

    formatted_location: str | None = Field(default=None, alias='formattedLocation')


class SamsaraLocationSnapshot(SamsaraModelBase):
    """Latest GPS fix for a vehicle."""

    time: Any = None
    latitude: Any = None
    longitude: Any = None
    reverse_geo: SamsaraReverseGeo | None = Field(default=None, alias='reverseGeo')


class SamsaraVehicleLocation(SamsaraModelBase):
    """One item from /fleet/vehicles/locations."""

    vehicle_id: str | None = Field(default=None, alias='id')
    name: str | None = None
    location: SamsaraLocationSnapshot | None = None
