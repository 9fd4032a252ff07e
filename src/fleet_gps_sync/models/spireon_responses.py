# fleet_gps_sync/models/spireon_responses.py
"""
Pydantic models for Spireon NSpire asset payloads.

GET {baseURL}/assets answers either with a page envelope
`{"content": [...], ...}` or with a bare array of assets. Each asset carries
its last known position under `lastLocation`; the address is a structured
object. Every field is optional: the adapter nulls what is missing instead
of rejecting the asset.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from fleet_gps_sync.common.addresses import format_city_state

__all__: list[str] = [
    'SpireonAddress',
    'SpireonAsset',
    'SpireonLocation',
    'SpireonModelBase',
]


class SpireonModelBase(BaseModel):
    """
    Base class for Spireon response models.

    Configuration:
        - extra='ignore': Spireon returns many fields we do not use.
        - populate_by_name=True: Allow both alias and field name.
        - coerce_numbers_to_str=True: ids and plates sometimes arrive numeric.
    """

    model_config = ConfigDict(
        extra='ignore',
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )


class SpireonAddress(SpireonModelBase):
    """Structured street address attached to a location fix."""

    line1: str | None = None
    city: str | None = None
    state_or_province: str | None = Field(default=None, alias='stateOrProvince')
    postal_code: str | None = Field(default=None, alias='postalCode')

    def to_display(self) -> str | None:
        """
        Render as "City, ST", the short form stored on trailers.

        Falls back to the street line when neither city nor state is known,
        and to None when every part is blank.
        """
        return format_city_state(self.city, self.state_or_province) or self.line1


class SpireonLocation(SpireonModelBase):
    """
    Last reported position.

    Coordinates are kept as raw values; the Asset model coerces them.
    """

    lat: Any = None
    lng: Any = None
    address: SpireonAddress | str | None = None


class SpireonAsset(SpireonModelBase):
    """
    One Spireon asset.

    Attributes:
        asset_id: Spireon asset identifier (becomes Asset.external_id).
        name: Display name, often "Trailer 1234".
        status: Vendor status vocabulary (stopped, moving, offline...).
        plate: First of plate / licensePlate / registration present.
        last_location: Last position fix, if any.
        location_last_reported: When the fix was taken.
        last_updated: Fallback timestamp when locationLastReported is absent.
    """

    asset_id: str | None = Field(default=None, alias='id')
    name: str | None = None
    status: str | None = None
    vin: str | None = None
    make: str | None = None
    model: str | None = None
    year: Any = None
    plate: str | None = Field(
        default=None,
        validation_alias=AliasChoices('plate', 'licensePlate', 'registration'),
    )
    last_location: SpireonLocation | None = Field(default=None, alias='lastLocation')
    location_last_reported: Any = Field(default=None, alias='locationLastReported')
    last_updated: Any = Field(default=None, alias='lastUpdated')
