# fleet_gps_sync/models/skybitz_responses.py
"""
Pydantic models for SkyBitz QueryPositions results.

SkyBitz answers with XML, not JSON:

    <skybitz>
      <error>0</error>
      <gls>
        <mtsn>12345</mtsn>
        <asset><assetid>TR-100</assetid><assettype>Trailer</assettype></asset>
        <latitude>32.7767</latitude>
        <longitude>-96.7970</longitude>
        <time>2024/01/15 14:30:00</time>
        <address><city>Dallas</city><state>TX</state></address>
      </gls>
      ...
    </skybitz>

The adapter flattens each <gls> element into a dict of text values (nested
elements become nested dicts) and validates it with these models. All leaf
values are strings or None at that point.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fleet_gps_sync.models.assets import coerce_datetime

__all__: list[str] = [
    'SkyBitzAddress',
    'SkyBitzAssetInfo',
    'SkyBitzModelBase',
    'SkyBitzPosition',
]


class SkyBitzModelBase(BaseModel):
    """Base class for SkyBitz models: unknown elements are ignored."""

    model_config = ConfigDict(
        extra='ignore',
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )


class SkyBitzAddress(SkyBitzModelBase):
    """Structured reverse-geocoded address."""

    city: str | None = None
    state: str | None = None


class SkyBitzAssetInfo(SkyBitzModelBase):
    """The <asset> block describing the tracked equipment."""

    asset_id: str | None = Field(default=None, alias='assetid')
    asset_type: str | None = Field(default=None, alias='assettype')
    vin: str | None = None
    license_plate: str | None = Field(default=None, alias='licenseplate')
    year: str | None = None


class SkyBitzPosition(SkyBitzModelBase):
    """
    One <gls> position report.

    Attributes:
        mtsn: Mobile terminal serial number of the tracking device.
        asset: Equipment details, if the terminal is assigned to an asset.
        latitude: Raw latitude text.
        longitude: Raw longitude text.
        time: Fix time, parsed from SkyBitz's "YYYY/MM/DD HH:MM:SS" (UTC).
        speed: Raw speed text.
        device_type: Terminal model.
        address: Either free text or a {city, state} block.
        location: Older gateway versions put the address here instead.
    """

    mtsn: str | None = None
    asset: SkyBitzAssetInfo | None = None
    latitude: str | None = None
    longitude: str | None = None
    time: datetime | None = None
    speed: str | None = None
    device_type: str | None = Field(default=None, alias='devicetype')
    address: SkyBitzAddress | str | None = None
    location: SkyBitzAddress | str | None = None

    @field_validator('time', mode='before')
    @classmethod
    def parse_skybitz_time(cls, value: Any) -> datetime | None:
        if isinstance(value, str):
            # SkyBitz uses slashes in dates, which fromisoformat rejects.
            value = value.strip().replace('/', '-')
        return coerce_datetime(value)

    @property
    def external_id(self) -> str | None:
        """The asset id when assigned, otherwise the terminal serial."""
        if self.asset is not None and self.asset.asset_id:
            return self.asset.asset_id
        return self.mtsn or None
