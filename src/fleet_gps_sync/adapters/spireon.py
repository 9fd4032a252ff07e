# fleet_gps_sync/adapters/spireon.py
"""
Spireon NSpire adapter.

Protocol:
    GET {baseURL}/assets
    Authorization: Basic (username, password), set by httpx
    X-Nspire-AppToken: <apiKey>

The response is either a page envelope {"content": [...]} or a bare array.
"""

import logging
from typing import Any, ClassVar

from fleet_gps_sync.adapters.base import ProviderAdapter
from fleet_gps_sync.client import VendorConnectionError
from fleet_gps_sync.common import extract_city_state
from fleet_gps_sync.models import (
    Asset,
    AssetLocation,
    ProviderType,
    RequestSpec,
    SpireonAddress,
    SpireonAsset,
    SpireonCredentials,
    VendorCredentials,
)

__all__: list[str] = ['SpireonAdapter']

logger: logging.Logger = logging.getLogger(__name__)

ASSETS_PATH: str = '/assets'


class SpireonAdapter(ProviderAdapter[SpireonCredentials]):
    """Fetches Spireon assets and their last reported positions."""

    provider_type: ClassVar[ProviderType] = ProviderType.SPIREON
    credentials_model: ClassVar[type[VendorCredentials]] = SpireonCredentials

    def build_request_spec(self, credentials: SpireonCredentials) -> RequestSpec:
        """Build the authenticated asset listing request."""
        base_url: str = credentials.base_url or self.default_base_url
        return RequestSpec(
            url=f'{base_url}{ASSETS_PATH}',
            auth=(credentials.username, credentials.password.get_secret_value()),
            headers={
                'X-Nspire-AppToken': credentials.api_key.get_secret_value(),
                'Accept': 'application/json',
                'Content-Type': 'application/json',
            },
        )

    def _fetch_assets(self, credentials: SpireonCredentials) -> list[Asset]:
        payload: Any = self._client.request(self.build_request_spec(credentials))
        raw_assets: list[Any] = self._extract_asset_list(payload)
        logger.debug('Spireon returned %d raw assets', len(raw_assets))
        return self._normalize_each(raw_assets, self._to_asset)

    @staticmethod
    def _extract_asset_list(payload: Any) -> list[Any]:
        """
        Unwrap the asset array from either response shape.

        Raises:
            VendorConnectionError: If the payload is neither shape.
        """
        match payload:
            case list():
                return payload
            case {'content': list() as content}:
                return content
            case {'content': None}:
                return []
            case _:
                raise VendorConnectionError(
                    'Unexpected Spireon response: expected an asset array or '
                    f'a "content" envelope, got {type(payload).__name__}'
                )

    @staticmethod
    def _to_asset(raw_asset: Any) -> Asset | None:
        vendor_asset: SpireonAsset = SpireonAsset.model_validate(raw_asset)
        if not vendor_asset.asset_id:
            return None

        lat: Any = None
        lng: Any = None
        address: str | None = None
        if vendor_asset.last_location is not None:
            lat = vendor_asset.last_location.lat
            lng = vendor_asset.last_location.lng
            match vendor_asset.last_location.address:
                case str() as address_text:
                    address = extract_city_state(address_text)
                case SpireonAddress() as structured_address:
                    address = structured_address.to_display()
                case _:
                    address = None

        location = AssetLocation(
            lat=lat,
            lng=lng,
            address=address,
            timestamp=vendor_asset.location_last_reported or vendor_asset.last_updated,
        )

        return Asset(
            external_id=vendor_asset.asset_id,
            name=vendor_asset.name,
            vin=vendor_asset.vin,
            make=vendor_asset.make,
            model=vendor_asset.model,
            year=vendor_asset.year,
            plate=vendor_asset.plate,
            location=location,
            raw_status=vendor_asset.status,
        )
