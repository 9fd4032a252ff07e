# fleet_gps_sync/adapters/skybitz.py
"""
SkyBitz XML gateway adapter.

Protocol:
    GET {baseURL}/QueryPositions?customer=<username>&password=<password>
        &assetid=ALL&version=2.67

The gateway answers with XML. A non-zero <error> code (older gateways name
the element <e>) means the query was rejected, typically bad credentials.
Each <gls> element is one position report.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, ClassVar, Final

from fleet_gps_sync.adapters.base import ProviderAdapter
from fleet_gps_sync.client import VendorConnectionError
from fleet_gps_sync.common import extract_city_state, format_city_state
from fleet_gps_sync.models import (
    Asset,
    AssetLocation,
    ProviderType,
    RequestSpec,
    ResponseFormat,
    SkyBitzAddress,
    SkyBitzCredentials,
    SkyBitzPosition,
    VendorCredentials,
)

__all__: list[str] = ['SkyBitzAdapter', 'parse_positions_xml']

logger: logging.Logger = logging.getLogger(__name__)

QUERY_POSITIONS_PATH: Final[str] = '/QueryPositions'
QUERY_VERSION: Final[str] = '2.67'
ALL_ASSETS: Final[str] = 'ALL'
USER_AGENT: Final[str] = 'fleet-gps-sync/0.1'
ERROR_CODE_TAGS: Final[tuple[str, ...]] = ('error', 'e')
SUCCESS_CODE: Final[str] = '0'


def _element_to_value(element: ET.Element) -> dict[str, Any] | str | None:
    """
    Flatten an element: children become a dict, leaves become stripped text.

    Repeated child tags keep the last occurrence; the only repeated element
    we care about (<gls>) is collected separately.
    """
    children: list[ET.Element] = list(element)
    if children:
        return {child.tag: _element_to_value(child) for child in children}
    text: str = (element.text or '').strip()
    return text or None


def parse_positions_xml(xml_text: str) -> list[dict[str, Any]]:
    """
    Parse a QueryPositions response into one dict per <gls> element.

    Args:
        xml_text: Raw response body.

    Returns:
        Flattened position dicts; empty when the account has no positions.

    Raises:
        VendorConnectionError: If the body is not XML or carries a non-zero
            error code.
    """
    try:
        root: ET.Element = ET.fromstring(xml_text)
    except ET.ParseError as error:
        raise VendorConnectionError(
            f'SkyBitz returned invalid XML: {error}',
            response_body=xml_text[:500],
        ) from error

    for tag in ERROR_CODE_TAGS:
        code_element: ET.Element | None = root.find(tag)
        if code_element is None:
            continue
        code: str = (code_element.text or '').strip()
        if code and code != SUCCESS_CODE:
            raise VendorConnectionError(
                f'SkyBitz API error code: {code}',
                response_body=xml_text[:500],
            )

    positions: list[dict[str, Any]] = []
    for gls_element in root.iter('gls'):
        flattened: dict[str, Any] | str | None = _element_to_value(gls_element)
        if isinstance(flattened, dict):
            positions.append(flattened)
    return positions


class SkyBitzAdapter(ProviderAdapter[SkyBitzCredentials]):
    """Fetches SkyBitz position reports for every asset on the account."""

    provider_type: ClassVar[ProviderType] = ProviderType.SKYBITZ
    credentials_model: ClassVar[type[VendorCredentials]] = SkyBitzCredentials

    def build_request_spec(self, credentials: SkyBitzCredentials) -> RequestSpec:
        """Build the QueryPositions request; SkyBitz authenticates in the query."""
        base_url: str = credentials.base_url or self.default_base_url
        return RequestSpec(
            url=f'{base_url}{QUERY_POSITIONS_PATH}',
            headers={'User-Agent': USER_AGENT},
            query_params={
                'customer': credentials.username,
                'password': credentials.password.get_secret_value(),
                'assetid': ALL_ASSETS,
                'version': QUERY_VERSION,
            },
            response_format=ResponseFormat.TEXT,
        )

    def _fetch_assets(self, credentials: SkyBitzCredentials) -> list[Asset]:
        xml_text: str = self._client.request(self.build_request_spec(credentials))
        positions: list[dict[str, Any]] = parse_positions_xml(xml_text)
        logger.debug('SkyBitz returned %d position reports', len(positions))
        return self._normalize_each(positions, self._to_asset)

    @staticmethod
    def _resolve_address(position: SkyBitzPosition) -> str | None:
        # <address> wins over the older <location> element.
        for candidate in (position.address, position.location):
            match candidate:
                case str() as address_text:
                    return extract_city_state(address_text)
                case SkyBitzAddress(city=city, state=state):
                    return format_city_state(city, state)
        return None

    @classmethod
    def _to_asset(cls, raw_position: dict[str, Any]) -> Asset | None:
        position: SkyBitzPosition = SkyBitzPosition.model_validate(raw_position)
        external_id: str | None = position.external_id
        if not external_id:
            return None

        asset_info = position.asset
        return Asset(
            external_id=external_id,
            name=asset_info.asset_id if asset_info else None,
            vin=asset_info.vin if asset_info else None,
            make=asset_info.asset_type if asset_info else None,
            model=position.device_type,
            year=asset_info.year if asset_info else None,
            plate=asset_info.license_plate if asset_info else None,
            location=AssetLocation(
                lat=position.latitude,
                lng=position.longitude,
                address=cls._resolve_address(position),
                timestamp=position.time,
            ),
            raw_status=None,
        )
