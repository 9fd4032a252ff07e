# fleet_gps_sync/adapters/samsara.py
"""
Samsara fleet API adapter.

Protocol:
    GET {apiUrl}/fleet/vehicles            vehicle details
    GET {apiUrl}/fleet/vehicles/locations  latest GPS fix per vehicle
    Authorization: Bearer <apiToken>

Both listings are cursor paginated ({"pagination": {"endCursor",
"hasNextPage"}}, next page requested with ?after=<endCursor>). Vehicles are
joined to their fix by vehicle id. Accounts mix tractors and trailers, so
by default only trailers are kept.
"""

import logging
from collections.abc import Iterator
from typing import Any, ClassVar, Final

from pydantic import ValidationError

from fleet_gps_sync.adapters.base import ProviderAdapter
from fleet_gps_sync.client import VendorClient, VendorConnectionError
from fleet_gps_sync.common import extract_city_state
from fleet_gps_sync.config import SamsaraVendorConfig
from fleet_gps_sync.models import (
    Asset,
    AssetLocation,
    PaginationState,
    ProviderType,
    RequestSpec,
    SamsaraCredentials,
    SamsaraLocationSnapshot,
    SamsaraPage,
    SamsaraVehicle,
    SamsaraVehicleLocation,
    VendorCredentials,
)

__all__: list[str] = ['SamsaraAdapter']

logger: logging.Logger = logging.getLogger(__name__)

VEHICLES_PATH: Final[str] = '/fleet/vehicles'
VEHICLE_LOCATIONS_PATH: Final[str] = '/fleet/vehicles/locations'
PAGE_LIMIT: Final[str] = '512'
# Guard against a vendor that keeps returning hasNextPage with the same cursor.
MAX_PAGES: Final[int] = 1000


class SamsaraAdapter(ProviderAdapter[SamsaraCredentials]):
    """Fetches Samsara vehicles joined with their latest locations."""

    provider_type: ClassVar[ProviderType] = ProviderType.SAMSARA
    credentials_model: ClassVar[type[VendorCredentials]] = SamsaraCredentials

    def __init__(self, client: VendorClient, vendor_config: SamsaraVendorConfig) -> None:
        super().__init__(client, vendor_config)
        self._trailers_only: bool = vendor_config.trailers_only

    def build_request_spec(
        self,
        credentials: SamsaraCredentials,
        path: str,
        pagination_state: PaginationState | None = None,
    ) -> RequestSpec:
        """Build one page request for a listing endpoint."""
        query_params: dict[str, str] = {'limit': PAGE_LIMIT}
        if pagination_state is not None:
            query_params.update(pagination_state.next_page_params)

        return RequestSpec(
            url=f'{credentials.api_url}{path}',
            headers={
                'Authorization': f'Bearer {credentials.api_token.get_secret_value()}',
                'Accept': 'application/json',
            },
            query_params=query_params,
        )

    def _fetch_assets(self, credentials: SamsaraCredentials) -> list[Asset]:
        vehicles: list[dict[str, Any]] = list(
            self._paginate(credentials, VEHICLES_PATH)
        )
        locations: dict[str, SamsaraLocationSnapshot] = self._index_locations(
            self._paginate(credentials, VEHICLE_LOCATIONS_PATH)
        )
        logger.debug(
            'Samsara returned %d vehicles, %d location fixes',
            len(vehicles),
            len(locations),
        )

        if self._trailers_only:
            total_vehicles: int = len(vehicles)
            vehicles = [
                raw_vehicle for raw_vehicle in vehicles if self._is_trailer(raw_vehicle)
            ]
            logger.debug(
                'Samsara trailer filter kept %d of %d vehicles',
                len(vehicles),
                total_vehicles,
            )

        return self._normalize_each(
            vehicles,
            lambda raw_vehicle: self._to_asset(raw_vehicle, locations),
        )

    def _paginate(
        self,
        credentials: SamsaraCredentials,
        path: str,
    ) -> Iterator[dict[str, Any]]:
        """
        Yield raw items across all pages of a listing.

        Raises:
            VendorConnectionError: If a page is not a Samsara list envelope.
        """
        pagination_state: PaginationState = PaginationState.initial_cursor()
        page_count: int = 0

        while pagination_state.has_next_page and page_count < MAX_PAGES:
            payload: Any = self._client.request(
                self.build_request_spec(credentials, path, pagination_state)
            )
            try:
                page: SamsaraPage = SamsaraPage.model_validate(payload)
            except ValidationError as error:
                raise VendorConnectionError(
                    f'Unexpected Samsara response from {path}: {error}'
                ) from error

            page_count += 1
            yield from page.data

            if page.pagination.has_next_page and page.pagination.end_cursor:
                pagination_state = PaginationState.next_cursor(
                    page.pagination.end_cursor
                )
            else:
                pagination_state = PaginationState.finished()

        if pagination_state.has_next_page:
            logger.warning('Samsara %s pagination stopped after %d pages', path, page_count)
        logger.debug('Samsara %s: %d pages', path, page_count)

    @staticmethod
    def _index_locations(
        raw_locations: Iterator[dict[str, Any]],
    ) -> dict[str, SamsaraLocationSnapshot]:
        indexed: dict[str, SamsaraLocationSnapshot] = {}
        for raw_location in raw_locations:
            try:
                vehicle_location = SamsaraVehicleLocation.model_validate(raw_location)
            except ValidationError as error:
                logger.warning('Skipping malformed Samsara location: %s', error)
                continue
            if vehicle_location.vehicle_id and vehicle_location.location is not None:
                indexed[vehicle_location.vehicle_id] = vehicle_location.location
        return indexed

    @staticmethod
    def _is_trailer(raw_vehicle: dict[str, Any]) -> bool:
        # Unparseable records are kept so normalization logs them.
        try:
            return SamsaraVehicle.model_validate(raw_vehicle).is_trailer
        except ValidationError:
            return True

    def _to_asset(
        self,
        raw_vehicle: dict[str, Any],
        locations: dict[str, SamsaraLocationSnapshot],
    ) -> Asset | None:
        vehicle: SamsaraVehicle = SamsaraVehicle.model_validate(raw_vehicle)
        if not vehicle.vehicle_id:
            return None

        location: AssetLocation = AssetLocation()
        snapshot: SamsaraLocationSnapshot | None = locations.get(vehicle.vehicle_id)
        if snapshot is not None:
            formatted: str | None = (
                snapshot.reverse_geo.formatted_location if snapshot.reverse_geo else None
            )
            location = AssetLocation(
                lat=snapshot.latitude,
                lng=snapshot.longitude,
                address=extract_city_state(formatted),
                timestamp=snapshot.time,
            )

        return Asset(
            external_id=vehicle.vehicle_id,
            name=vehicle.name,
            vin=vehicle.vin,
            make=vehicle.make,
            model=vehicle.model,
            year=vehicle.year,
            plate=vehicle.license_plate or vehicle.plate,
            location=location,
            raw_status=None,
        )
