"""
Tests for fleet_gps_sync.adapters package.

Tests request construction, payload normalization, per-record skipping and
vendor error handling for the Spireon, SkyBitz and Samsara adapters. The
VendorClient is a Mock; no HTTP is performed.
"""

from datetime import UTC, datetime
from typing import Any
from unittest.mock import Mock

import pytest

from fleet_gps_sync.adapters import (
    ProviderStatusReport,
    SamsaraAdapter,
    SkyBitzAdapter,
    SpireonAdapter,
    parse_positions_xml,
)
from fleet_gps_sync.client import VendorConnectionError
from fleet_gps_sync.config import SamsaraVendorConfig, VendorsConfig
from fleet_gps_sync.models import (
    Asset,
    AssetLocation,
    ProviderStatus,
    RequestSpec,
    ResponseFormat,
    SamsaraCredentials,
    SkyBitzCredentials,
    SpireonCredentials,
    coerce_float,
    coerce_year,
)


@pytest.fixture
def spireon_adapter(mock_client: Mock, vendors_config: VendorsConfig) -> SpireonAdapter:
    return SpireonAdapter(mock_client, vendors_config.spireon)


@pytest.fixture
def skybitz_adapter(mock_client: Mock, vendors_config: VendorsConfig) -> SkyBitzAdapter:
    return SkyBitzAdapter(mock_client, vendors_config.skybitz)


@pytest.fixture
def samsara_adapter(mock_client: Mock, vendors_config: VendorsConfig) -> SamsaraAdapter:
    return SamsaraAdapter(mock_client, vendors_config.samsara)


# =============================================================================
# Credential Validation
# =============================================================================


class TestValidateCredentials:
    """Structural credential checks, no vendor I/O."""

    def test_complete_credentials_are_valid(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        assert spireon_adapter.validate_credentials(spireon_credentials) is True
        mock_client.request.assert_not_called()

    @pytest.mark.parametrize('missing_field', ['apiKey', 'username', 'password', 'nspireId'])
    def test_missing_spireon_field_is_invalid(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        missing_field: str,
    ) -> None:
        del spireon_credentials[missing_field]

        assert spireon_adapter.validate_credentials(spireon_credentials) is False

    def test_blank_secret_is_invalid(
        self,
        skybitz_adapter: SkyBitzAdapter,
        skybitz_credentials: dict[str, Any],
    ) -> None:
        skybitz_credentials['password'] = '   '

        assert skybitz_adapter.validate_credentials(skybitz_credentials) is False

    def test_base_url_is_optional(
        self,
        skybitz_adapter: SkyBitzAdapter,
        skybitz_credentials: dict[str, Any],
    ) -> None:
        del skybitz_credentials['baseURL']

        assert skybitz_adapter.validate_credentials(skybitz_credentials) is True

    def test_samsara_requires_api_url(
        self,
        samsara_adapter: SamsaraAdapter,
        samsara_credentials: dict[str, Any],
    ) -> None:
        samsara_credentials['apiUrl'] = ''

        assert samsara_adapter.validate_credentials(samsara_credentials) is False

    def test_fetch_with_invalid_credentials_raises(
        self,
        spireon_adapter: SpireonAdapter,
        mock_client: Mock,
    ) -> None:
        with pytest.raises(VendorConnectionError, match='Invalid spireon credentials'):
            spireon_adapter.fetch_data({'username': 'only-user'})

        mock_client.request.assert_not_called()


# =============================================================================
# Spireon
# =============================================================================


class TestSpireonAdapter:
    """Test SpireonAdapter request building and normalization."""

    def test_request_spec_uses_basic_auth_pair_and_app_token(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
    ) -> None:
        credentials = SpireonCredentials.model_validate(spireon_credentials)

        spec: RequestSpec = spireon_adapter.build_request_spec(credentials)

        assert spec.url == 'https://api.spireon.test/rest/assets'
        assert spec.auth == ('fleet-user', 'fleet-pass')
        assert 'Authorization' not in spec.headers
        assert spec.headers['X-Nspire-AppToken'] == 'spireon-app-token'
        assert spec.response_format is ResponseFormat.JSON

    def test_request_spec_falls_back_to_default_base_url(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
    ) -> None:
        del spireon_credentials['baseURL']
        credentials = SpireonCredentials.model_validate(spireon_credentials)

        spec: RequestSpec = spireon_adapter.build_request_spec(credentials)

        assert spec.url == 'https://services.spireon.com/v0/rest/assets'

    def test_normalizes_content_envelope(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        spireon_assets_payload: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = spireon_assets_payload

        assets: list[Asset] = spireon_adapter.fetch_data(spireon_credentials)

        assert [asset.external_id for asset in assets] == ['SP-1', 'SP-2']
        first: Asset = assets[0]
        assert first.name == 'Trailer 101'
        assert first.vin == '1JJV532D8KL123456'
        assert first.year == 2019  # noqa: PLR2004
        assert first.plate == 'TX-1234'
        assert first.raw_status == 'stopped'
        assert first.location.lat == pytest.approx(32.7767)
        assert first.location.lng == pytest.approx(-96.7970)
        assert first.location.address == 'Dallas, TX'
        assert first.location.timestamp == datetime(2024, 1, 15, 14, 30, tzinfo=UTC)

    def test_free_text_address_and_fallback_timestamp(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        spireon_assets_payload: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = spireon_assets_payload

        second: Asset = spireon_adapter.fetch_data(spireon_credentials)[1]

        assert second.location.address == 'Bloomington, CA'
        assert second.location.timestamp == datetime(2024, 1, 15, 12, 0, tzinfo=UTC)

    def test_missing_fields_become_none(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        spireon_assets_payload: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = spireon_assets_payload

        second: Asset = spireon_adapter.fetch_data(spireon_credentials)[1]

        assert second.vin is None
        assert second.make is None
        assert second.year is None
        assert second.plate is None

    def test_accepts_bare_array(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = [{'id': 42, 'name': 'Trailer 42'}]

        assets: list[Asset] = spireon_adapter.fetch_data(spireon_credentials)

        assert len(assets) == 1
        assert assets[0].external_id == '42'
        assert assets[0].location.lat is None

    def test_null_content_is_empty(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = {'content': None}

        assert spireon_adapter.fetch_data(spireon_credentials) == []

    def test_skips_assets_without_id(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = {
            'content': [
                {'name': 'No id here'},
                'not-an-object',
                {'id': 'SP-9', 'name': 'Trailer 9'},
            ]
        }

        assets: list[Asset] = spireon_adapter.fetch_data(spireon_credentials)

        assert [asset.external_id for asset in assets] == ['SP-9']

    @pytest.mark.parametrize('year', ['Infinity', '-inf', 'NaN', float('inf'), float('nan')])
    def test_non_finite_year_keeps_asset(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        mock_client: Mock,
        year: Any,
    ) -> None:
        mock_client.request.return_value = [
            {'id': 'A1', 'name': 'Trailer A1', 'year': year},
            {'id': 'A2', 'name': 'Trailer A2'},
        ]

        assets: list[Asset] = spireon_adapter.fetch_data(spireon_credentials)

        assert [asset.external_id for asset in assets] == ['A1', 'A2']
        assert assets[0].year is None

    def test_non_finite_coordinates_become_none(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = [
            {'id': 'A1', 'lastLocation': {'lat': 'NaN', 'lng': float('inf')}},
        ]

        assets: list[Asset] = spireon_adapter.fetch_data(spireon_credentials)

        assert assets[0].location.lat is None
        assert assets[0].location.lng is None

    def test_unexpected_payload_raises(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = {'error': 'Unauthorized'}

        with pytest.raises(VendorConnectionError, match='Unexpected Spireon response'):
            spireon_adapter.fetch_data(spireon_credentials)

    def test_vendor_error_propagates(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.side_effect = VendorConnectionError(
            'Client error: HTTP 401', status_code=401
        )

        with pytest.raises(VendorConnectionError, match='HTTP 401'):
            spireon_adapter.fetch_data(spireon_credentials)


# =============================================================================
# SkyBitz
# =============================================================================


class TestParsePositionsXml:
    """Test the SkyBitz XML parser."""

    def test_one_dict_per_gls(self, skybitz_positions_xml: str) -> None:
        positions: list[dict[str, Any]] = parse_positions_xml(skybitz_positions_xml)

        assert len(positions) == 3  # noqa: PLR2004
        assert positions[0]['asset']['assetid'] == 'SB-77'
        assert positions[0]['address'] == {'city': 'Oklahoma City', 'state': 'OK'}
        assert positions[1]['address'] == 'Houston, TX, US'

    def test_no_positions(self) -> None:
        assert parse_positions_xml('<skybitz><error>0</error></skybitz>') == []

    @pytest.mark.parametrize('tag', ['error', 'e'])
    def test_non_zero_error_code_raises(self, tag: str) -> None:
        xml_text: str = f'<skybitz><{tag}>97</{tag}></skybitz>'

        with pytest.raises(VendorConnectionError, match='SkyBitz API error code: 97'):
            parse_positions_xml(xml_text)

    def test_invalid_xml_raises(self) -> None:
        with pytest.raises(VendorConnectionError, match='invalid XML'):
            parse_positions_xml('<html><body>Service Unavailable')


class TestSkyBitzAdapter:
    """Test SkyBitzAdapter request building and normalization."""

    def test_request_spec_authenticates_in_query(
        self,
        skybitz_adapter: SkyBitzAdapter,
        skybitz_credentials: dict[str, Any],
    ) -> None:
        credentials = SkyBitzCredentials.model_validate(skybitz_credentials)

        spec: RequestSpec = skybitz_adapter.build_request_spec(credentials)

        assert spec.url == 'https://xml.skybitz.test/QueryPositions'
        assert spec.query_params == {
            'customer': 'skybitz-customer',
            'password': 'skybitz-pass',
            'assetid': 'ALL',
            'version': '2.67',
        }
        assert spec.response_format is ResponseFormat.TEXT

    def test_normalizes_positions(
        self,
        skybitz_adapter: SkyBitzAdapter,
        skybitz_credentials: dict[str, Any],
        skybitz_positions_xml: str,
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = skybitz_positions_xml

        assets: list[Asset] = skybitz_adapter.fetch_data(skybitz_credentials)

        # Third <gls> has neither asset id nor terminal serial and is skipped
        assert [asset.external_id for asset in assets] == ['SB-77', '400500600']

        assigned: Asset = assets[0]
        assert assigned.name == 'SB-77'
        assert assigned.make == 'Dry Van'
        assert assigned.model == 'GXT2000'
        assert assigned.vin == '1GRAA0621KB700001'
        assert assigned.plate == 'OK-777'
        assert assigned.year == 2018  # noqa: PLR2004
        assert assigned.raw_status is None
        assert assigned.location.address == 'Oklahoma City, OK'
        assert assigned.location.lat == pytest.approx(35.4676)
        assert assigned.location.timestamp == datetime(2024, 1, 15, 14, 30, tzinfo=UTC)

    def test_unassigned_terminal_uses_mtsn(
        self,
        skybitz_adapter: SkyBitzAdapter,
        skybitz_credentials: dict[str, Any],
        skybitz_positions_xml: str,
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = skybitz_positions_xml

        unassigned: Asset = skybitz_adapter.fetch_data(skybitz_credentials)[1]

        assert unassigned.name is None
        assert unassigned.vin is None
        assert unassigned.location.address == 'Houston, TX'

    def test_error_code_fails_fetch(
        self,
        skybitz_adapter: SkyBitzAdapter,
        skybitz_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = '<skybitz><error>3</error></skybitz>'

        with pytest.raises(VendorConnectionError, match='error code: 3'):
            skybitz_adapter.fetch_data(skybitz_credentials)


# =============================================================================
# Samsara
# =============================================================================


class TestSamsaraAdapter:
    """Test SamsaraAdapter pagination, join and trailer filtering."""

    def test_request_spec_uses_bearer_token(
        self,
        samsara_adapter: SamsaraAdapter,
        samsara_credentials: dict[str, Any],
    ) -> None:
        credentials = SamsaraCredentials.model_validate(samsara_credentials)

        spec: RequestSpec = samsara_adapter.build_request_spec(
            credentials, '/fleet/vehicles'
        )

        assert spec.url == 'https://api.samsara.test/fleet/vehicles'
        assert spec.headers['Authorization'] == 'Bearer samsara-token'
        assert spec.query_params == {'limit': '512'}

    def test_follows_cursor_and_joins_locations(
        self,
        samsara_adapter: SamsaraAdapter,
        samsara_credentials: dict[str, Any],
        samsara_vehicle_pages: list[dict[str, Any]],
        samsara_locations_page: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.side_effect = [*samsara_vehicle_pages, samsara_locations_page]

        assets: list[Asset] = samsara_adapter.fetch_data(samsara_credentials)

        specs: list[RequestSpec] = [
            call.args[0] for call in mock_client.request.call_args_list
        ]
        assert [spec.url for spec in specs] == [
            'https://api.samsara.test/fleet/vehicles',
            'https://api.samsara.test/fleet/vehicles',
            'https://api.samsara.test/fleet/vehicles/locations',
        ]
        assert 'after' not in specs[0].query_params
        assert specs[1].query_params['after'] == 'cursor-page-2'

        by_id: dict[str, Asset] = {asset.external_id: asset for asset in assets}
        located: Asset = by_id['281474976710001']
        assert located.location.address == 'San Leandro, CA'
        assert located.location.lat == pytest.approx(37.7249)
        assert located.location.timestamp == datetime(2024, 1, 15, 14, 30, tzinfo=UTC)
        assert located.plate == 'CA-5001'
        assert located.year == 2020  # noqa: PLR2004

    def test_trailers_only_filter(
        self,
        samsara_adapter: SamsaraAdapter,
        samsara_credentials: dict[str, Any],
        samsara_vehicle_pages: list[dict[str, Any]],
        samsara_locations_page: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.side_effect = [*samsara_vehicle_pages, samsara_locations_page]

        assets: list[Asset] = samsara_adapter.fetch_data(samsara_credentials)

        assert [asset.external_id for asset in assets] == [
            '281474976710001',
            '281474976710003',
        ]
        unlocated: Asset = assets[1]
        assert unlocated.plate == 'NV-0009'
        assert unlocated.location.lat is None
        assert unlocated.location.address is None

    def test_filter_disabled_keeps_every_vehicle(
        self,
        mock_client: Mock,
        samsara_credentials: dict[str, Any],
        samsara_vehicle_pages: list[dict[str, Any]],
        samsara_locations_page: dict[str, Any],
    ) -> None:
        adapter = SamsaraAdapter(
            mock_client,
            SamsaraVendorConfig(base_url='https://api.samsara.com', trailers_only=False),
        )
        mock_client.request.side_effect = [*samsara_vehicle_pages, samsara_locations_page]

        assert len(adapter.fetch_data(samsara_credentials)) == 3  # noqa: PLR2004

    def test_non_envelope_response_raises(
        self,
        samsara_adapter: SamsaraAdapter,
        samsara_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = [{'id': '1'}]

        with pytest.raises(VendorConnectionError, match='Unexpected Samsara response'):
            samsara_adapter.fetch_data(samsara_credentials)


# =============================================================================
# Status Probe
# =============================================================================


class TestGetStatus:
    """get_status reports instead of raising."""

    def test_connected_with_count(
        self,
        spireon_adapter: SpireonAdapter,
        spireon_credentials: dict[str, Any],
        spireon_assets_payload: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = spireon_assets_payload

        report: ProviderStatusReport = spireon_adapter.get_status(spireon_credentials)

        assert report.status is ProviderStatus.CONNECTED
        assert report.trailer_count == 2  # noqa: PLR2004
        assert report.error is None

    def test_vendor_failure_is_error(
        self,
        skybitz_adapter: SkyBitzAdapter,
        skybitz_credentials: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        mock_client.request.return_value = '<skybitz><error>1</error></skybitz>'

        report: ProviderStatusReport = skybitz_adapter.get_status(skybitz_credentials)

        assert report.status is ProviderStatus.ERROR
        assert report.trailer_count == 0
        assert report.error == 'SkyBitz API error code: 1'


# =============================================================================
# Field coercion
# =============================================================================


class TestNumericCoercion:
    """Vendor numbers arrive as text, numbers or junk."""

    @pytest.mark.parametrize(
        ('value', 'expected'),
        [(' 32.5 ', 32.5), (7, 7.0), ('-96.797', -96.797), ('', None), ('abc', None)],
    )
    def test_coerce_float(self, value: Any, expected: float | None) -> None:
        assert coerce_float(value) == expected

    @pytest.mark.parametrize(
        'value', ['NaN', 'Infinity', '-inf', '1e999', float('nan'), float('inf'), True]
    )
    def test_coerce_float_rejects_non_finite(self, value: Any) -> None:
        assert coerce_float(value) is None

    @pytest.mark.parametrize(
        ('value', 'expected'),
        [('2019', 2019), (2020.0, 2020), ('Infinity', None), ('NaN', None), ('1850', None)],
    )
    def test_coerce_year(self, value: Any, expected: int | None) -> None:
        assert coerce_year(value) == expected

    def test_location_drops_non_finite_coordinates(self) -> None:
        location = AssetLocation(lat='NaN', lng=float('-inf'))

        assert location.lat is None
        assert location.lng is None
