"""
Shared pytest fixtures for fleet_gps_sync tests.

Stores run against a fresh in-memory SQLite database per test. Vendor HTTP
is never hit: adapter and orchestrator tests use a Mock(spec=VendorClient)
whose `request` returns canned payloads.
"""

from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import Mock

import httpx
import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from fleet_gps_sync.cache import TTLCache
from fleet_gps_sync.client import VendorClient
from fleet_gps_sync.config import (
    DatabaseConfig,
    HttpConfig,
    SyncPolicyConfig,
    SyncServiceConfig,
    VaultConfig,
    VendorsConfig,
)
from fleet_gps_sync.factory import ProviderFactory
from fleet_gps_sync.models import (
    ProviderCreate,
    ProviderRecord,
    ProviderType,
    TrailerCreate,
)
from fleet_gps_sync.store import (
    ProviderStore,
    TrailerStore,
    create_engine_from_config,
    create_session_factory,
    init_schema,
)
from fleet_gps_sync.sync import SyncOrchestrator
from fleet_gps_sync.vault import CredentialVault

TEST_ENCRYPTION_KEY: str = 'unit-test-encryption-key-0123456789'
COMPANY_ID: str = 'company-1'
TENANT_ID: str = 'tenant-1'

# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def vault_config() -> VaultConfig:
    return VaultConfig(encryption_key=TEST_ENCRYPTION_KEY)


@pytest.fixture
def database_config() -> DatabaseConfig:
    """Shared in-memory SQLite (StaticPool), isolated per engine."""
    return DatabaseConfig(url='sqlite://')


@pytest.fixture
def http_config() -> HttpConfig:
    """Single attempt per request so error tests never sleep."""
    return HttpConfig(max_retries=1, request_timeout=(5, 5))


@pytest.fixture
def vendors_config() -> VendorsConfig:
    return VendorsConfig()


@pytest.fixture
def sync_policy() -> SyncPolicyConfig:
    return SyncPolicyConfig()


@pytest.fixture
def service_config(
    vault_config: VaultConfig,
    database_config: DatabaseConfig,
    http_config: HttpConfig,
) -> SyncServiceConfig:
    return SyncServiceConfig(
        vault=vault_config,
        database=database_config,
        http=http_config,
    )


# =============================================================================
# Service Object Fixtures
# =============================================================================


@pytest.fixture
def vault(vault_config: VaultConfig) -> CredentialVault:
    return CredentialVault(vault_config)


@pytest.fixture
def mock_client() -> Mock:
    """VendorClient stand-in; set `request.return_value` or `side_effect`."""
    return Mock(spec=VendorClient)


@pytest.fixture
def factory(mock_client: Mock, vendors_config: VendorsConfig) -> ProviderFactory:
    return ProviderFactory(mock_client, vendors_config)


@pytest.fixture
def engine(database_config: DatabaseConfig) -> Iterator[Engine]:
    db_engine: Engine = create_engine_from_config(database_config)
    init_schema(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def provider_cache() -> TTLCache[int, ProviderRecord]:
    return TTLCache(ttl_seconds=60.0)


@pytest.fixture
def provider_store(
    session_factory: sessionmaker[Session],
    vault: CredentialVault,
    factory: ProviderFactory,
    provider_cache: TTLCache[int, ProviderRecord],
) -> ProviderStore:
    return ProviderStore(session_factory, vault, factory, provider_cache)


@pytest.fixture
def trailer_store(session_factory: sessionmaker[Session]) -> TrailerStore:
    return TrailerStore(session_factory)


@pytest.fixture
def orchestrator(
    provider_store: ProviderStore,
    trailer_store: TrailerStore,
    vault: CredentialVault,
    factory: ProviderFactory,
    sync_policy: SyncPolicyConfig,
) -> SyncOrchestrator:
    return SyncOrchestrator(provider_store, trailer_store, vault, factory, sync_policy)


# =============================================================================
# Credential Fixtures
# =============================================================================


@pytest.fixture
def spireon_credentials() -> dict[str, Any]:
    return {
        'apiKey': 'spireon-app-token',
        'username': 'fleet-user',
        'password': 'fleet-pass',
        'nspireId': 'NSP-42',
        'baseURL': 'https://api.spireon.test/rest/',
    }


@pytest.fixture
def skybitz_credentials() -> dict[str, Any]:
    return {
        'username': 'skybitz-customer',
        'password': 'skybitz-pass',
        'baseURL': 'https://xml.skybitz.test',
    }


@pytest.fixture
def samsara_credentials() -> dict[str, Any]:
    return {
        'apiToken': 'samsara-token',
        'apiUrl': 'https://api.samsara.test',
    }


@pytest.fixture
def spireon_provider(
    provider_store: ProviderStore,
    spireon_credentials: dict[str, Any],
) -> ProviderRecord:
    """A stored Spireon provider in status 'untested'."""
    return provider_store.add_provider(
        ProviderCreate(
            company_id=COMPANY_ID,
            tenant_id=TENANT_ID,
            provider_type=ProviderType.SPIREON,
            name='Spireon Main',
            credentials=spireon_credentials,
        )
    )


@pytest.fixture
def make_trailer(
    trailer_store: TrailerStore,
) -> Callable[..., Any]:
    """Create a trailer row with sensible defaults; keyword overrides apply."""

    def _make_trailer(**overrides: Any) -> Any:
        fields: dict[str, Any] = {
            'external_id': 'SP-1',
            'company_id': COMPANY_ID,
            'tenant_id': TENANT_ID,
            'provider_id': None,
            'unit_number': '101',
        }
        fields.update(overrides)
        return trailer_store.create_trailer(TrailerCreate(**fields))

    return _make_trailer


# =============================================================================
# Vendor Payload Fixtures
# =============================================================================


@pytest.fixture
def spireon_assets_payload() -> dict[str, Any]:
    """Spireon page envelope with a stopped asset and an offline asset."""
    return {
        'content': [
            {
                'id': 'SP-1',
                'name': 'Trailer 101',
                'status': 'stopped',
                'vin': '1JJV532D8KL123456',
                'make': 'Wabash',
                'model': 'DuraPlate',
                'year': '2019',
                'licensePlate': 'TX-1234',
                'lastLocation': {
                    'lat': '32.7767',
                    'lng': '-96.7970',
                    'address': {
                        'line1': '100 Main St',
                        'city': 'Dallas',
                        'stateOrProvince': 'TX',
                        'postalCode': '75201',
                    },
                },
                'locationLastReported': '2024-01-15T14:30:00Z',
            },
            {
                'id': 'SP-2',
                'name': 'TRAILER 202',
                'status': 'offline',
                'lastLocation': {
                    'lat': 34.0522,
                    'lng': -118.2437,
                    'address': '315 Resource Dr, Bloomington, CA 92316',
                },
                'lastUpdated': '2024-01-15T12:00:00Z',
            },
        ]
    }


@pytest.fixture
def skybitz_positions_xml() -> str:
    return """<?xml version="1.0" encoding="UTF-8"?>
<skybitz>
  <error>0</error>
  <gls>
    <mtsn>100200300</mtsn>
    <asset>
      <assetid>SB-77</assetid>
      <assettype>Dry Van</assettype>
      <vin>1GRAA0621KB700001</vin>
      <licenseplate>OK-777</licenseplate>
      <year>2018</year>
    </asset>
    <latitude>35.4676</latitude>
    <longitude>-97.5164</longitude>
    <time>2024/01/15 14:30:00</time>
    <speed>0</speed>
    <devicetype>GXT2000</devicetype>
    <address>
      <city>Oklahoma City</city>
      <state>OK</state>
    </address>
  </gls>
  <gls>
    <mtsn>400500600</mtsn>
    <latitude>29.7604</latitude>
    <longitude>-95.3698</longitude>
    <time>2024/01/15 13:00:00</time>
    <address>Houston, TX, US</address>
  </gls>
  <gls>
    <latitude>0</latitude>
    <longitude>0</longitude>
  </gls>
</skybitz>
"""


@pytest.fixture
def samsara_vehicle_pages() -> list[dict[str, Any]]:
    """Two pages of /fleet/vehicles: two trailers and one tractor."""
    return [
        {
            'data': [
                {
                    'id': '281474976710001',
                    'name': 'Unit 5001',
                    'vehicleType': 'trailer',
                    'vin': '1UYVS2538KU000001',
                    'make': 'Utility',
                    'model': '3000R',
                    'year': 2020,
                    'licensePlate': 'CA-5001',
                },
            ],
            'pagination': {'endCursor': 'cursor-page-2', 'hasNextPage': True},
        },
        {
            'data': [
                {
                    'id': '281474976710002',
                    'name': 'Tractor 12',
                    'vehicleType': 'truck',
                },
                {
                    'id': '281474976710003',
                    'name': 'Reefer Trailer 9',
                    'plate': 'NV-0009',
                },
            ],
            'pagination': {'endCursor': '', 'hasNextPage': False},
        },
    ]


@pytest.fixture
def samsara_locations_page() -> dict[str, Any]:
    return {
        'data': [
            {
                'id': '281474976710001',
                'name': 'Unit 5001',
                'location': {
                    'time': '2024-01-15T14:30:00Z',
                    'latitude': 37.7249,
                    'longitude': -122.1561,
                    'reverseGeo': {'formattedLocation': 'San Leandro, CA, US'},
                },
            },
        ],
        'pagination': {'endCursor': '', 'hasNextPage': False},
    }


# =============================================================================
# HTTP Response Helpers
# =============================================================================


@pytest.fixture
def make_response() -> Callable[..., Mock]:
    """Build Mock(spec=httpx.Response) objects for client tests."""

    def _make_response(
        status_code: int = 200,
        json_body: Any = None,
        text: str = '',
        headers: dict[str, str] | None = None,
    ) -> Mock:
        mock_response = Mock(spec=httpx.Response)
        mock_response.status_code = status_code
        mock_response.is_success = 200 <= status_code < 300  # noqa: PLR2004
        mock_response.json.return_value = json_body
        mock_response.text = text
        mock_response.headers = headers or {}
        return mock_response

    return _make_response
