# fleet_gps_sync/__init__.py
"""
Fleet GPS Sync - GPS provider integration and trailer reconciliation.

Companies register GPS vendor accounts (Spireon, SkyBitz, Samsara) whose
credentials are stored encrypted. A sync pulls every asset from the vendor,
normalizes it to one Asset model and reconciles it into the trailer table.

Components:
    - CredentialVault: authenticated AES encryption of vendor credentials
    - ProviderFactory: resolves a provider type to its vendor adapter
    - ProviderStore / TrailerStore: SQLAlchemy persistence
    - SyncOrchestrator: sync, connection test and location refresh
    - fleet_gps_sync.api.create_app: FastAPI routes over the orchestrator

Quick Start:
    >>> from fleet_gps_sync import load_config, setup_logger
    >>> from fleet_gps_sync.api import create_app
    >>>
    >>> config = load_config('config/sync_config.yaml')
    >>> setup_logger(config=config.logging)
    >>> app = create_app(config)
"""

__version__ = '0.1.0'

from fleet_gps_sync.adapters import (
    ProviderAdapter,
    ProviderStatusReport,
    SamsaraAdapter,
    SkyBitzAdapter,
    SpireonAdapter,
)
from fleet_gps_sync.cache import TTLCache
from fleet_gps_sync.client import (
    RateLimitError,
    TransientVendorError,
    VendorClient,
    VendorConnectionError,
)
from fleet_gps_sync.common import setup_logger
from fleet_gps_sync.config import load_config
from fleet_gps_sync.factory import ProviderFactory, UnsupportedProviderError
from fleet_gps_sync.models import Asset, AssetLocation, ProviderType
from fleet_gps_sync.reconcile import reconcile_assets, refresh_trailer_locations
from fleet_gps_sync.store import (
    InvalidCredentialsError,
    PersistenceError,
    ProviderNotFoundError,
    ProviderStore,
    TrailerStore,
)
from fleet_gps_sync.sync import SyncOrchestrator, SyncReport, SyncResult
from fleet_gps_sync.vault import CredentialError, CredentialVault

__all__: list[str] = [
    'Asset',
    'AssetLocation',
    'CredentialError',
    'CredentialVault',
    'InvalidCredentialsError',
    'PersistenceError',
    'ProviderAdapter',
    'ProviderFactory',
    'ProviderNotFoundError',
    'ProviderStatusReport',
    'ProviderStore',
    'ProviderType',
    'RateLimitError',
    'SamsaraAdapter',
    'SkyBitzAdapter',
    'SpireonAdapter',
    'SyncOrchestrator',
    'SyncReport',
    'SyncResult',
    'TTLCache',
    'TrailerStore',
    'TransientVendorError',
    'UnsupportedProviderError',
    'VendorClient',
    'VendorConnectionError',
    '__version__',
    'load_config',
    'reconcile_assets',
    'refresh_trailer_locations',
    'setup_logger',
]
