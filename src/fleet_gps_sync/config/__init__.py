"""
Configuration package for the GPS provider sync service.

Exposes the configuration models and the loader function.
"""

from fleet_gps_sync.config.config_models import (
    CacheConfig,
    DatabaseConfig,
    HttpConfig,
    LoggingConfig,
    SamsaraVendorConfig,
    SyncPolicyConfig,
    SyncServiceConfig,
    VaultConfig,
    VendorConfig,
    VendorsConfig,
)
from fleet_gps_sync.config.loader import load_config

__all__: list[str] = [
    'CacheConfig',
    'DatabaseConfig',
    'HttpConfig',
    'LoggingConfig',
    'SamsaraVendorConfig',
    'SyncPolicyConfig',
    'SyncServiceConfig',
    'VaultConfig',
    'VendorConfig',
    'VendorsConfig',
    'load_config',
]
