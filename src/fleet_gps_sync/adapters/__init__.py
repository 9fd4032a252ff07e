"""
Vendor adapters normalizing GPS provider APIs into Asset objects.

Exports:
- ProviderAdapter: abstract base with validate/fetch/status operations
- ProviderStatusReport: result of a connectivity check
- SpireonAdapter, SkyBitzAdapter, SamsaraAdapter: concrete vendors
"""

from fleet_gps_sync.adapters.base import ProviderAdapter, ProviderStatusReport
from fleet_gps_sync.adapters.samsara import SamsaraAdapter
from fleet_gps_sync.adapters.skybitz import SkyBitzAdapter, parse_positions_xml
from fleet_gps_sync.adapters.spireon import SpireonAdapter

__all__: list[str] = [
    'ProviderAdapter',
    'ProviderStatusReport',
    'SamsaraAdapter',
    'SkyBitzAdapter',
    'SpireonAdapter',
    'parse_positions_xml',
]
