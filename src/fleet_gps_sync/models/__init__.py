"""
Data models for the GPS provider sync service.

Exports:
- Shared vocabularies (ProviderType, ProviderStatus, GpsStatus, TrailerStatus)
- The vendor-normalized Asset model
- Per-vendor credential models
- Provider/Trailer domain records
- Request specification models used by VendorClient
- Vendor payload models (Spireon, SkyBitz, Samsara)
"""

from fleet_gps_sync.models.assets import (
    Asset,
    AssetLocation,
    coerce_datetime,
    coerce_float,
    coerce_year,
)
from fleet_gps_sync.models.credentials import (
    SamsaraCredentials,
    SkyBitzCredentials,
    SpireonCredentials,
    VendorCredentials,
)
from fleet_gps_sync.models.enums import (
    GpsStatus,
    ProviderStatus,
    ProviderType,
    TrailerStatus,
)
from fleet_gps_sync.models.records import (
    CamelModel,
    ProviderCreate,
    ProviderRecord,
    ProviderUpdate,
    TrailerCreate,
    TrailerRecord,
    TrailerUpdate,
)
from fleet_gps_sync.models.requests import (
    HTTPMethod,
    PaginationState,
    RateLimitInfo,
    RequestSpec,
    ResponseFormat,
)
from fleet_gps_sync.models.samsara_responses import (
    SamsaraLocationSnapshot,
    SamsaraPage,
    SamsaraPaginationInfo,
    SamsaraVehicle,
    SamsaraVehicleLocation,
)
from fleet_gps_sync.models.skybitz_responses import (
    SkyBitzAddress,
    SkyBitzAssetInfo,
    SkyBitzPosition,
)
from fleet_gps_sync.models.spireon_responses import (
    SpireonAddress,
    SpireonAsset,
    SpireonLocation,
)

__all__: list[str] = [
    'Asset',
    'AssetLocation',
    'CamelModel',
    'GpsStatus',
    'HTTPMethod',
    'PaginationState',
    'ProviderCreate',
    'ProviderRecord',
    'ProviderStatus',
    'ProviderType',
    'ProviderUpdate',
    'RateLimitInfo',
    'RequestSpec',
    'ResponseFormat',
    'SamsaraCredentials',
    'SamsaraLocationSnapshot',
    'SamsaraPage',
    'SamsaraPaginationInfo',
    'SamsaraVehicle',
    'SamsaraVehicleLocation',
    'SkyBitzAddress',
    'SkyBitzAssetInfo',
    'SkyBitzCredentials',
    'SkyBitzPosition',
    'SpireonAddress',
    'SpireonAsset',
    'SpireonCredentials',
    'SpireonLocation',
    'TrailerCreate',
    'TrailerRecord',
    'TrailerStatus',
    'TrailerUpdate',
    'VendorCredentials',
    'coerce_datetime',
    'coerce_float',
    'coerce_year',
]
