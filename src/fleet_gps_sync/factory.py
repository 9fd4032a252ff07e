# fleet_gps_sync/factory.py
"""
Provider factory: the single extension point for GPS vendors.

Provider type strings from the database are resolved case-insensitively to
the closed ProviderType enum and dispatched with an exhaustive `match`.
Adding a vendor means adding one ProviderType member, one adapter class and
one case below; type checkers flag the missing case otherwise.

Usage:
------
    factory = ProviderFactory(client, config.vendors)
    adapter = factory.get_provider('Spireon')
    assets = adapter.fetch_data(credentials)
"""

import logging
from typing import Any, assert_never

from fleet_gps_sync.adapters import (
    ProviderAdapter,
    SamsaraAdapter,
    SkyBitzAdapter,
    SpireonAdapter,
)
from fleet_gps_sync.client import VendorClient
from fleet_gps_sync.config import VendorsConfig
from fleet_gps_sync.models import ProviderType

__all__: list[str] = ['ProviderFactory', 'UnsupportedProviderError']

logger: logging.Logger = logging.getLogger(__name__)


class UnsupportedProviderError(Exception):
    """
    Raised when a provider type string matches no known vendor.

    Attributes:
        provider_type: The type string that was requested.
        supported_types: Valid type strings.
    """

    def __init__(self, provider_type: str, supported_types: list[str]) -> None:
        self.provider_type: str = provider_type
        self.supported_types: list[str] = supported_types
        super().__init__(
            f"Unsupported provider type '{provider_type}'. "
            f'Supported: {", ".join(sorted(supported_types))}'
        )


class ProviderFactory:
    """
    Resolves provider types to adapter instances.

    Adapters are stateless apart from the shared client and vendor defaults,
    so one instance per type is built lazily and reused.
    """

    def __init__(self, client: VendorClient, vendors_config: VendorsConfig) -> None:
        self._client: VendorClient = client
        self._vendors_config: VendorsConfig = vendors_config
        self._adapters: dict[ProviderType, ProviderAdapter[Any]] = {}

    @staticmethod
    def supported_types() -> list[str]:
        """Type strings accepted by get_provider (lowercase)."""
        return [member.value for member in ProviderType]

    @staticmethod
    def resolve_type(provider_type: ProviderType | str) -> ProviderType:
        """
        Normalize a type string (any case) to ProviderType.

        Raises:
            UnsupportedProviderError: If the string names no known vendor.
        """
        if isinstance(provider_type, ProviderType):
            return provider_type

        resolved: ProviderType | None = ProviderType.parse(provider_type)
        if resolved is None:
            logger.error('Unsupported provider type requested: %r', provider_type)
            raise UnsupportedProviderError(
                provider_type, ProviderFactory.supported_types()
            )
        return resolved

    def get_provider(self, provider_type: ProviderType | str) -> ProviderAdapter[Any]:
        """
        Return the adapter for a provider type.

        Args:
            provider_type: ProviderType or type string, case-insensitive.

        Raises:
            UnsupportedProviderError: For unknown type strings.
        """
        resolved: ProviderType = self.resolve_type(provider_type)

        cached: ProviderAdapter[Any] | None = self._adapters.get(resolved)
        if cached is not None:
            return cached

        adapter: ProviderAdapter[Any]
        match resolved:
            case ProviderType.SPIREON:
                adapter = SpireonAdapter(self._client, self._vendors_config.spireon)
            case ProviderType.SKYBITZ:
                adapter = SkyBitzAdapter(self._client, self._vendors_config.skybitz)
            case ProviderType.SAMSARA:
                adapter = SamsaraAdapter(self._client, self._vendors_config.samsara)
            case _:
                assert_never(resolved)

        self._adapters[resolved] = adapter
        logger.debug('Created %s adapter', resolved.value)
        return adapter
