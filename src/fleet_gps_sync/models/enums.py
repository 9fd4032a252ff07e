# fleet_gps_sync/models/enums.py
"""Closed vocabularies shared by providers, assets and trailers."""

from enum import Enum
from typing import Self

__all__: list[str] = [
    'GpsStatus',
    'ProviderStatus',
    'ProviderType',
    'TrailerStatus',
]


class ProviderType(str, Enum):
    """Supported GPS vendors. Adding a vendor starts with a member here."""

    SPIREON = 'spireon'
    SKYBITZ = 'skybitz'
    SAMSARA = 'samsara'

    @classmethod
    def parse(cls, value: str) -> Self | None:
        """Case-insensitive lookup; None for unknown or blank values."""
        normalized: str = value.strip().lower() if value else ''
        for member in cls:
            if member.value == normalized:
                return member
        return None


class ProviderStatus(str, Enum):
    """Outcome of the last connection test or sync for a provider."""

    UNTESTED = 'untested'
    CONNECTED = 'connected'
    ERROR = 'error'


class GpsStatus(str, Enum):
    """Normalized GPS link state of a trailer."""

    AVAILABLE = 'available'
    DISCONNECTED = 'disconnected'


class TrailerStatus(str, Enum):
    """Operational status of a trailer, managed by users after creation."""

    AVAILABLE = 'available'
    DISPATCHED = 'dispatched'
    DISCONNECTED = 'disconnected'
