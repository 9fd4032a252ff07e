"""
Relational persistence for providers and trailers (SQLAlchemy ORM).

Exports:
- Engine/session helpers and the PersistenceError raised by every store
- TrailerStore: trailer lookups and writes keyed by (external_id, company_id)
- ProviderStore: provider lifecycle with encrypted credentials and caching
"""

from fleet_gps_sync.store.database import (
    Base,
    PersistenceError,
    create_engine_from_config,
    create_session_factory,
    init_schema,
    transaction,
)
from fleet_gps_sync.store.provider_store import (
    InvalidCredentialsError,
    ProviderNotFoundError,
    ProviderStore,
)
from fleet_gps_sync.store.tables import ProviderRow, TrailerRow
from fleet_gps_sync.store.trailer_store import TrailerStore

__all__: list[str] = [
    'Base',
    'InvalidCredentialsError',
    'PersistenceError',
    'ProviderNotFoundError',
    'ProviderRow',
    'ProviderStore',
    'TrailerRow',
    'TrailerStore',
    'create_engine_from_config',
    'create_session_factory',
    'init_schema',
    'transaction',
]
