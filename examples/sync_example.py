#!/usr/bin/env python3
"""
Example usage of the GPS provider sync service.

This script registers a Samsara account for a company, tests the
connection, runs a full sync and prints the resulting trailers. Pass
`--serve` to expose the same operations over HTTP with uvicorn instead
(uvicorn is not a dependency of this package; install it separately).
"""

import logging
import os
import sys

from fleet_gps_sync import (
    CredentialVault,
    ProviderFactory,
    ProviderStore,
    SyncOrchestrator,
    TrailerStore,
    TTLCache,
    VendorClient,
    load_config,
    setup_logger,
)
from fleet_gps_sync.models import ProviderCreate, ProviderRecord, ProviderType
from fleet_gps_sync.store import (
    create_engine_from_config,
    create_session_factory,
    init_schema,
)

logger = logging.getLogger(__name__)

COMPANY_ID = 'demo-company'
TENANT_ID = 'demo-tenant'


def main() -> None:
    """Register a provider, test it and sync it."""
    config = load_config('config/sync_config.yaml')
    setup_logger(config=config.logging)

    engine = create_engine_from_config(config.database)
    init_schema(engine)
    session_factory = create_session_factory(engine)

    vault = CredentialVault(config.vault)

    with VendorClient(config.http) as client:
        factory = ProviderFactory(client, config.vendors)
        provider_cache: TTLCache[int, ProviderRecord] = TTLCache(
            config.cache.provider_ttl_seconds
        )
        provider_store = ProviderStore(session_factory, vault, factory, provider_cache)
        trailer_store = TrailerStore(session_factory)
        orchestrator = SyncOrchestrator(
            provider_store, trailer_store, vault, factory, config.sync
        )

        provider = provider_store.add_provider(
            ProviderCreate(
                company_id=COMPANY_ID,
                tenant_id=TENANT_ID,
                provider_type=ProviderType.SAMSARA,
                name='Samsara (demo)',
                credentials={'apiToken': os.environ['SAMSARA_API_TOKEN']},
            )
        )
        logger.info('Registered provider %d', provider.id)

        test_result = orchestrator.test_connection(provider.id)
        logger.info('Connection test: %s', test_result.message)
        if not test_result.success:
            logger.error('Aborting: %s', test_result.error)
            return

        report = orchestrator.sync_and_reconcile(provider.id)
        logger.info(
            'Sync complete: %d created, %d updated, %d failed',
            report.created_count,
            report.updated_count,
            report.failed_count,
        )

        for trailer in trailer_store.list_by_provider(provider.id):
            print(
                f'{trailer.unit_number:>12}  {trailer.gps_status.value:<12}  '
                f'{trailer.last_address or "-"}'
            )

    engine.dispose()


def serve() -> None:
    """Run the HTTP API."""
    import uvicorn  # noqa: PLC0415

    from fleet_gps_sync.api import create_app  # noqa: PLC0415

    config = load_config('config/sync_config.yaml')
    setup_logger(config=config.logging)
    uvicorn.run(create_app(config), host='127.0.0.1', port=8000)


if __name__ == '__main__':
    if '--serve' in sys.argv:
        serve()
    else:
        main()
