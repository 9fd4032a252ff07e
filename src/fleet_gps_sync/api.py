# fleet_gps_sync/api.py
"""
HTTP surface for provider sync, connection tests and location refresh.

`create_app` wires the object graph once per application:

    config -> engine/session factory -> vault, vendor client, factory,
    provider cache -> ProviderStore, TrailerStore -> SyncOrchestrator

and stores the pieces on `app.state`. Handlers are plain `def` functions;
FastAPI runs them in its threadpool, so the synchronous vendor client and
SQLAlchemy sessions never block the event loop.

Routes:
    POST /providers/{provider_id}/sync     -> 200 {success, data} | 400 {success, error}
    POST /providers/{provider_id}/test     -> 200 {success, message, error, trailerCount}
    POST /providers/{provider_id}/refresh  -> 200 {success, data} | 400 {success, error}

An unknown provider id is a 404.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from fleet_gps_sync.cache import TTLCache
from fleet_gps_sync.client import VendorClient
from fleet_gps_sync.config import SyncServiceConfig
from fleet_gps_sync.factory import ProviderFactory
from fleet_gps_sync.models import ProviderRecord
from fleet_gps_sync.store import (
    PersistenceError,
    ProviderNotFoundError,
    ProviderStore,
    TrailerStore,
    create_engine_from_config,
    create_session_factory,
    init_schema,
)
from fleet_gps_sync.sync import (
    ConnectionTestResult,
    RefreshResult,
    SyncOrchestrator,
    SyncReport,
)
from fleet_gps_sync.vault import CredentialVault

__all__: list[str] = ['create_app', 'get_orchestrator', 'router']

logger: logging.Logger = logging.getLogger(__name__)

router = APIRouter(prefix='/providers', tags=['Providers'])


def get_orchestrator(request: Request) -> SyncOrchestrator:
    """Dependency returning the orchestrator built by create_app."""
    return request.app.state.orchestrator


# =============================================================================
# Routes
# =============================================================================


@router.post('/{provider_id}/sync')
def sync_provider(
    provider_id: int,
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    report: SyncReport = orchestrator.sync_and_reconcile(provider_id)
    if not report.success:
        return JSONResponse(
            status_code=400,
            content={'success': False, 'error': report.error},
        )

    return JSONResponse(
        content={
            'success': True,
            'data': report.model_dump(
                by_alias=True, include={'created_count', 'updated_count', 'failed_count'}
            ),
        }
    )


@router.post('/{provider_id}/test')
def test_provider_connection(
    provider_id: int,
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    result: ConnectionTestResult = orchestrator.test_connection(provider_id)
    return JSONResponse(content=result.model_dump(by_alias=True))


@router.post('/{provider_id}/refresh')
def refresh_provider_locations(
    provider_id: int,
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    result: RefreshResult = orchestrator.refresh_locations(provider_id)
    if not result.success:
        return JSONResponse(
            status_code=400,
            content={'success': False, 'error': result.error},
        )

    return JSONResponse(
        content={
            'success': True,
            'data': result.model_dump(by_alias=True, exclude={'success', 'error'}),
        }
    )


# =============================================================================
# Error handlers
# =============================================================================


def _provider_not_found(_request: Request, error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={'success': False, 'error': str(error)},
    )


def _persistence_failed(_request: Request, error: Exception) -> JSONResponse:
    logger.error('Request failed on persistence: %s', error)
    return JSONResponse(
        status_code=500,
        content={'success': False, 'error': 'Database operation failed'},
    )


# =============================================================================
# Application factory
# =============================================================================


def create_app(config: SyncServiceConfig) -> FastAPI:
    """
    Build the FastAPI application and its service object graph.

    The schema is created (if missing) before the app is returned. The
    vendor HTTP client is closed and the engine disposed on shutdown.

    Args:
        config: Validated service configuration.

    Returns:
        Configured FastAPI application.
    """
    engine = create_engine_from_config(config.database)
    init_schema(engine)
    session_factory = create_session_factory(engine)

    vault = CredentialVault(config.vault)
    client = VendorClient(config.http)
    factory = ProviderFactory(client, config.vendors)
    provider_cache: TTLCache[int, ProviderRecord] = TTLCache(
        config.cache.provider_ttl_seconds
    )
    provider_store = ProviderStore(session_factory, vault, factory, provider_cache)
    trailer_store = TrailerStore(session_factory)
    orchestrator = SyncOrchestrator(
        provider_store, trailer_store, vault, factory, config.sync
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        logger.info('Shutting down: closing vendor client and database engine')
        client.close()
        engine.dispose()

    app = FastAPI(title='Fleet GPS Sync', lifespan=lifespan)
    app.state.config = config
    app.state.engine = engine
    app.state.vendor_client = client
    app.state.provider_store = provider_store
    app.state.trailer_store = trailer_store
    app.state.orchestrator = orchestrator

    app.add_exception_handler(ProviderNotFoundError, _provider_not_found)
    app.add_exception_handler(PersistenceError, _persistence_failed)
    app.include_router(router)

    logger.info('Fleet GPS sync API ready (database: %s)', engine.url.render_as_string())
    return app
