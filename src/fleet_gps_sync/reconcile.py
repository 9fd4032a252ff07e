# fleet_gps_sync/reconcile.py
"""
Asset -> trailer reconciliation.

For every asset returned by a sync:

1.  Derive the unit number from the vendor name with the word "trailer"
    removed (any case), falling back to the external id.
2.  Map the vendor status to a GPS status:
        stopped, active, connected, online -> available
        disconnected, offline, inactive    -> disconnected
        anything else (or nothing)         -> available
3.  Look up the trailer by (external_id, company_id).
        found:     overwrite vehicle and location fields, set last_sync
        not found: create it with status=available and gps_enabled=True

Assets are processed sequentially. A failure on one asset (validation or
persistence) is logged and counted; it never aborts the batch.

By default a GPS fix replaces the stored location and clears
manual_location_override. With `respect_manual_location_override` enabled,
flagged trailers keep their user-entered location; their vehicle fields,
GPS status and last_sync are still refreshed.
"""

import logging
import re
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, Final

from pydantic import BaseModel, ConfigDict

from fleet_gps_sync.config import SyncPolicyConfig
from fleet_gps_sync.models import (
    Asset,
    GpsStatus,
    TrailerCreate,
    TrailerRecord,
    TrailerStatus,
    TrailerUpdate,
)
from fleet_gps_sync.store import PersistenceError, TrailerStore

__all__: list[str] = [
    'ReconcileReport',
    'RefreshReport',
    'clean_display_name',
    'derive_unit_number',
    'map_gps_status',
    'reconcile_assets',
    'refresh_trailer_locations',
]

logger: logging.Logger = logging.getLogger(__name__)

AVAILABLE_STATUSES: Final[frozenset[str]] = frozenset(
    {'stopped', 'active', 'connected', 'online'}
)
DISCONNECTED_STATUSES: Final[frozenset[str]] = frozenset(
    {'disconnected', 'offline', 'inactive'}
)
_TRAILER_WORD: Final[re.Pattern[str]] = re.compile('trailer', re.IGNORECASE)


class ReconcileReport(BaseModel):
    """Counts from one reconciliation pass."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    created_count: int = 0
    updated_count: int = 0
    failed_count: int = 0


class RefreshReport(BaseModel):
    """
    Counts from a location-only refresh.

    Attributes:
        updated_count: Trailers whose location was refreshed.
        skipped_count: Assets with no matching trailer, or trailers under
            manual location override.
        failed_count: Assets whose update failed.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    updated_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0


# =============================================================================
# Pure helpers
# =============================================================================


def map_gps_status(raw_status: str | None) -> GpsStatus:
    """
    Map a vendor status string to the two-state GPS model.

    Total: every input, including None and unknown strings, maps to exactly
    one GpsStatus; unrecognized values are AVAILABLE.
    """
    normalized: str = (raw_status or '').strip().lower()
    if normalized in DISCONNECTED_STATUSES:
        return GpsStatus.DISCONNECTED
    return GpsStatus.AVAILABLE


def clean_display_name(name: str | None) -> str:
    """Remove the word "trailer" (any case) and collapse whitespace."""
    if not name:
        return ''
    return ' '.join(_TRAILER_WORD.sub('', name).split())


def derive_unit_number(asset: Asset) -> str:
    """Cleaned vendor name, or the external id when nothing is left."""
    return clean_display_name(asset.name) or asset.external_id


def _require_scope(asset: Asset) -> tuple[str, str]:
    if not asset.company_id or not asset.tenant_id:
        raise ValueError(
            f'Asset {asset.external_id!r} is not tagged with company and tenant'
        )
    return asset.company_id, asset.tenant_id


def _location_fields(asset: Asset, now: datetime) -> dict[str, Any]:
    return {
        'last_latitude': asset.location.lat,
        'last_longitude': asset.location.lng,
        'last_address': asset.location.address,
        'last_gps_update': asset.location.timestamp or now,
    }


def _keeps_manual_location(trailer: TrailerRecord, policy: SyncPolicyConfig) -> bool:
    return policy.respect_manual_location_override and trailer.manual_location_override


def _replacing_location_fields(
    trailer: TrailerRecord, asset: Asset, now: datetime
) -> dict[str, Any]:
    """Location fields for an existing trailer; a GPS fix clears a manual override."""
    fields: dict[str, Any] = _location_fields(asset, now)
    if trailer.manual_location_override:
        fields['manual_location_override'] = False
    return fields


# =============================================================================
# Reconciliation
# =============================================================================


def _update_existing(
    trailer: TrailerRecord,
    asset: Asset,
    trailer_store: TrailerStore,
    policy: SyncPolicyConfig,
    now: datetime,
) -> None:
    fields: dict[str, Any] = {
        'provider_id': asset.provider_id,
        'vin': asset.vin,
        'make': asset.make,
        'model': asset.model,
        'year': asset.year,
        'plate': asset.plate,
        'gps_status': map_gps_status(asset.raw_status),
        'last_sync': now,
    }
    if _keeps_manual_location(trailer, policy):
        logger.debug(
            'Trailer %d has a manual location override; location not synced',
            trailer.id,
        )
    else:
        fields.update(_replacing_location_fields(trailer, asset, now))

    trailer_store.update_trailer(trailer.id, TrailerUpdate(**fields))


def _create_new(
    asset: Asset,
    trailer_store: TrailerStore,
    now: datetime,
) -> None:
    company_id, tenant_id = _require_scope(asset)

    unit_number: str = derive_unit_number(asset)
    if unit_number != asset.external_id and trailer_store.unit_number_taken(
        tenant_id, unit_number
    ):
        logger.warning(
            'Unit number %r already used in tenant %s; using external id %r',
            unit_number,
            tenant_id,
            asset.external_id,
        )
        unit_number = asset.external_id

    trailer_store.create_trailer(
        TrailerCreate(
            external_id=asset.external_id,
            company_id=company_id,
            tenant_id=tenant_id,
            provider_id=asset.provider_id,
            unit_number=unit_number,
            vin=asset.vin,
            make=asset.make,
            model=asset.model,
            year=asset.year,
            plate=asset.plate,
            last_sync=now,
            gps_status=map_gps_status(asset.raw_status),
            gps_enabled=True,
            status=TrailerStatus.AVAILABLE,
            manual_location_override=False,
            **_location_fields(asset, now),
        )
    )


def reconcile_assets(
    assets: Iterable[Asset],
    trailer_store: TrailerStore,
    policy: SyncPolicyConfig,
    now: datetime | None = None,
) -> ReconcileReport:
    """
    Merge assets into trailer rows.

    Args:
        assets: Assets tagged with company_id, tenant_id and provider_id.
        trailer_store: Trailer persistence.
        policy: Manual-override policy.
        now: Sync timestamp; defaults to the current UTC time.

    Returns:
        Created, updated and failed counts. Failures are per asset.
    """
    sync_time: datetime = now or datetime.now(UTC)
    created_count: int = 0
    updated_count: int = 0
    failed_count: int = 0

    for asset in assets:
        try:
            company_id, _tenant_id = _require_scope(asset)
            existing: TrailerRecord | None = trailer_store.get_by_external_id(
                asset.external_id, company_id
            )
            if existing is not None:
                _update_existing(existing, asset, trailer_store, policy, sync_time)
                updated_count += 1
            else:
                _create_new(asset, trailer_store, sync_time)
                created_count += 1
        except (PersistenceError, ValueError) as error:
            failed_count += 1
            logger.error(
                'Failed to reconcile asset %r: %s', asset.external_id, error
            )

    logger.info(
        'Reconciliation complete: created=%d updated=%d failed=%d',
        created_count,
        updated_count,
        failed_count,
    )
    return ReconcileReport(
        created_count=created_count,
        updated_count=updated_count,
        failed_count=failed_count,
    )


def refresh_trailer_locations(
    assets: Iterable[Asset],
    trailer_store: TrailerStore,
    policy: SyncPolicyConfig,
    now: datetime | None = None,
) -> RefreshReport:
    """
    Update only the location of trailers that already exist.

    Never creates trailers and never touches vehicle fields. Trailers under
    manual location override are skipped when the policy respects it.
    """
    sync_time: datetime = now or datetime.now(UTC)
    updated_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0

    for asset in assets:
        try:
            company_id, _tenant_id = _require_scope(asset)
            existing: TrailerRecord | None = trailer_store.get_by_external_id(
                asset.external_id, company_id
            )
            if existing is None or _keeps_manual_location(existing, policy):
                skipped_count += 1
                continue

            trailer_store.update_trailer(
                existing.id,
                TrailerUpdate(
                    gps_status=map_gps_status(asset.raw_status),
                    last_sync=sync_time,
                    **_replacing_location_fields(existing, asset, sync_time),
                ),
            )
            updated_count += 1
        except (PersistenceError, ValueError) as error:
            failed_count += 1
            logger.error(
                'Failed to refresh location for asset %r: %s', asset.external_id, error
            )

    logger.info(
        'Location refresh complete: updated=%d skipped=%d failed=%d',
        updated_count,
        skipped_count,
        failed_count,
    )
    return RefreshReport(
        updated_count=updated_count,
        skipped_count=skipped_count,
        failed_count=failed_count,
    )
