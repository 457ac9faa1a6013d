"""Reconciliation of normalized tracks into the ephemeral store.

Both paths upsert by key against the store that was just loaded. Nothing
is cleared first: a key that is not part of the incoming batch keeps its
entry until retention evicts it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pyeverywhere.models.track import DeviceTrack
from pyeverywhere.state.events import ApplyResult, IngestionSource
from pyeverywhere.state.store import EphemeralStore

_logger = logging.getLogger(__name__)


def _upsert(store: EphemeralStore, track: DeviceTrack, inserted: list[str], replaced: list[str]) -> None:
    if track.key in store:
        replaced.append(track.key)
    else:
        inserted.append(track.key)
    # Last write wins; fields are never merged.
    store.devices[track.key] = track


def apply_incremental(store: EphemeralStore, track: DeviceTrack) -> ApplyResult:
    """Insert or replace a single webhook track.

    No eviction runs here and ``last_sync_at`` is left alone.
    """
    inserted: list[str] = []
    replaced: list[str] = []
    _upsert(store, track, inserted, replaced)
    return ApplyResult(source=IngestionSource.WEBHOOK, inserted=tuple(inserted), replaced=tuple(replaced))


def apply_bulk(store: EphemeralStore, tracks: Iterable[DeviceTrack], *, now_ms: int) -> ApplyResult:
    """Upsert every track from a bulk pull and mark the store as synced at *now_ms*."""
    inserted: list[str] = []
    replaced: list[str] = []
    for track in tracks:
        _upsert(store, track, inserted, replaced)
    store.last_sync_at = now_ms

    _logger.debug(
        "Bulk merge: %d inserted, %d replaced, %d cached total",
        len(inserted),
        len(replaced),
        len(store.devices),
    )
    return ApplyResult(source=IngestionSource.POLL, inserted=tuple(inserted), replaced=tuple(replaced))
