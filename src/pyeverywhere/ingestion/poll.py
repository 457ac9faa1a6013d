"""Bulk-pull ingestion.

Fetches the latest position per device and normalizes each feature.
Merging into the store is left to :func:`pyeverywhere.ingestion.apply.apply_bulk`
so that the fetch can run before the store is loaded.
"""

from __future__ import annotations

from pyeverywhere._api.tracks import fetch_latest_tracks
from pyeverywhere._transport import Transport
from pyeverywhere.config import EverywhereConfig
from pyeverywhere.ingestion.normalize import to_device_track
from pyeverywhere.models.track import DeviceTrack


async def pull_latest_tracks(config: EverywhereConfig, transport: Transport, now_ms: int) -> list[DeviceTrack]:
    collection = await fetch_latest_tracks(config, transport, now_ms)
    return [to_device_track(feature, key_prefix=config.key_prefix) for feature in collection.features]
