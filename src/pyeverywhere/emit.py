"""Projection of cached device tracks into output features."""

from __future__ import annotations

from collections.abc import Iterable

from pyeverywhere.models._base import ms_to_iso
from pyeverywhere.models.feature import Feature, FeatureCollection, FeatureMetadata, FeatureProperties, PointGeometry
from pyeverywhere.models.track import DeviceTrack
from pyeverywhere.state.store import EphemeralStore


def track_to_feature(track: DeviceTrack) -> Feature:
    """Build the point feature for one track.

    ``time`` and ``start`` are both the report time, not the emission time.
    """
    observed = ms_to_iso(track.observed_at)
    meta = track.metadata
    return Feature(
        id=track.key,
        properties=FeatureProperties(
            course=track.course,
            callsign=track.display_name,
            time=observed,
            start=observed,
            metadata=FeatureMetadata(
                inreach_id=str(meta.entity_id),
                inreach_name=meta.name,
                inreach_device_type=meta.device_type,
                inreach_device_id=meta.device_id,
                inreach_receive=ms_to_iso(meta.received_at),
            ),
        ),
        geometry=PointGeometry(coordinates=(track.position.lon, track.position.lat)),
    )


def build_feature_collection(tracks: Iterable[DeviceTrack]) -> FeatureCollection:
    """Collection of *tracks*, ordered by key."""
    ordered = sorted(tracks, key=lambda track: track.key)
    return FeatureCollection(features=[track_to_feature(track) for track in ordered])


def build_snapshot(store: EphemeralStore) -> FeatureCollection:
    """Whole-store collection, emitted on scheduled ticks."""
    return build_feature_collection(store.tracks())


def build_delta(track: DeviceTrack) -> FeatureCollection:
    """Single-feature collection, emitted on the webhook path."""
    return FeatureCollection(features=[track_to_feature(track)])
