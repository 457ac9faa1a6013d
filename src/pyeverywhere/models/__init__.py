"""Data models for Everywhere Hub payloads, cached tracks and emitted features."""

from pyeverywhere.models._base import EverywhereBaseModel, ms_to_datetime, ms_to_iso
from pyeverywhere.models.feature import Feature, FeatureCollection, FeatureMetadata, FeatureProperties, PointGeometry
from pyeverywhere.models.track import DeviceMetadata, DeviceTrack, Position
from pyeverywhere.models.tracks import TrackFeature, TrackFeatureCollection, TrackGeometry, TrackProperties
from pyeverywhere.models.webhook import (
    WebhookAlert,
    WebhookItem,
    WebhookPoint,
    WebhookReport,
    WebhookTrackPoint,
    WebhookTrackPointCore,
)

__all__ = [
    "DeviceMetadata",
    "DeviceTrack",
    "EverywhereBaseModel",
    "Feature",
    "FeatureCollection",
    "FeatureMetadata",
    "FeatureProperties",
    "PointGeometry",
    "Position",
    "TrackFeature",
    "TrackFeatureCollection",
    "TrackGeometry",
    "TrackProperties",
    "WebhookAlert",
    "WebhookItem",
    "WebhookPoint",
    "WebhookReport",
    "WebhookTrackPoint",
    "WebhookTrackPointCore",
    "ms_to_datetime",
    "ms_to_iso",
]
