"""Normalization of source payloads into :class:`DeviceTrack`.

Webhook reports and bulk-pull features are two shapes of the same fact.
Both go through :func:`to_device_track` so that the store never has to
know which channel a track came from.
"""

from __future__ import annotations

import math
from typing import Any

from pyeverywhere._constants import UNKNOWN_DEVICE_ID
from pyeverywhere.models.track import DeviceMetadata, DeviceTrack, Position
from pyeverywhere.models.tracks import TrackFeature
from pyeverywhere.models.webhook import WebhookReport

SourceRecord = WebhookReport | TrackFeature


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def track_key(prefix: str, entity_id: Any) -> str:
    """Namespaced device key, identical for every source channel."""
    return f"{prefix}-{entity_id}"


def to_course(direction: float) -> int:
    """Round a heading to the nearest whole degree, halves rounding up."""
    return math.floor(direction + 0.5)


def pick_display_name(alias: str | None, name: str | None, fallback: str) -> str:
    return safe_str(alias) or safe_str(name) or fallback


def _from_webhook(report: WebhookReport, key_prefix: str) -> DeviceTrack:
    point = report.track_point
    key = track_key(key_prefix, report.entity_id)
    return DeviceTrack(
        key=key,
        position=Position(lon=point.point.x, lat=point.point.y),
        course=to_course(point.direction),
        observed_at=point.time,
        display_name=pick_display_name(report.alias, report.name, key),
        metadata=DeviceMetadata(
            entity_id=report.entity_id,
            name=report.name,
            device_type=report.device_type,
            device_id=safe_str(report.device_id) or UNKNOWN_DEVICE_ID,
            received_at=point.time,
            team_id=getattr(report, "team_id", None),
            is_emergency=getattr(point, "is_emergency", None),
            source=getattr(point, "source", None),
        ),
    )


def _from_track_feature(feature: TrackFeature, key_prefix: str) -> DeviceTrack:
    props = feature.properties
    lon, lat = feature.geometry.coordinates[0], feature.geometry.coordinates[1]
    key = track_key(key_prefix, props.entity_id)
    return DeviceTrack(
        key=key,
        position=Position(lon=lon, lat=lat),
        course=to_course(props.direction),
        observed_at=props.time,
        display_name=pick_display_name(props.alias, props.name, key),
        metadata=DeviceMetadata(
            entity_id=props.entity_id,
            name=props.name,
            device_type=props.device_type,
            device_id=UNKNOWN_DEVICE_ID,
            received_at=props.time,
            team_id=props.team_id,
            entity_type=props.entity_type,
            oem_serial=props.oem_serial,
            is_emergency=props.is_emergency,
            source=props.source,
        ),
    )


def to_device_track(record: SourceRecord, *, key_prefix: str) -> DeviceTrack:
    """Convert a webhook report or a bulk-pull feature into a device track."""
    if isinstance(record, WebhookReport):
        return _from_webhook(record, key_prefix)
    if isinstance(record, TrackFeature):
        return _from_track_feature(record, key_prefix)
    raise TypeError(f"Unsupported source record: {type(record).__name__}")
