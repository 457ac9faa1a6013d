"""Bulk-pull response models for ``GET /v2/api/tracks``."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from pyeverywhere.models._base import EverywhereBaseModel


class TrackProperties(EverywhereBaseModel):
    """Per-device properties of a ``latestPositionOnly`` track feature."""

    entity_id: int
    time: int
    """Report timestamp in epoch milliseconds."""
    direction: float
    """Heading in degrees."""
    name: str = ""
    entity_type: str | None = None
    device_type: str = ""
    alias: str | None = None
    oem_serial: str | None = None
    team_id: int | None = None
    inbound_message_id: int | None = None
    is_emergency: bool | None = None
    source: str | None = None


class TrackGeometry(EverywhereBaseModel):
    type: Literal["Point"]
    coordinates: list[float]

    @field_validator("coordinates")
    @classmethod
    def _lon_lat_pair(cls, value: list[float]) -> list[float]:
        if len(value) < 2:
            raise ValueError("point coordinates need at least longitude and latitude")
        return value


class TrackFeature(EverywhereBaseModel):
    id: str | int | None = None
    type: Literal["Feature"]
    properties: TrackProperties
    geometry: TrackGeometry


class TrackFeatureCollection(EverywhereBaseModel):
    type: Literal["FeatureCollection"]
    features: list[TrackFeature] = Field(default_factory=list)
