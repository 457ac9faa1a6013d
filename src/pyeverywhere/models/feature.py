"""Outbound feature collection models.

These mirror the point-feature shape the hosting runtime accepts for
incoming data. Field aliases are the on-the-wire names; use
:meth:`FeatureCollection.to_geojson` to produce the submitted payload.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _OutputModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class FeatureMetadata(_OutputModel):
    inreach_id: str = Field(serialization_alias="inreachId")
    inreach_name: str = Field(serialization_alias="inreachName")
    inreach_device_type: str = Field(serialization_alias="inreachDeviceType")
    inreach_device_id: str = Field(serialization_alias="inreachDeviceId")
    inreach_receive: str = Field(serialization_alias="inreachReceive")
    """ISO-8601 receive time."""


class FeatureProperties(_OutputModel):
    course: int
    callsign: str
    time: str
    start: str
    metadata: FeatureMetadata


class PointGeometry(_OutputModel):
    type: Literal["Point"] = "Point"
    coordinates: tuple[float, float]


class Feature(_OutputModel):
    id: str
    type: Literal["Feature"] = "Feature"
    properties: FeatureProperties
    geometry: PointGeometry


class FeatureCollection(_OutputModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[Feature] = Field(default_factory=list)

    def to_geojson(self) -> dict[str, Any]:
        """Return the JSON-ready payload using wire field names."""
        return self.model_dump(mode="json", by_alias=True)

    @property
    def ids(self) -> list[str]:
        return [feature.id for feature in self.features]
