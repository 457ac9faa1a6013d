"""Canonical device track model.

A :class:`DeviceTrack` is the latest known state of one tracked device,
whatever channel reported it. It is also the persisted value type of the
ephemeral store, so its field names are part of the stored format.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from pyeverywhere._constants import UNKNOWN_DEVICE_ID


class Position(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    lon: float
    lat: float


class DeviceMetadata(BaseModel):
    """Source identifiers carried through to the emitted feature."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    entity_id: int
    name: str = ""
    device_type: str = ""
    device_id: str = UNKNOWN_DEVICE_ID
    """Device id as text; ``"UNKNOWN"`` when the source does not report one."""
    received_at: int
    """Receive time in epoch milliseconds."""
    team_id: int | None = None
    entity_type: str | None = None
    oem_serial: str | None = None
    is_emergency: bool | None = None
    source: str | None = None


class DeviceTrack(BaseModel):
    """Latest known position of one device.

    Parameters
    ----------
    key : str
        Namespaced device identity (``"inreach-<entityId>"``).
    position : Position
        Longitude/latitude in degrees.
    course : int
        Heading in whole degrees.
    observed_at : int
        Report timestamp in epoch milliseconds.
    display_name : str
        Alias when the device has one, otherwise its name.
    metadata : DeviceMetadata
        Source-specific identifiers, opaque to the cache.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    key: str
    position: Position
    course: int
    observed_at: int
    display_name: str = ""
    metadata: DeviceMetadata

    @field_validator("key")
    @classmethod
    def _key_non_empty(cls, value: str) -> str:
        key = value.strip()
        if not key:
            raise ValueError("key must be non-empty")
        return key
