"""Inbound webhook payload models.

The Everywhere Hub webhook posts one JSON object per track report.
:class:`WebhookItem` is the full documented shape; :class:`WebhookReport`
holds only the fields the cache actually reads and is used when DEBUG
mode relaxes body validation.
"""

from __future__ import annotations

from typing import ClassVar

from pyeverywhere.models._base import EverywhereBaseModel


class WebhookPoint(EverywhereBaseModel):
    """Position as an x/y pair (longitude/latitude)."""

    x: float
    y: float


class WebhookAlert(EverywhereBaseModel):
    id: int
    description: str
    type: str


class WebhookTrackPointCore(EverywhereBaseModel):
    """Track point fields required to build a device track."""

    time: int
    """Report timestamp in epoch milliseconds."""
    direction: float
    """Heading in degrees."""
    point: WebhookPoint


class WebhookTrackPoint(WebhookTrackPointCore):
    direction: int
    inbound_message_id: int
    is_emergency: bool | None = None
    source: str | None = None
    alerts_list: list[WebhookAlert] | None = None


class WebhookReport(EverywhereBaseModel):
    """Minimal webhook body accepted in DEBUG mode."""

    entity_id: int
    track_point: WebhookTrackPointCore
    name: str = ""
    alias: str | None = None
    device_id: int | None = None
    device_type: str = ""


class WebhookItem(WebhookReport):
    """Full webhook body as documented by Everywhere Hub."""

    converter_id: str
    device_id: int
    team_id: int
    track_point: WebhookTrackPoint
    source: str
    device_type: str
    name: str

    _keep_blank: ClassVar[frozenset[str]] = frozenset({"name", "deviceType"})
