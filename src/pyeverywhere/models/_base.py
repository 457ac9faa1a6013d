"""Base model and timestamp helpers for Everywhere Hub payloads.

Every inbound payload model inherits from :class:`EverywhereBaseModel`
which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and blank
  string values so the field default is used. Keys listed in
  ``_keep_blank`` keep their blank strings.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def ms_to_datetime(value: int) -> datetime:
    """Convert epoch milliseconds to a UTC datetime without float rounding."""
    return _EPOCH + timedelta(milliseconds=int(value))


def ms_to_iso(value: int) -> str:
    """Format epoch milliseconds as ISO-8601 UTC (``2024-01-01T00:00:00.000Z``)."""
    return ms_to_datetime(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class EverywhereBaseModel(BaseModel):
    """Base for Everywhere Hub payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    _keep_blank: ClassVar[frozenset[str]] = frozenset()
    """Payload keys whose blank strings are kept as values."""

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original payload dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values

        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip() and key not in cls._keep_blank:
                continue
            cleaned[key] = value

        # Keep an explicitly supplied raw (kwargs construction).
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
