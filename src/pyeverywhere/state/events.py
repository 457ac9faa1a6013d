"""Ingestion sources and the outcome of applying tracks to the store."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class IngestionSource(StrEnum):
    WEBHOOK = "webhook"
    POLL = "poll"


class ApplyResult(BaseModel):
    """Keys touched by one reconciliation pass."""

    model_config = ConfigDict(frozen=True)

    source: IngestionSource
    inserted: tuple[str, ...] = ()
    replaced: tuple[str, ...] = ()
