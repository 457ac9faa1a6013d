"""Ephemeral device-track store.

The store is the only mutable state kept between invocations. It is
loaded from the host's ephemeral storage at the start of an invocation,
mutated in place, and saved at the end. It is passed around as a value;
there is no module-level instance.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pyeverywhere.models.track import DeviceTrack

_logger = logging.getLogger(__name__)


class StateBackend(Protocol):
    """Host-provided ephemeral storage.

    ``load`` returns the last saved payload (or ``None`` on first use);
    ``save`` replaces it. The payload is opaque JSON-compatible data.
    """

    async def load(self) -> dict[str, Any] | None: ...

    async def save(self, payload: dict[str, Any]) -> None: ...


class EphemeralStore(BaseModel):
    """Keyed map of device tracks plus the last bulk-pull time."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    devices: dict[str, DeviceTrack] = Field(default_factory=dict)
    last_sync_at: int | None = Field(default=None, alias="cachetime")
    """Epoch milliseconds of the last successful bulk pull."""

    def __len__(self) -> int:
        return len(self.devices)

    def __contains__(self, key: object) -> bool:
        return key in self.devices

    def tracks(self) -> list[DeviceTrack]:
        """Tracks ordered by key."""
        return [self.devices[key] for key in sorted(self.devices)]

    @classmethod
    def from_persisted(cls, payload: Any) -> EphemeralStore:
        """Rebuild a store from its persisted form.

        Missing or unreadable payloads yield an empty store. Individual
        device entries that fail validation are dropped; the rest are kept.
        """
        if payload is None:
            return cls()
        if not isinstance(payload, dict):
            _logger.warning("Ignoring persisted store of type %s; starting empty", type(payload).__name__)
            return cls()

        raw_devices = payload.get("devices")
        devices: dict[str, DeviceTrack] = {}
        if isinstance(raw_devices, dict):
            for key, raw in raw_devices.items():
                try:
                    track = DeviceTrack.model_validate(raw)
                except ValidationError:
                    _logger.warning("Dropping unreadable cached device %r", key)
                    continue
                # The track's own key is authoritative.
                devices[track.key] = track
        elif raw_devices is not None:
            _logger.warning("Ignoring persisted devices of type %s", type(raw_devices).__name__)

        last_sync_at = payload.get("cachetime")
        if last_sync_at is not None and (isinstance(last_sync_at, bool) or not isinstance(last_sync_at, int)):
            _logger.warning("Ignoring persisted cachetime %r", last_sync_at)
            last_sync_at = None

        return cls(devices=devices, last_sync_at=last_sync_at)

    def to_persisted(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible persisted form."""
        return {
            "cachetime": self.last_sync_at,
            "devices": {key: track.model_dump(mode="json") for key, track in self.devices.items()},
        }


async def load_store(backend: StateBackend) -> EphemeralStore:
    """Load the store, treating storage failures as first use."""
    try:
        payload = await backend.load()
    except (OSError, ValueError):
        _logger.warning("Ephemeral state could not be loaded; starting empty", exc_info=True)
        return EphemeralStore()
    return EphemeralStore.from_persisted(payload)


async def save_store(backend: StateBackend, store: EphemeralStore) -> None:
    await backend.save(store.to_persisted())


class MemoryStateBackend:
    """In-process backend; keeps a deep copy so callers cannot alias it."""

    def __init__(self, payload: dict[str, Any] | None = None) -> None:
        self._payload = copy.deepcopy(payload)
        self.saves = 0

    @property
    def payload(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._payload)

    async def load(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._payload)

    async def save(self, payload: dict[str, Any]) -> None:
        self._payload = copy.deepcopy(payload)
        self.saves += 1


class JsonFileStateBackend:
    """Backend that keeps the payload in a JSON file.

    Writes go to a sibling temp file first and are moved into place with
    :func:`os.replace`, so a reader never sees a partial file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any] | None:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        if not text.strip():
            return None
        data = json.loads(text)
        return data if isinstance(data, dict) else None

    def _write(self, payload: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, separators=(",", ":"))
        os.replace(tmp_path, self._path)

    async def load(self) -> dict[str, Any] | None:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read)

    async def save(self, payload: dict[str, Any]) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write, payload)
