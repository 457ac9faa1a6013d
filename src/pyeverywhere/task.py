"""Invocation entry points for the Everywhere Hub task.

A hosting runtime calls :meth:`EverywhereTask.handle_webhook` for each
inbound report and :meth:`EverywhereTask.run_scheduled` on every
scheduled tick. Each call is one unit of work: load the ephemeral store,
mutate it, save it, then hand the emitted collection to the sink.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

import aiohttp

from pyeverywhere._transport import HttpTransport, Transport
from pyeverywhere.config import EverywhereConfig
from pyeverywhere.emit import build_delta, build_snapshot
from pyeverywhere.exceptions import EverywhereApiError, EverywhereError, EverywhereTransportError
from pyeverywhere.ingestion.apply import apply_bulk, apply_incremental
from pyeverywhere.ingestion.normalize import to_device_track
from pyeverywhere.ingestion.poll import pull_latest_tracks
from pyeverywhere.ingestion.webhook import parse_webhook_body
from pyeverywhere.models.feature import FeatureCollection
from pyeverywhere.models.track import DeviceTrack
from pyeverywhere.models.webhook import WebhookReport
from pyeverywhere.state.policy import GateState, evaluate_gate
from pyeverywhere.state.retention import evict_expired
from pyeverywhere.state.store import EphemeralStore, StateBackend, load_store, save_store

_logger = logging.getLogger(__name__)


class FeatureSink(Protocol):
    """Downstream consumer of emitted collections (the host's submit)."""

    async def submit(self, collection: FeatureCollection) -> None: ...


@dataclasses.dataclass(frozen=True, slots=True)
class TickResult:
    """What a scheduled tick did.

    ``gate`` is ``None`` when no token is configured and the gate was not
    consulted.
    """

    collection: FeatureCollection
    gate: GateState | None
    pulled: bool = False
    pull_error: str | None = None
    evicted: tuple[str, ...] = ()


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class EverywhereTask:
    """Webhook and scheduled-tick handler over a host-provided store.

    Usage::

        async with EverywhereTask(config, backend, sink=sink) as task:
            await task.run_scheduled()

    Parameters
    ----------
    config : EverywhereConfig
        Task configuration.
    backend : StateBackend
        Ephemeral storage the store is loaded from and saved to.
    sink : FeatureSink or None
        Receives every emitted collection. When ``None`` collections are
        only returned.
    lock : async context manager or None
        Serialization point around load-mutate-save. Defaults to an
        :class:`asyncio.Lock` private to this task; pass a shared or
        external lock when several tasks use the same backend.
    """

    def __init__(
        self,
        config: EverywhereConfig,
        backend: StateBackend,
        *,
        sink: FeatureSink | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        lock: contextlib.AbstractAsyncContextManager[Any] | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._config = config
        self._backend = backend
        self._sink = sink
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._lock = lock if lock is not None else asyncio.Lock()
        self._clock = clock

    @property
    def config(self) -> EverywhereConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> EverywhereTask:
        if self._transport is None and self._config.pull_enabled:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise EverywhereError("Task not initialized. Use 'async with EverywhereTask(...) as task:'")
        return self._transport

    async def _submit(self, collection: FeatureCollection) -> None:
        if self._sink is not None:
            await self._sink.submit(collection)

    async def _evict_only(self, now_ms: int) -> tuple[EphemeralStore, tuple[str, ...]]:
        async with self._lock:
            store = await load_store(self._backend)
            evicted = evict_expired(store, retention_ms=self._config.retention_duration_ms, now_ms=now_ms)
            await save_store(self._backend, store)
        return store, tuple(evicted)

    # ------------------------------------------------------------------
    # Webhook path
    # ------------------------------------------------------------------

    async def handle_webhook(self, body: Any) -> FeatureCollection:
        """Ingest one webhook report and emit it as a single-feature collection.

        *body* may be the decoded JSON object, raw JSON text, or an already
        validated :class:`WebhookReport`. Other cached devices are left
        untouched.
        """
        if isinstance(body, WebhookReport):
            report = body
        else:
            report = parse_webhook_body(body, debug=self._config.debug)
        track = to_device_track(report, key_prefix=self._config.key_prefix)

        async with self._lock:
            store = await load_store(self._backend)
            result = apply_incremental(store, track)
            await save_store(self._backend, store)

        _logger.debug(
            "Webhook %s %s observed at %d (%d cached)",
            "replaced" if result.replaced else "inserted",
            track.key,
            track.observed_at,
            len(store),
        )

        collection = build_delta(track)
        await self._submit(collection)
        return collection

    # ------------------------------------------------------------------
    # Scheduled path
    # ------------------------------------------------------------------

    async def run_scheduled(self, *, now_ms: int | None = None) -> TickResult:
        """Run one scheduled tick.

        With a token configured and the gate stale, the latest positions are
        pulled first and merged into a freshly loaded store, so the network
        request never sits inside the load-mutate-save window. A failed pull
        leaves ``last_sync_at`` untouched and the tick falls back to
        eviction only. Either way, expired tracks are evicted before the
        whole store is emitted.
        """
        now = self._clock() if now_ms is None else now_ms

        if not self._config.pull_enabled:
            _logger.debug("No token configured; eviction-only tick")
            store, evicted = await self._evict_only(now)
            return await self._finish(TickResult(collection=build_snapshot(store), gate=None, evicted=evicted))

        peek = await load_store(self._backend)
        gate = evaluate_gate(
            last_sync_at=peek.last_sync_at,
            now_ms=now,
            cache_refresh_ms=self._config.cache_refresh_ms,
        )
        _logger.debug("Resync gate %s (last sync %s, now %d)", gate, peek.last_sync_at, now)

        if gate is GateState.FRESH:
            store, evicted = await self._evict_only(now)
            return await self._finish(TickResult(collection=build_snapshot(store), gate=gate, evicted=evicted))

        try:
            tracks = await pull_latest_tracks(self._config, self._require_transport(), now)
        except (EverywhereTransportError, EverywhereApiError) as exc:
            _logger.warning("Bulk pull failed; serving cached tracks until next tick: %s", exc)
            store, evicted = await self._evict_only(now)
            return await self._finish(
                TickResult(
                    collection=build_snapshot(store),
                    gate=gate,
                    pull_error=str(exc),
                    evicted=evicted,
                )
            )

        store, evicted = await self._merge_pull(tracks, now)
        return await self._finish(
            TickResult(collection=build_snapshot(store), gate=gate, pulled=True, evicted=evicted)
        )

    async def _merge_pull(self, tracks: list[DeviceTrack], now_ms: int) -> tuple[EphemeralStore, tuple[str, ...]]:
        async with self._lock:
            store = await load_store(self._backend)
            apply_bulk(store, tracks, now_ms=now_ms)
            evicted = evict_expired(store, retention_ms=self._config.retention_duration_ms, now_ms=now_ms)
            await save_store(self._backend, store)
        return store, tuple(evicted)

    async def _finish(self, result: TickResult) -> TickResult:
        await self._submit(result.collection)
        return result
