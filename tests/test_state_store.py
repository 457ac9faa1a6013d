from __future__ import annotations

import json

import pytest

from pyeverywhere.ingestion.apply import apply_bulk, apply_incremental
from pyeverywhere.models.track import DeviceMetadata, DeviceTrack, Position
from pyeverywhere.state.events import IngestionSource
from pyeverywhere.state.store import EphemeralStore, JsonFileStateBackend, MemoryStateBackend, load_store, save_store


def _track(key: str, observed_at: int, *, lon: float = -122.4, course: int = 90) -> DeviceTrack:
    entity_id = int(key.rsplit("-", 1)[1])
    return DeviceTrack(
        key=key,
        position=Position(lon=lon, lat=37.7),
        course=course,
        observed_at=observed_at,
        display_name=f"Device {entity_id}",
        metadata=DeviceMetadata(entity_id=entity_id, received_at=observed_at),
    )


def test_incremental_upsert_keeps_other_devices() -> None:
    store = EphemeralStore()
    apply_incremental(store, _track("src-1", 1000))
    apply_incremental(store, _track("src-2", 1100))

    assert set(store.devices) == {"src-1", "src-2"}


def test_incremental_upsert_is_last_write_wins() -> None:
    store = EphemeralStore()
    first = apply_incremental(store, _track("src-1", 2000, lon=1.0))
    second = apply_incremental(store, _track("src-1", 1000, lon=2.0))

    assert first.inserted == ("src-1",)
    assert second.replaced == ("src-1",)
    assert second.source == IngestionSource.WEBHOOK
    # No field merge and no timestamp ordering: the later write replaces the entry.
    assert store.devices["src-1"].position.lon == 2.0
    assert store.devices["src-1"].observed_at == 1000


def test_incremental_upsert_is_idempotent() -> None:
    track = _track("src-1", 1000)
    once = EphemeralStore()
    apply_incremental(once, track)
    twice = EphemeralStore()
    apply_incremental(twice, track)
    apply_incremental(twice, track)

    assert once.to_persisted() == twice.to_persisted()


def test_incremental_does_not_touch_last_sync() -> None:
    store = EphemeralStore(last_sync_at=500)
    apply_incremental(store, _track("src-1", 1000))

    assert store.last_sync_at == 500


def test_bulk_merge_retains_keys_absent_from_pull() -> None:
    store = EphemeralStore()
    apply_incremental(store, _track("src-1", 4000))

    result = apply_bulk(store, [_track("src-2", 4500)], now_ms=5000)

    assert set(store.devices) == {"src-1", "src-2"}
    assert store.last_sync_at == 5000
    assert result.inserted == ("src-2",)
    assert result.source == IngestionSource.POLL


def test_bulk_merge_with_no_results_still_marks_sync() -> None:
    store = EphemeralStore()
    apply_bulk(store, [], now_ms=5000)

    assert store.last_sync_at == 5000
    assert len(store) == 0


def test_persisted_round_trip() -> None:
    store = EphemeralStore(last_sync_at=4500)
    apply_incremental(store, _track("src-1", 1000))

    payload = json.loads(json.dumps(store.to_persisted()))
    restored = EphemeralStore.from_persisted(payload)

    assert restored.last_sync_at == 4500
    assert restored.devices == store.devices
    assert payload["cachetime"] == 4500


@pytest.mark.parametrize("payload", [None, "garbage", [], {"devices": "nope"}, {"cachetime": "soon"}])
def test_unreadable_payload_loads_as_empty(payload) -> None:
    store = EphemeralStore.from_persisted(payload)

    assert len(store) == 0
    assert store.last_sync_at is None


def test_corrupt_device_entry_dropped_others_kept() -> None:
    good = _track("src-1", 1000).model_dump(mode="json")
    store = EphemeralStore.from_persisted(
        {"cachetime": 10, "devices": {"src-1": good, "src-2": {"key": "src-2", "position": "nowhere"}}}
    )

    assert list(store.devices) == ["src-1"]
    assert store.last_sync_at == 10


def test_tracks_are_ordered_by_key() -> None:
    store = EphemeralStore()
    for key in ("src-3", "src-1", "src-2"):
        apply_incremental(store, _track(key, 1000))

    assert [track.key for track in store.tracks()] == ["src-1", "src-2", "src-3"]


@pytest.mark.asyncio
async def test_memory_backend_round_trip() -> None:
    backend = MemoryStateBackend()
    store = await load_store(backend)
    assert len(store) == 0

    apply_incremental(store, _track("src-1", 1000))
    await save_store(backend, store)

    reloaded = await load_store(backend)
    assert "src-1" in reloaded
    assert backend.saves == 1


@pytest.mark.asyncio
async def test_json_file_backend_round_trip(tmp_path) -> None:
    backend = JsonFileStateBackend(tmp_path / "state" / "ephemeral.json")
    assert await backend.load() is None

    store = EphemeralStore(last_sync_at=123)
    apply_incremental(store, _track("src-1", 1000))
    await save_store(backend, store)

    assert backend.path.exists()
    assert not backend.path.with_name("ephemeral.json.tmp").exists()
    reloaded = await load_store(backend)
    assert reloaded.last_sync_at == 123
    assert reloaded.devices == store.devices


@pytest.mark.asyncio
async def test_json_file_backend_corrupt_file_loads_empty(tmp_path) -> None:
    path = tmp_path / "ephemeral.json"
    path.write_text("{not json", encoding="utf-8")

    store = await load_store(JsonFileStateBackend(path))

    assert len(store) == 0
