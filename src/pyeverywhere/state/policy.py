"""Resync gate and retention policy.

This module contains no payload parsing or network access; it only
decides, from timestamps, what a scheduled tick should do and which
tracks are too old to keep.
"""

from __future__ import annotations

from enum import StrEnum


class GateState(StrEnum):
    STALE = "stale"
    """No pull yet, or the refresh interval has elapsed: pull now."""
    FRESH = "fresh"
    """A recent pull exists: evict and re-emit the cached snapshot."""


def evaluate_gate(*, last_sync_at: int | None, now_ms: int, cache_refresh_ms: int) -> GateState:
    """Decide whether a tick should perform a bulk pull.

    The gate is ``STALE`` once ``now_ms - last_sync_at >= cache_refresh_ms``,
    so a tick at exactly ``last_sync_at + cache_refresh_ms`` pulls.
    """
    if last_sync_at is None:
        return GateState.STALE
    if now_ms - last_sync_at >= cache_refresh_ms:
        return GateState.STALE
    return GateState.FRESH


def is_expired(*, observed_at: int, now_ms: int, retention_ms: int) -> bool:
    """A track expires once its age is strictly greater than the retention window."""
    return now_ms - observed_at > retention_ms
