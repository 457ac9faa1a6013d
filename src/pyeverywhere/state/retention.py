"""Retention eviction for the ephemeral store."""

from __future__ import annotations

import logging

from pyeverywhere.state.policy import is_expired
from pyeverywhere.state.store import EphemeralStore

_logger = logging.getLogger(__name__)


def evict_expired(store: EphemeralStore, *, retention_ms: int, now_ms: int) -> list[str]:
    """Remove every track older than *retention_ms* and return the removed keys.

    Tracks whose age is exactly the retention window are kept.
    """
    expired = sorted(
        key
        for key, track in store.devices.items()
        if is_expired(observed_at=track.observed_at, now_ms=now_ms, retention_ms=retention_ms)
    )
    for key in expired:
        del store.devices[key]

    if expired:
        _logger.debug("Evicted %d expired track(s): %s", len(expired), expired)
    return expired
