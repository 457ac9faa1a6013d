"""Ingestion layer.

This package contains the adapters that receive (webhook) or fetch (bulk
pull) Everywhere Hub reports, normalize them into device tracks, and
merge them into the ephemeral store.
"""

__all__: list[str] = []
