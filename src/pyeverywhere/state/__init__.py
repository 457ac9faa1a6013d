"""State/store layer.

This package owns the ephemeral device-track store that survives between
invocations, and the retention and resync policies applied to it. Webhook
and bulk-pull ingestion both merge into the same store.
"""
