"""Token masking for debug logs.

Webhook bodies and bulk-pull query parameters can both carry the
Everywhere Hub token. Masked values keep the last four characters of long
tokens so operators can tell which token was in use.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset({"tokenid", "token", "authorization"})


def _mask(value: Any) -> str:
    text = str(value)
    return f"…{text[-4:]}" if len(text) > 8 else "<redacted>"


def _is_sensitive(key: Any) -> bool:
    return str(key).lower() in _SENSITIVE_KEYS


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Copy of a decoded JSON value with tokens masked and long strings cut."""
    if isinstance(value, dict):
        return {
            key: _mask(item) if _is_sensitive(key) else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_for_log(item, max_string=max_string) for item in value]
    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value


def redact_params(params: Mapping[str, Any]) -> dict[str, str]:
    """Query parameters as strings, with tokens masked."""
    return {key: _mask(value) if _is_sensitive(key) else str(value) for key, value in params.items()}
