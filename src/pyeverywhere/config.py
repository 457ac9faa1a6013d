"""Task configuration for pyeverywhere."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pyeverywhere._constants import (
    BASE_URL,
    DEFAULT_CACHE_REFRESH_MS,
    DEFAULT_KEY_PREFIX,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETENTION_DURATION_MS,
    TIME_BOUND_EPOCH,
    TIME_BOUND_FORMATS,
)
from pyeverywhere.exceptions import EverywhereConfigError


def _env_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _to_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise EverywhereConfigError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise EverywhereConfigError(f"{name} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class EverywhereConfig:
    """Task configuration.

    Parameters
    ----------
    token_id : str or None
        Everywhere Hub token used for scheduled bulk pulls. When absent
        the bulk pull is skipped and ticks only evict and re-emit.
    cache_refresh_ms : int
        Minimum time between bulk pulls, in milliseconds.
    retention_duration_ms : int
        Maximum age of a cached position before it is evicted, in
        milliseconds. Also used as the lower time bound of the pull.
    debug : bool
        Relax webhook body validation and log payloads at DEBUG level.
    base_url : str
        Everywhere Hub API base URL.
    key_prefix : str
        Namespace for device keys (``"<key_prefix>-<entityId>"``).
    time_bound_format : str
        How ``noEarlierThan`` is sent: ``"epoch"`` (milliseconds) or
        ``"iso"`` (ISO-8601).
    request_timeout : float
        Total timeout for the bulk pull request, in seconds.
    """

    token_id: str | None = None
    cache_refresh_ms: int = DEFAULT_CACHE_REFRESH_MS
    retention_duration_ms: int = DEFAULT_RETENTION_DURATION_MS
    debug: bool = False
    base_url: str = BASE_URL
    key_prefix: str = DEFAULT_KEY_PREFIX
    time_bound_format: str = TIME_BOUND_EPOCH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if self.cache_refresh_ms < 0:
            raise EverywhereConfigError(f"cache_refresh_ms must be >= 0, got {self.cache_refresh_ms}")
        if self.retention_duration_ms < 0:
            raise EverywhereConfigError(f"retention_duration_ms must be >= 0, got {self.retention_duration_ms}")
        if self.request_timeout <= 0:
            raise EverywhereConfigError(f"request_timeout must be > 0, got {self.request_timeout}")
        if self.time_bound_format not in TIME_BOUND_FORMATS:
            raise EverywhereConfigError(
                f"time_bound_format must be one of {sorted(TIME_BOUND_FORMATS)}, got {self.time_bound_format!r}"
            )
        if not self.key_prefix.strip():
            raise EverywhereConfigError("key_prefix must be non-empty")
        # Blank tokens behave like a missing token.
        if self.token_id is not None and not self.token_id.strip():
            object.__setattr__(self, "token_id", None)

    @property
    def pull_enabled(self) -> bool:
        """Whether scheduled ticks may perform a bulk pull."""
        return self.token_id is not None

    @classmethod
    def from_task_env(cls, env: Mapping[str, Any], **overrides: Any) -> EverywhereConfig:
        """Create configuration from the hosting runtime's task environment.

        Recognizes ``TokenId``, ``CacheRefresh``, ``RetentionDuration`` and
        ``DEBUG``. Missing keys fall back to the defaults; unknown keys are
        ignored.
        """
        kwargs: dict[str, Any] = {}
        token = env.get("TokenId")
        if token is not None:
            kwargs["token_id"] = str(token)
        if env.get("CacheRefresh") is not None:
            kwargs["cache_refresh_ms"] = _to_int("CacheRefresh", env["CacheRefresh"])
        if env.get("RetentionDuration") is not None:
            kwargs["retention_duration_ms"] = _to_int("RetentionDuration", env["RetentionDuration"])
        kwargs["debug"] = _env_bool(env.get("DEBUG"), False)

        kwargs.update(overrides)
        return cls(**kwargs)

    @classmethod
    def from_env(cls, **overrides: Any) -> EverywhereConfig:
        """Create configuration from ``EVERYWHERE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "EVERYWHERE_TOKEN_ID": "token_id",
            "EVERYWHERE_BASE_URL": "base_url",
            "EVERYWHERE_KEY_PREFIX": "key_prefix",
            "EVERYWHERE_TIME_BOUND_FORMAT": "time_bound_format",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        refresh_env = env.get("EVERYWHERE_CACHE_REFRESH_MS")
        if refresh_env is not None and "cache_refresh_ms" not in overrides:
            config_kwargs["cache_refresh_ms"] = _to_int("EVERYWHERE_CACHE_REFRESH_MS", refresh_env)

        retention_env = env.get("EVERYWHERE_RETENTION_DURATION_MS")
        if retention_env is not None and "retention_duration_ms" not in overrides:
            config_kwargs["retention_duration_ms"] = _to_int("EVERYWHERE_RETENTION_DURATION_MS", retention_env)

        timeout_env = env.get("EVERYWHERE_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise EverywhereConfigError(f"EVERYWHERE_REQUEST_TIMEOUT must be a number, got {timeout_env!r}") from exc

        if "debug" not in overrides:
            config_kwargs["debug"] = _env_bool(env.get("EVERYWHERE_DEBUG"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
