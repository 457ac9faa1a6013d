from __future__ import annotations

import pytest

from pyeverywhere.config import EverywhereConfig
from pyeverywhere.exceptions import EverywhereConfigError


def test_defaults() -> None:
    config = EverywhereConfig()

    assert config.token_id is None
    assert config.cache_refresh_ms == 300_000
    assert config.retention_duration_ms == 3_600_000
    assert config.debug is False
    assert config.key_prefix == "inreach"
    assert config.time_bound_format == "epoch"
    assert config.pull_enabled is False


def test_from_task_env_reads_host_keys() -> None:
    config = EverywhereConfig.from_task_env(
        {"TokenId": "tok-123", "CacheRefresh": "60000", "RetentionDuration": 900000, "DEBUG": True}
    )

    assert config.token_id == "tok-123"
    assert config.cache_refresh_ms == 60_000
    assert config.retention_duration_ms == 900_000
    assert config.debug is True
    assert config.pull_enabled is True


def test_from_task_env_overrides_win() -> None:
    config = EverywhereConfig.from_task_env({"TokenId": "tok"}, key_prefix="src", time_bound_format="iso")

    assert config.key_prefix == "src"
    assert config.time_bound_format == "iso"


def test_blank_token_disables_pull() -> None:
    config = EverywhereConfig.from_task_env({"TokenId": "  "})

    assert config.token_id is None
    assert config.pull_enabled is False


@pytest.mark.parametrize(
    "kwargs",
    [
        {"cache_refresh_ms": -1},
        {"retention_duration_ms": -5},
        {"time_bound_format": "rfc822"},
        {"key_prefix": " "},
        {"request_timeout": 0},
    ],
)
def test_invalid_values_rejected(kwargs) -> None:
    with pytest.raises(EverywhereConfigError):
        EverywhereConfig(**kwargs)


def test_non_integer_interval_rejected() -> None:
    with pytest.raises(EverywhereConfigError):
        EverywhereConfig.from_task_env({"CacheRefresh": "soon"})


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("EVERYWHERE_TOKEN_ID", "env-token")
    monkeypatch.setenv("EVERYWHERE_CACHE_REFRESH_MS", "1000")
    monkeypatch.setenv("EVERYWHERE_RETENTION_DURATION_MS", "2000")
    monkeypatch.setenv("EVERYWHERE_DEBUG", "yes")
    monkeypatch.setenv("EVERYWHERE_TIME_BOUND_FORMAT", "iso")

    config = EverywhereConfig.from_env(retention_duration_ms=3000)

    assert config.token_id == "env-token"
    assert config.cache_refresh_ms == 1000
    assert config.retention_duration_ms == 3000
    assert config.debug is True
    assert config.time_bound_format == "iso"
