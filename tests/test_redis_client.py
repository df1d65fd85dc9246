from __future__ import annotations

import pytest

from piracy_patrol.infra.redis_client import CUE_SOCKET_TIMEOUT, DEFAULT_REDIS_URL, create_redis, get_redis_url


def test_redis_url_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PIRACY_PATROL_REDIS_URL", raising=False)
    monkeypatch.delenv("REDIS_URL", raising=False)
    assert get_redis_url() == DEFAULT_REDIS_URL

    monkeypatch.setenv("REDIS_URL", "redis://shared:6379/0")
    assert get_redis_url() == "redis://shared:6379/0"

    monkeypatch.setenv("PIRACY_PATROL_REDIS_URL", "redis://cues:6379/2")
    assert get_redis_url() == "redis://cues:6379/2"


def test_cue_client_has_bounded_timeouts() -> None:
    client = create_redis("redis://localhost:6379/0")
    try:
        kwargs = client.connection_pool.connection_kwargs
        assert kwargs["socket_timeout"] == CUE_SOCKET_TIMEOUT
        assert kwargs["socket_connect_timeout"] == CUE_SOCKET_TIMEOUT
        assert kwargs["decode_responses"] is True
    finally:
        client.close()
