from __future__ import annotations

import os

import redis

DEFAULT_REDIS_URL = "redis://localhost:6379/0"

# Cue writes happen inside a game tick; a dead server may hold the tick for at most this long.
CUE_SOCKET_TIMEOUT = 0.5


def get_redis_url() -> str:
    """Cue outbox URL: `PIRACY_PATROL_REDIS_URL`, then the shared `REDIS_URL`."""

    return os.environ.get("PIRACY_PATROL_REDIS_URL") or os.environ.get("REDIS_URL") or DEFAULT_REDIS_URL


def create_redis(url: str | None = None) -> redis.Redis:
    return redis.Redis.from_url(
        url or get_redis_url(),
        decode_responses=True,
        socket_timeout=CUE_SOCKET_TIMEOUT,
        socket_connect_timeout=CUE_SOCKET_TIMEOUT,
    )
