from __future__ import annotations

from collections.abc import Generator

import redis

from piracy_patrol.infra.redis_client import create_redis
from piracy_patrol.session_store import SessionStore, store


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis()
    try:
        yield client
    finally:
        try:
            client.close()
        except Exception:
            # Some redis client versions don't require explicit close.
            pass


def get_store() -> SessionStore:
    return store
