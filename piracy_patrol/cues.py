from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from typing import Protocol

import redis

from piracy_patrol.api.models import Cue
from piracy_patrol.streams import CueStream, publish_to_stream

logger = logging.getLogger(__name__)

# Keep the per-session stream bounded; cues are fire-and-forget.
CUE_STREAM_MAXLEN = 500


class CueSink(Protocol):
    """Receives named audio cues; implementations must never affect gameplay."""

    def emit(self, cue: Cue) -> None:  # pragma: no cover
        ...


class NullCueSink:
    def emit(self, cue: Cue) -> None:
        return None


class LoggingCueSink:
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id

    def emit(self, cue: Cue) -> None:
        logger.info("cue session=%s cue=%s", self.session_id, cue)


class RedisCueSink:
    """Publishes cues to the Redis Stream `cues:{session_id}` for a sound client to play."""

    def __init__(self, *, r: redis.Redis, session_id: str) -> None:
        self.r = r
        self.stream = CueStream(session_id=session_id)

    def emit(self, cue: Cue) -> None:
        publish_to_stream(
            r=self.r,
            stream=self.stream,
            fields={"type": "cue", "cue": cue, "ts": datetime.now(tz=UTC).isoformat()},
            maxlen=CUE_STREAM_MAXLEN,
        )


def get_cue_sink_kind() -> str:
    return os.environ.get("PIRACY_PATROL_CUE_SINK", "redis").strip().lower()


def create_cue_sink(*, session_id: str, r: redis.Redis | None) -> CueSink:
    kind = get_cue_sink_kind()
    if kind == "none":
        return NullCueSink()
    if kind == "log" or r is None:
        return LoggingCueSink(session_id)
    if kind != "redis":
        logger.warning("Unknown PIRACY_PATROL_CUE_SINK=%r; falling back to log sink", kind)
        return LoggingCueSink(session_id)
    return RedisCueSink(r=r, session_id=session_id)
