from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, cast

import redis


@dataclass(frozen=True, slots=True)
class CueStream:
    session_id: str

    @property
    def key(self) -> str:
        return f"cues:{self.session_id}"


def publish_to_stream(*, r: redis.Redis, stream: CueStream, fields: Mapping[str, str], maxlen: int | None = None) -> str:
    """Append an entry to a session's cue stream."""

    # redis-py stubs expect field/value unions; we only ever write strings.
    stream_id = r.xadd(stream.key, {str(k): str(v) for k, v in fields.items()}, maxlen=maxlen, approximate=True)
    return cast(str, stream_id)


def read_stream(*, r: redis.Redis, stream: CueStream, count: int = 20, start: str = "-", end: str = "+") -> list[tuple[str, dict[str, str]]]:
    entries = r.xrange(stream.key, min=start, max=end, count=count)
    return [(cast(str, mid), cast(dict[str, str], fields)) for mid, fields in entries]
