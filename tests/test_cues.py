from __future__ import annotations

import fakeredis
import pytest

from piracy_patrol.cues import LoggingCueSink, NullCueSink, RedisCueSink, create_cue_sink
from piracy_patrol.streams import CueStream, read_stream


def test_redis_cue_sink_appends_to_session_stream() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    sink = RedisCueSink(r=r, session_id="s1")

    sink.emit("start")
    sink.emit("zap")

    entries = read_stream(r=r, stream=CueStream(session_id="s1"))
    assert [fields["cue"] for _, fields in entries] == ["start", "zap"]
    assert all(fields["type"] == "cue" for _, fields in entries)
    assert r.xlen("cues:s1") == 2


@pytest.mark.parametrize(
    ("kind", "expected"),
    [("none", NullCueSink), ("log", LoggingCueSink), ("redis", RedisCueSink), ("bogus", LoggingCueSink)],
)
def test_create_cue_sink_honours_env(monkeypatch: pytest.MonkeyPatch, kind: str, expected: type) -> None:
    monkeypatch.setenv("PIRACY_PATROL_CUE_SINK", kind)
    sink = create_cue_sink(session_id="s1", r=fakeredis.FakeRedis(decode_responses=True))
    assert isinstance(sink, expected)


def test_create_cue_sink_without_redis_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PIRACY_PATROL_CUE_SINK", raising=False)
    assert isinstance(create_cue_sink(session_id="s1", r=None), LoggingCueSink)


def test_logging_cue_sink_logs(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("INFO", logger="piracy_patrol.cues"):
        LoggingCueSink("s9").emit("win")
    assert "cue=win" in caplog.text
