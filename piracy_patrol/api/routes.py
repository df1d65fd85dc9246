from __future__ import annotations

from uuid import UUID

import redis
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from piracy_patrol.api.deps import get_redis, get_store
from piracy_patrol.api.models import InteractResponse, LevelListResponse, SessionListResponse, SessionSnapshot
from piracy_patrol.levels import LEVELS
from piracy_patrol.session_store import SessionStore
from piracy_patrol.streams import CueStream, read_stream
from piracy_patrol.websocket_hub import hub

router = APIRouter()


@router.websocket("/ws/session/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: UUID) -> None:
    sid = str(session_id)
    await hub.connect(sid, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(sid, websocket)
    except Exception:
        await hub.disconnect(sid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/levels", response_model=LevelListResponse)
async def list_levels_route() -> LevelListResponse:
    return LevelListResponse(levels=[cfg.to_info() for cfg in LEVELS])


@router.post("/session", response_model=SessionSnapshot, status_code=status.HTTP_201_CREATED)
async def create_session_route(sessions: SessionStore = Depends(get_store)) -> SessionSnapshot:
    session = sessions.create_session()
    return session.snapshot()


@router.get("/session", response_model=SessionListResponse)
async def list_sessions_route(sessions: SessionStore = Depends(get_store)) -> SessionListResponse:
    return SessionListResponse(sessions=[s.snapshot() for s in sessions.list_sessions()])


@router.get("/session/{session_id}", response_model=SessionSnapshot)
async def get_session_route(session_id: UUID, sessions: SessionStore = Depends(get_store)) -> SessionSnapshot:
    session = sessions.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session.snapshot()


@router.post("/session/{session_id}/start", response_model=SessionSnapshot)
async def start_game_route(session_id: UUID, sessions: SessionStore = Depends(get_store)) -> SessionSnapshot:
    try:
        session = sessions.require_session(session_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    session.start_game()
    snapshot = session.snapshot()
    await hub.broadcast_snapshot(snapshot)
    return snapshot


@router.post("/session/{session_id}/seats/{seat_id}/interact", response_model=InteractResponse)
async def interact_route(
    session_id: UUID,
    seat_id: int,
    sessions: SessionStore = Depends(get_store),
) -> InteractResponse:
    try:
        session = sessions.require_session(session_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    result = session.interact(seat_id)
    snapshot = session.snapshot()
    if result is not None:
        await hub.broadcast_snapshot(snapshot)
    return InteractResponse(outcome=result.outcome if result is not None else "ignored", snapshot=snapshot)


@router.get("/session/{session_id}/cues")
async def get_session_cues_route(
    session_id: UUID,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    """Debug endpoint: read a session's cue Redis Stream.

    Intended for local/dev testing when redis-cli isn't available.
    """

    if count < 1 or count > 200:
        raise HTTPException(status_code=422, detail="count must be between 1 and 200")

    stream = CueStream(session_id=str(session_id))
    try:
        entries = read_stream(r=r, stream=stream, count=count, start=start, end=end)
    except Exception as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    messages = [{"id": mid, "fields": fields} for mid, fields in entries]
    return {"session_id": str(session_id), "stream": stream.key, "messages": messages}
