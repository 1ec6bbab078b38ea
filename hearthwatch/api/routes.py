from __future__ import annotations

import logging

import redis
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from hearthwatch.api.deps import get_redis, get_settings, get_store
from hearthwatch.api.models import (
    EventsResponse,
    FeedRequest,
    FeedResponse,
    SessionCreateRequest,
    SessionListResponse,
    SessionView,
)
from hearthwatch.config import WatcherSettings
from hearthwatch.reducer import ReducerConfig
from hearthwatch.session_store import SessionStore, WatchSession
from hearthwatch.streams import events_stream_key, publish_events, read_events
from hearthwatch.websocket_hub import hub

logger = logging.getLogger(__name__)

router = APIRouter()


def _require(store: SessionStore, session_id: str) -> WatchSession:
    session = store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.websocket("/ws/sessions/{session_id}")
async def session_events_ws(websocket: WebSocket, session_id: str) -> None:
    await hub.connect(session_id, websocket)

    try:
        # Keep the socket open; clients may send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(session_id, websocket)
    except Exception:
        await hub.disconnect(session_id, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest,
    store: SessionStore = Depends(get_store),
    settings: WatcherSettings = Depends(get_settings),
) -> SessionView:
    config = settings.reducer_config()
    if payload.turn_one_policy is not None:
        config = ReducerConfig(line_break=config.line_break, turn_one_policy=payload.turn_one_policy)

    try:
        session = store.create_session(session_id=payload.session_id, config=config)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    logger.info("Created session %s (%s)", session.session_id, config.turn_one_policy.value)
    return SessionView.from_session(session)


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions_route(store: SessionStore = Depends(get_store)) -> SessionListResponse:
    return SessionListResponse(sessions=[SessionView.from_session(s) for s in store.list_sessions()])


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session_route(session_id: str, store: SessionStore = Depends(get_store)) -> SessionView:
    return SessionView.from_session(_require(store, session_id))


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def drop_session_route(session_id: str, store: SessionStore = Depends(get_store)) -> None:
    if not store.drop_session(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


@router.post("/sessions/{session_id}/feed", response_model=FeedResponse)
async def feed_route(
    session_id: str,
    payload: FeedRequest,
    store: SessionStore = Depends(get_store),
    settings: WatcherSettings = Depends(get_settings),
    r: redis.Redis = Depends(get_redis),
) -> FeedResponse:
    """Reduce a buffer of log text and fan the resulting events out.

    The buffer is fully reduced before anything is published, so stream and
    websocket consumers see events in log order.
    """

    session = _require(store, session_id)
    result = session.reducer.feed(payload.text)
    store.mark_fed(session, lines=payload.text.count(session.reducer.config.line_break) + 1)

    stream_ids: list[str] = []
    if result.events:
        stream_key = events_stream_key(session_id, prefix=settings.events_stream_prefix)
        try:
            stream_ids = publish_events(r=r, stream_key=stream_key, events=result.events)
        except redis.RedisError as e:
            # The reducer has already advanced; callers still get the events in the response.
            logger.error("Could not publish %d events to %s: %s", len(result.events), stream_key, e)

    await hub.publish(session_id, [e.to_payload() for e in result.events])
    return FeedResponse.from_result(session_id=session_id, result=result, stream_ids=stream_ids)


@router.post("/sessions/{session_id}/reset", response_model=SessionView)
async def reset_session_route(session_id: str, store: SessionStore = Depends(get_store)) -> SessionView:
    session = _require(store, session_id)
    session.reducer.reset()
    return SessionView.from_session(session)


@router.get("/sessions/{session_id}/events", response_model=EventsResponse)
async def session_events_route(
    session_id: str,
    count: int = 50,
    start: str = "-",
    end: str = "+",
    settings: WatcherSettings = Depends(get_settings),
    r: redis.Redis = Depends(get_redis),
) -> EventsResponse:
    """Read back the events published for a session from its Redis Stream."""

    if count < 1 or count > 500:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 500")

    stream_key = events_stream_key(session_id, prefix=settings.events_stream_prefix)
    try:
        entries = read_events(r=r, stream_key=stream_key, start=start, end=end, count=count)
    except redis.ResponseError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return EventsResponse(
        session_id=session_id,
        stream=stream_key,
        messages=[{"id": mid, "fields": fields} for mid, fields in entries],
    )
