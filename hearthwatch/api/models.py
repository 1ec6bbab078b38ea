from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from hearthwatch.core.models import Player, SessionPhase, TurnOnePolicy
from hearthwatch.reducer import FeedResult
from hearthwatch.session_store import WatchSession


class SessionCreateRequest(BaseModel):
    session_id: str | None = Field(default=None, min_length=1, max_length=64)
    # Falls back to the server-wide policy when omitted.
    turn_one_policy: TurnOnePolicy | None = None


class FeedRequest(BaseModel):
    text: str = Field(..., max_length=5_000_000)


class UnresolvedIdentityView(BaseModel):
    entity_name: str | None
    context: str
    line: str


class FeedResponse(BaseModel):
    session_id: str
    events: list[dict[str, Any]]
    unresolved: list[UnresolvedIdentityView] = Field(default_factory=list)
    stream_ids: list[str] = Field(default_factory=list)

    @staticmethod
    def from_result(*, session_id: str, result: FeedResult, stream_ids: list[str]) -> "FeedResponse":
        return FeedResponse(
            session_id=session_id,
            events=[e.to_payload() for e in result.events],
            unresolved=[
                UnresolvedIdentityView(entity_name=u.entity_name, context=u.context, line=u.line)
                for u in result.unresolved
            ],
            stream_ids=stream_ids,
        )


class SessionView(BaseModel):
    session_id: str
    created_at: datetime
    last_fed_at: datetime | None = None
    lines_fed: int = 0
    turn_one_policy: TurnOnePolicy

    phase: SessionPhase
    turn: int
    game_over_count: int
    players: list[Player]

    # Names only; the players themselves are listed above.
    friendly_player: str | None = None
    opposing_player: str | None = None
    first_player: str | None = None

    @staticmethod
    def from_session(session: WatchSession) -> "SessionView":
        reducer = session.reducer
        state = reducer.session
        return SessionView(
            session_id=session.session_id,
            created_at=session.created_at,
            last_fed_at=session.last_fed_at,
            lines_fed=session.lines_fed,
            turn_one_policy=reducer.config.turn_one_policy,
            phase=state.phase,
            turn=state.turn,
            game_over_count=state.game_over_count,
            players=list(state.snapshot()),
            friendly_player=state.friendly_player.name if state.friendly_player else None,
            opposing_player=state.opposing_player.name if state.opposing_player else None,
            first_player=state.first_player.name if state.first_player else None,
        )


class SessionListResponse(BaseModel):
    sessions: list[SessionView]


class EventsResponse(BaseModel):
    session_id: str
    stream: str
    # Raw stream entries: {"id": ..., "fields": {...}}.
    messages: list[dict[str, Any]]
