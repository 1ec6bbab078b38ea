from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from hearthwatch.reducer import ReducerConfig, SessionReducer

# Session ids end up in Redis keys and URLs.
_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class WatchSession:
    session_id: str
    reducer: SessionReducer
    created_at: datetime
    last_fed_at: datetime | None = None
    lines_fed: int = 0


@dataclass(slots=True)
class SessionStore:
    """Process-local registry of reducers, one per independent log stream.

    Nothing is persisted: a restart starts every session from a fresh state.
    """

    default_config: ReducerConfig
    _sessions: dict[str, WatchSession] = field(default_factory=dict)

    def create_session(self, *, session_id: str | None = None, config: ReducerConfig | None = None) -> WatchSession:
        sid = session_id or uuid4().hex
        if not _SESSION_ID_RE.match(sid):
            raise ValueError("session_id must be 1-64 characters of letters, digits, '.', '_' or '-'")
        if sid in self._sessions:
            raise ValueError(f"Session already exists: {sid}")

        session = WatchSession(
            session_id=sid,
            reducer=SessionReducer(config or self.default_config),
            created_at=_now(),
        )
        self._sessions[sid] = session
        return session

    def get_session(self, session_id: str) -> WatchSession | None:
        return self._sessions.get(session_id)

    def list_sessions(self) -> list[WatchSession]:
        return sorted(self._sessions.values(), key=lambda s: s.created_at, reverse=True)

    def drop_session(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def mark_fed(self, session: WatchSession, *, lines: int) -> None:
        session.last_fed_at = _now()
        session.lines_fed += lines
