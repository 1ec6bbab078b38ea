from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class SessionWebSocketHub:
    """In-process WebSocket fan-out of reduced events, keyed by session id.

    Each connected client receives every payload of a batch in order before the
    next batch is sent. A client whose send fails is dropped.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, session_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._subscribers[session_id].add(websocket)

    async def disconnect(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            subscribers = self._subscribers.get(session_id)
            if subscribers is None:
                return
            subscribers.discard(websocket)
            if not subscribers:
                del self._subscribers[session_id]

    def subscriber_count(self, session_id: str) -> int:
        return len(self._subscribers.get(session_id, ()))

    async def publish(self, session_id: str, payloads: list[dict[str, object]]) -> None:
        if not payloads:
            return

        async with self._lock:
            subscribers = list(self._subscribers.get(session_id, ()))

        for ws in subscribers:
            try:
                for payload in payloads:
                    await ws.send_json(payload)
            except Exception as e:
                logger.info("Dropping websocket for session %s: %s", session_id, e)
                await self.disconnect(session_id, ws)


hub = SessionWebSocketHub()
