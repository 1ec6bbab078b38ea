from __future__ import annotations

from collections.abc import Sequence
from typing import cast

import redis

from hearthwatch.core.events import GameEvent, event_to_fields

DEFAULT_STREAM_PREFIX = "hearthwatch:events"


def events_stream_key(session_id: str, *, prefix: str = DEFAULT_STREAM_PREFIX) -> str:
    return f"{prefix}:{session_id}"


def publish_events(*, r: redis.Redis, stream_key: str, events: Sequence[GameEvent]) -> list[str]:
    """Append events to a Redis Stream, one entry per event, in emission order."""

    ids: list[str] = []
    for event in events:
        # redis-py stubs expect field/value unions; every field here is a string.
        stream_id = r.xadd(stream_key, event_to_fields(event))  # type: ignore[arg-type]
        ids.append(cast(str, stream_id))
    return ids


def read_events(
    *,
    r: redis.Redis,
    stream_key: str,
    start: str = "-",
    end: str = "+",
    count: int = 50,
) -> list[tuple[str, dict[str, str]]]:
    entries = r.xrange(stream_key, min=start, max=end, count=count)
    return cast(list[tuple[str, dict[str, str]]], entries)
