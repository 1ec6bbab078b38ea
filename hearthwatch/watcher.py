from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from hearthwatch.follower import LogFollower
from hearthwatch.reducer import FeedResult, SessionReducer

logger = logging.getLogger(__name__)

ResultSink = Callable[[FeedResult], Awaitable[None]]


async def poll_once(*, follower: LogFollower, reducer: SessionReducer, sink: ResultSink) -> FeedResult:
    """Feed whatever was appended since the last poll; the sink sees every non-empty result."""

    text = follower.poll()
    result = reducer.feed(text) if text else FeedResult()
    if result.events or result.unresolved:
        await sink(result)
    return result


async def watch_log(
    *,
    follower: LogFollower,
    reducer: SessionReducer,
    sink: ResultSink,
    poll_interval_ms: int = 500,
    stop: asyncio.Event | None = None,
) -> None:
    """Poll the log until `stop` is set (or the task is cancelled).

    Buffers are reduced strictly one after another so event order follows the log.
    """

    stop = stop or asyncio.Event()
    logger.info("Log watcher started on %s", follower.path)
    while not stop.is_set():
        try:
            await poll_once(follower=follower, reducer=reducer, sink=sink)
        except OSError as e:
            logger.error("Error reading %s: %s", follower.path, e)
        except Exception:
            # Keep watching; the next poll picks up from the follower's offset.
            logger.exception("Error handling new lines from %s", follower.path)

        try:
            await asyncio.wait_for(stop.wait(), timeout=poll_interval_ms / 1000)
        except asyncio.TimeoutError:
            pass
    logger.info("Log watcher stopped.")
