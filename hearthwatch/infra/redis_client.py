from __future__ import annotations

import redis

from hearthwatch.config import WatcherSettings


def create_redis(settings: WatcherSettings) -> redis.Redis:
    """Client for the events streams named by `settings.events_stream_prefix`."""

    # decode_responses=True => XRANGE fields come back as str, matching event_to_fields()
    return redis.Redis.from_url(settings.redis_url, decode_responses=True, client_name="hearthwatch")
