from __future__ import annotations

from collections.abc import Generator

import redis
from fastapi import Request

from hearthwatch.config import WatcherSettings
from hearthwatch.infra.redis_client import create_redis
from hearthwatch.session_store import SessionStore


def get_redis(request: Request) -> Generator[redis.Redis, None, None]:
    client = create_redis(request.app.state.settings)
    try:
        yield client
    finally:
        client.close()


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_settings(request: Request) -> WatcherSettings:
    return request.app.state.settings
