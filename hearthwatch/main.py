from __future__ import annotations

import asyncio
import logging

import redis
from dotenv import load_dotenv
from fastapi import FastAPI

from hearthwatch.api.routes import router
from hearthwatch.assets.provision import provision_log_config
from hearthwatch.config import WatcherSettings, settings_from_env
from hearthwatch.follower import LogFollower
from hearthwatch.infra.redis_client import create_redis
from hearthwatch.reducer import FeedResult
from hearthwatch.session_store import SessionStore
from hearthwatch.streams import events_stream_key, publish_events
from hearthwatch.watcher import watch_log
from hearthwatch.websocket_hub import hub

logger = logging.getLogger(__name__)

# Session the background file watcher feeds; clients subscribe to it like any other.
LOCAL_SESSION_ID = "local"


def _make_local_sink(*, settings: WatcherSettings, r: redis.Redis):
    stream_key = events_stream_key(LOCAL_SESSION_ID, prefix=settings.events_stream_prefix)

    async def _sink(result: FeedResult) -> None:
        if not result.events:
            return
        try:
            publish_events(r=r, stream_key=stream_key, events=result.events)
        except redis.RedisError as e:
            logger.error("Could not publish %d events to %s: %s", len(result.events), stream_key, e)
        await hub.publish(LOCAL_SESSION_ID, [e.to_payload() for e in result.events])

    return _sink


def create_app(settings: WatcherSettings | None = None) -> FastAPI:
    if settings is None:
        load_dotenv(override=False)
        settings = settings_from_env()

    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="hearthwatch", version="0.1.0")
    app.include_router(router)
    app.state.settings = settings
    app.state.store = SessionStore(default_config=settings.reducer_config())
    app.state.watcher_task = None
    app.state.watcher_stop = None
    app.state.watcher_redis = None

    @app.on_event("startup")
    async def _startup() -> None:
        logger.debug("log file path: %s", settings.log_file)
        logger.debug("config file path: %s", settings.log_config_file)

        if settings.provision_log_config:
            provision_log_config(settings.log_config_file)

        if not settings.watch:
            return

        session = app.state.store.create_session(session_id=LOCAL_SESSION_ID)
        follower = LogFollower(settings.log_file, line_break=settings.line_break)
        stop = asyncio.Event()
        app.state.watcher_stop = stop
        app.state.watcher_redis = create_redis(settings)
        app.state.watcher_task = asyncio.create_task(
            watch_log(
                follower=follower,
                reducer=session.reducer,
                sink=_make_local_sink(settings=settings, r=app.state.watcher_redis),
                poll_interval_ms=settings.poll_interval_ms,
                stop=stop,
            )
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        if app.state.watcher_stop is not None:
            app.state.watcher_stop.set()
        if app.state.watcher_task is not None:
            await app.state.watcher_task
        if app.state.watcher_redis is not None:
            app.state.watcher_redis.close()
            app.state.watcher_redis = None

    @app.get("/info")
    async def info() -> dict[str, str]:
        return {"name": "hearthwatch", "version": "0.1.0", "turn_one_policy": settings.turn_one_policy.value}

    return app


app = create_app()
