from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from hearthwatch.config import WatcherSettings
from hearthwatch.core.models import TurnOnePolicy
from hearthwatch.reducer import ReducerConfig, SessionReducer

ASSETS_DIR = Path(__file__).resolve().parent / "assets"


@pytest.fixture()
def sample_log() -> Path:
    return ASSETS_DIR / "sample_match.log"


@pytest.fixture()
def make_reducer() -> Callable[..., SessionReducer]:
    """Reducers split on "\\n" so tests don't depend on the host line ending."""

    def _make(policy: TurnOnePolicy = TurnOnePolicy.mulligan_wait) -> SessionReducer:
        return SessionReducer(ReducerConfig(line_break="\n", turn_one_policy=policy))

    return _make


@pytest.fixture()
def reducer(make_reducer: Callable[..., SessionReducer]) -> SessionReducer:
    return make_reducer()


@pytest.fixture()
def test_settings(tmp_path: Path) -> WatcherSettings:
    return WatcherSettings(
        line_break="\n",
        turn_one_policy=TurnOnePolicy.mulligan_wait,
        log_file=tmp_path / "output_log.txt",
        log_config_file=tmp_path / "config" / "log.config",
        events_stream_prefix="test:events",
        log_level="DEBUG",
    )


@pytest.fixture()
def client_and_redis(test_settings: WatcherSettings):
    """A TestClient on a hermetic app instance, with fakeredis in place of Redis."""

    import fakeredis
    from fastapi.testclient import TestClient

    from hearthwatch.api.deps import get_redis
    from hearthwatch.main import create_app

    app = create_app(settings=test_settings)
    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
