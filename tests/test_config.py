from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath

import pytest

from hearthwatch.config import settings_from_env
from hearthwatch.core.models import TurnOnePolicy
from hearthwatch.infra.redis_client import create_redis
from hearthwatch.platform_defaults import default_line_break, default_log_paths


def _env(**extra: str) -> dict[str, str]:
    return {
        "HEARTHWATCH_LOG_FILE": "/tmp/hs/output_log.txt",
        "HEARTHWATCH_LOG_CONFIG_FILE": "/tmp/hs/log.config",
        **extra,
    }


def test_defaults() -> None:
    s = settings_from_env(_env())

    assert s.line_break == default_line_break()
    assert s.turn_one_policy is TurnOnePolicy.mulligan_wait
    assert s.log_file == Path("/tmp/hs/output_log.txt")
    assert s.poll_interval_ms == 500
    assert s.events_stream_prefix == "hearthwatch:events"
    assert s.redis_url == "redis://localhost:6379/0"
    assert not s.watch and not s.provision_log_config


def test_overrides_and_reducer_config() -> None:
    s = settings_from_env(
        _env(
            HEARTHWATCH_LINE_BREAK="\\r\\n",
            HEARTHWATCH_TURN_ONE_POLICY="first_turn_start",
            HEARTHWATCH_WATCH="true",
            HEARTHWATCH_PROVISION_LOG_CONFIG="1",
            HEARTHWATCH_POLL_INTERVAL_MS="50",
            HEARTHWATCH_LOG_LEVEL="debug",
            REDIS_URL="redis://cache:6380/2",
        )
    )

    assert s.line_break == "\r\n"
    assert s.watch and s.provision_log_config
    assert s.log_level == "DEBUG"
    assert s.redis_url == "redis://cache:6380/2"

    cfg = s.reducer_config()
    assert cfg.line_break == "\r\n"
    assert cfg.turn_one_policy is TurnOnePolicy.first_turn_start


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("HEARTHWATCH_TURN_ONE_POLICY", "whenever", "HEARTHWATCH_TURN_ONE_POLICY"),
        ("HEARTHWATCH_POLL_INTERVAL_MS", "soon", "HEARTHWATCH_POLL_INTERVAL_MS"),
        ("HEARTHWATCH_POLL_INTERVAL_MS", "0", "positive"),
        ("HEARTHWATCH_LINE_BREAK", "", "must not be empty"),
    ],
)
def test_invalid_values_name_the_variable(key: str, value: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        settings_from_env(_env(**{key: value}))


def test_unset_paths_come_from_the_platform_provider() -> None:
    s = settings_from_env({"HOME": "/home/alice"})
    expected = default_log_paths(environ={"HOME": "/home/alice"})
    assert s.log_file == Path(str(expected.log_file))
    assert s.log_config_file == Path(str(expected.log_config_file))


def test_mac_default_paths() -> None:
    paths = default_log_paths(platform="darwin", environ={"HOME": "/Users/alice"}, machine="arm64")
    assert paths.log_file == PurePosixPath("/Users/alice/Library/Logs/Unity/Player.log")
    assert paths.log_config_file == PurePosixPath("/Users/alice/Library/Preferences/Blizzard/Hearthstone/log.config")


@pytest.mark.parametrize(
    ("machine", "program_files"),
    [("AMD64", "Program Files(x86)"), ("x86", "Program Files")],
)
def test_windows_default_paths(machine: str, program_files: str) -> None:
    paths = default_log_paths(
        platform="win32",
        environ={"LOCALAPPDATA": "C:\\Users\\alice\\AppData\\Local"},
        machine=machine,
    )
    assert paths.log_file == PureWindowsPath("C:\\", program_files, "Hearthstone", "Hearthstone_Data", "output_log.txt")
    assert paths.log_config_file == PureWindowsPath("C:\\Users\\alice\\AppData\\Local\\Blizzard\\Hearthstone\\log.config")


def test_missing_environment_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="LOCALAPPDATA"):
        default_log_paths(platform="win32", environ={}, machine="AMD64")
    with pytest.raises(ValueError, match="HOME"):
        default_log_paths(platform="darwin", environ={}, machine="arm64")


def test_redis_client_uses_the_configured_url() -> None:
    client = create_redis(settings_from_env(_env(REDIS_URL="redis://cache:6380/2")))
    try:
        kwargs = client.connection_pool.connection_kwargs
        assert (kwargs["host"], kwargs["port"], kwargs["db"]) == ("cache", 6380, 2)
        assert kwargs["decode_responses"] is True
    finally:
        client.close()
