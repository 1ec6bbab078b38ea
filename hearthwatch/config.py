from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from hearthwatch.core.models import TurnOnePolicy
from hearthwatch.platform_defaults import default_line_break, default_log_paths
from hearthwatch.reducer import ReducerConfig

DEFAULT_REDIS_URL = "redis://localhost:6379/0"

_TRUTHY = {"1", "true", "yes", "on"}

# Escapes accepted in HEARTHWATCH_LINE_BREAK, since .env files can't hold raw CR/LF.
_LINE_BREAK_ESCAPES = {"\\r": "\r", "\\n": "\n"}


@dataclass(frozen=True, slots=True)
class WatcherSettings:
    line_break: str
    turn_one_policy: TurnOnePolicy
    log_file: Path
    log_config_file: Path
    provision_log_config: bool = False
    watch: bool = False
    poll_interval_ms: int = 500
    events_stream_prefix: str = "hearthwatch:events"
    log_level: str = "INFO"
    redis_url: str = DEFAULT_REDIS_URL

    def reducer_config(self) -> ReducerConfig:
        return ReducerConfig(line_break=self.line_break, turn_one_policy=self.turn_one_policy)


def _decode_line_break(raw: str) -> str:
    out = raw
    for escaped, char in _LINE_BREAK_ESCAPES.items():
        out = out.replace(escaped, char)
    if not out:
        raise ValueError("HEARTHWATCH_LINE_BREAK must not be empty")
    return out


def _flag(environ: Mapping[str, str], key: str) -> bool:
    return environ.get(key, "").strip().lower() in _TRUTHY


def settings_from_env(environ: Mapping[str, str] | None = None) -> WatcherSettings:
    env = environ if environ is not None else os.environ

    raw_policy = env.get("HEARTHWATCH_TURN_ONE_POLICY", TurnOnePolicy.mulligan_wait.value)
    try:
        policy = TurnOnePolicy(raw_policy)
    except ValueError as e:
        allowed = ", ".join(p.value for p in TurnOnePolicy)
        raise ValueError(f"HEARTHWATCH_TURN_ONE_POLICY must be one of: {allowed}") from e

    raw_interval = env.get("HEARTHWATCH_POLL_INTERVAL_MS", "500")
    try:
        poll_interval_ms = int(raw_interval)
    except ValueError as e:
        raise ValueError("HEARTHWATCH_POLL_INTERVAL_MS must be an integer") from e
    if poll_interval_ms <= 0:
        raise ValueError("HEARTHWATCH_POLL_INTERVAL_MS must be positive")

    log_file = env.get("HEARTHWATCH_LOG_FILE")
    log_config_file = env.get("HEARTHWATCH_LOG_CONFIG_FILE")
    if not log_file or not log_config_file:
        # Only consult the platform when a path was left unset.
        defaults = default_log_paths(environ=env)
        log_file = log_file or str(defaults.log_file)
        log_config_file = log_config_file or str(defaults.log_config_file)

    raw_line_break = env.get("HEARTHWATCH_LINE_BREAK")

    return WatcherSettings(
        line_break=_decode_line_break(raw_line_break) if raw_line_break is not None else default_line_break(),
        turn_one_policy=policy,
        log_file=Path(log_file),
        log_config_file=Path(log_config_file),
        provision_log_config=_flag(env, "HEARTHWATCH_PROVISION_LOG_CONFIG"),
        watch=_flag(env, "HEARTHWATCH_WATCH"),
        poll_interval_ms=poll_interval_ms,
        events_stream_prefix=env.get("HEARTHWATCH_EVENTS_STREAM", "hearthwatch:events"),
        log_level=env.get("HEARTHWATCH_LOG_LEVEL", "INFO").upper(),
        redis_url=env.get("REDIS_URL", DEFAULT_REDIS_URL),
    )
