"""Platform-specific defaults, resolved outside the reduction core.

Nothing here runs at import time: callers pass the platform and environment in,
so the result is a pure function of its arguments and easy to test.
"""

from __future__ import annotations

import os
import platform as _platform
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import PurePath, PurePosixPath, PureWindowsPath


@dataclass(frozen=True, slots=True)
class LogPaths:
    log_file: PurePath
    log_config_file: PurePath


def default_line_break() -> str:
    return os.linesep


def _require(environ: Mapping[str, str], key: str) -> str:
    value = environ.get(key)
    if not value:
        raise ValueError(f"{key} is not set; configure the log paths explicitly")
    return value


def default_log_paths(
    *,
    platform: str | None = None,
    environ: Mapping[str, str] | None = None,
    machine: str | None = None,
) -> LogPaths:
    """Where the game writes its log, and where it reads its logging config from."""

    platform = platform if platform is not None else sys.platform
    environ = environ if environ is not None else os.environ
    machine = machine if machine is not None else _platform.machine()

    if platform.startswith("win"):
        program_files = "Program Files"
        if "64" in machine:
            program_files += "(x86)"
        log_file = PureWindowsPath("C:\\", program_files, "Hearthstone", "Hearthstone_Data", "output_log.txt")
        config_file = PureWindowsPath(_require(environ, "LOCALAPPDATA"), "Blizzard", "Hearthstone", "log.config")
        return LogPaths(log_file=log_file, log_config_file=config_file)

    home = PurePosixPath(_require(environ, "HOME"))
    return LogPaths(
        log_file=home / "Library" / "Logs" / "Unity" / "Player.log",
        log_config_file=home / "Library" / "Preferences" / "Blizzard" / "Hearthstone" / "log.config",
    )
