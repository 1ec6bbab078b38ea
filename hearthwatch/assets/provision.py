from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

# Enables the Zone and Power log sections the line patterns are written against.
BUNDLED_LOG_CONFIG = Path(__file__).resolve().with_name("log.config")


def provision_log_config(dest: Path, *, source: Path = BUNDLED_LOG_CONFIG) -> Path:
    """Copy the bundled logging config to where the game reads it.

    Always overwrites: the game only writes the sections we parse when they are
    switched on, and a user-edited config may have turned them off.
    """

    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
    logger.info("Copied %s to %s so the game writes its Zone/Power log.", source.name, dest)
    return dest
