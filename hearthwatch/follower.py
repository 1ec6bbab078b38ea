from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class LogFollower:
    """Reads only what has been appended to the game log since the last poll.

    Complete lines are returned; a trailing partial line is held back until its
    line break arrives so the reducer never sees half a line.
    """

    def __init__(self, path: Path, *, line_break: str, from_start: bool = False):
        if not line_break:
            raise ValueError("line_break must be a non-empty string")
        self.path = path
        self.line_break = line_break
        self.offset = 0
        self._pending = b""
        self._break_bytes = line_break.encode("utf-8")

        if not from_start:
            try:
                self.offset = path.stat().st_size
            except FileNotFoundError:
                logger.warning("Log file not found at %s; will read it from the start once it appears.", path)

    def poll(self) -> str:
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            logger.warning("Log file not found at %s. Waiting...", self.path)
            return ""

        if size < self.offset:
            logger.info("Log file %s shrank (%d -> %d bytes); reading from the start.", self.path, self.offset, size)
            self.offset = 0
            self._pending = b""

        if size == self.offset:
            return ""

        with self.path.open("rb") as f:
            f.seek(self.offset)
            chunk = f.read(size - self.offset)
        self.offset += len(chunk)

        data = self._pending + chunk
        cut = data.rfind(self._break_bytes)
        if cut < 0:
            self._pending = data
            return ""

        end = cut + len(self._break_bytes)
        self._pending = data[end:]
        logger.debug("Read %d bytes from %s", len(chunk), self.path.name)
        return data[:end].decode("utf-8", errors="replace")
