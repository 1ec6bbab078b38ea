"""Line patterns for the game's Power/Zone log output.

Every pattern is matched independently: a single line can yield several records
(e.g. a zone change that also carries a turn counter suffix). Records come back
in pattern-table order, which is the order the reducer applies them in.

Classification is stateless. Phase guards (turn < 2, turn == 1, friendly player
name checks) belong to the reducer.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from hearthwatch.core.models import PlayStatus, Team

logger = logging.getLogger(__name__)

# The game-level entity; never a player.
GAME_ENTITY = "GameEntity"

# ASCII-only digits so `int()` never sees something it cannot parse.
_FLAGS = re.ASCII

ZONE_CHANGE_RE = re.compile(
    r"name=(?P<card_name>.+?) id=(?P<card_id>\d+).*to (?P<team>FRIENDLY|OPPOSING) (?P<zone>.+)$",
    _FLAGS,
)
TURN_VALUE_RE = re.compile(r"GameEntity tag=TURN value=(?P<turn>\d+)$", _FLAGS)
TURN_START_RE = re.compile(r"Entity=(?P<name>.+) tag=TURN_START", _FLAGS)
PLAYER_ENTERED_RE = re.compile(r"Entity=(?P<name>.+) tag=PLAYSTATE value=PLAYING$", _FLAGS)
TEAM_ID_RE = re.compile(r"Entity=(?P<name>.+) tag=TEAM_ID value=(?P<team_id>\d+)$", _FLAGS)
FIRST_PLAYER_RE = re.compile(r"Entity=(?P<name>.+) tag=FIRST_PLAYER value=1$", _FLAGS)
MULLIGAN_CHOICE_RE = re.compile(
    r"id=(?P<team_id>\d+) ChoiceType=MULLIGAN Cancelable=False CountMin=0 CountMax=\d+$",
    _FLAGS,
)
MULLIGAN_WAITING_RE = re.compile(r"name=(?P<name>.+?)\]? tag=MULLIGAN_STATE value=WAITING", _FLAGS)
PLAY_STATE_RE = re.compile(r"Entity=(?P<name>.+) tag=PLAYSTATE value=(?P<status>WON|LOST|TIED)$", _FLAGS)


@dataclass(frozen=True, slots=True)
class ZoneChange:
    card_name: str
    card_id: int
    team: Team
    zone: str


@dataclass(frozen=True, slots=True)
class TurnValue:
    turn: int


@dataclass(frozen=True, slots=True)
class TurnStartMarker:
    entity_name: str

    @property
    def is_game_entity(self) -> bool:
        return self.entity_name == GAME_ENTITY


@dataclass(frozen=True, slots=True)
class PlayerEntered:
    entity_name: str


@dataclass(frozen=True, slots=True)
class TeamId:
    entity_name: str
    team_id: int


@dataclass(frozen=True, slots=True)
class FirstPlayer:
    entity_name: str


@dataclass(frozen=True, slots=True)
class MulliganChoice:
    team_id: int


@dataclass(frozen=True, slots=True)
class MulliganWaiting:
    entity_name: str


@dataclass(frozen=True, slots=True)
class PlayState:
    entity_name: str
    status: PlayStatus


LineRecord = (
    ZoneChange
    | TurnValue
    | TurnStartMarker
    | PlayerEntered
    | TeamId
    | FirstPlayer
    | MulliganChoice
    | MulliganWaiting
    | PlayState
)


def _zone_change(m: re.Match[str]) -> LineRecord:
    return ZoneChange(
        card_name=m["card_name"],
        card_id=int(m["card_id"]),
        team=Team(m["team"]),
        zone=m["zone"],
    )


_PATTERNS: tuple[tuple[re.Pattern[str], Callable[[re.Match[str]], LineRecord]], ...] = (
    (ZONE_CHANGE_RE, _zone_change),
    (TURN_VALUE_RE, lambda m: TurnValue(turn=int(m["turn"]))),
    (TURN_START_RE, lambda m: TurnStartMarker(entity_name=m["name"])),
    (PLAYER_ENTERED_RE, lambda m: PlayerEntered(entity_name=m["name"])),
    (TEAM_ID_RE, lambda m: TeamId(entity_name=m["name"], team_id=int(m["team_id"]))),
    (FIRST_PLAYER_RE, lambda m: FirstPlayer(entity_name=m["name"])),
    (MULLIGAN_CHOICE_RE, lambda m: MulliganChoice(team_id=int(m["team_id"]))),
    (MULLIGAN_WAITING_RE, lambda m: MulliganWaiting(entity_name=m["name"])),
    (PLAY_STATE_RE, lambda m: PlayState(entity_name=m["name"], status=PlayStatus(m["status"]))),
)


def classify(line: str) -> list[LineRecord]:
    """Return every record the line matches, in pattern-table order."""

    # CRLF logs split on "\n" keep a trailing "\r" that would defeat the `$` anchors.
    line = line.rstrip("\r")
    if not line:
        return []

    records: list[LineRecord] = []
    for pattern, build in _PATTERNS:
        m = pattern.search(line)
        if m is None:
            continue
        try:
            records.append(build(m))
        except ValueError:
            # Digit runs past the int() conversion limit; only this match is lost.
            logger.debug("Skipping unparseable match of %s", pattern.pattern)
    return records


def split_lines(text: str, line_break: str) -> list[str]:
    if not line_break:
        raise ValueError("line_break must be a non-empty string")
    return text.split(line_break)
