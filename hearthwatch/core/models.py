from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel


class Team(StrEnum):
    FRIENDLY = "FRIENDLY"
    OPPOSING = "OPPOSING"


class PlayStatus(StrEnum):
    WON = "WON"
    LOST = "LOST"
    TIED = "TIED"


class SessionPhase(StrEnum):
    init = "init"
    mulligan = "mulligan"
    playing = "playing"


class TurnOnePolicy(StrEnum):
    """How the first real turn of a match is detected.

    - `mulligan_wait`: the friendly player's MULLIGAN_STATE=WAITING line starts
      turn 1 for the first player.
    - `first_turn_start`: the first TURN_START line at turn 1 that names a player
      (not the game entity) starts turn 1 for that player.
    """

    mulligan_wait = "mulligan_wait"
    first_turn_start = "first_turn_start"


class Player(BaseModel):
    name: str

    # Filled in during pre-match setup.
    team_id: int | None = None
    team: Team | None = None

    # Only set once the match is over for this player.
    status: PlayStatus | None = None


@dataclass(slots=True)
class SessionState:
    """Mutable per-match state owned by a single reducer.

    `players_by_name` indexes the same Player objects held in `players`;
    the friendly/opposing/first references point into that list as well.
    """

    players: list[Player] = field(default_factory=list)
    players_by_name: dict[str, Player] = field(default_factory=dict)

    friendly_player: Player | None = None
    opposing_player: Player | None = None
    first_player: Player | None = None

    turn: int = 0
    game_over_count: int = 0

    phase: SessionPhase = SessionPhase.init
    mulligan_started: bool = False

    def add_player(self, name: str) -> Player:
        player = Player(name=name)
        self.players.append(player)
        self.players_by_name[name] = player
        return player

    def snapshot(self) -> tuple[Player, ...]:
        return tuple(p.model_copy() for p in self.players)
