"""Typed events produced while reducing a log.

Events are immutable; player payloads are snapshots taken at emission time so
later state changes (or a reset after game over) never alter an emitted event.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

from hearthwatch.core.models import Player, Team

EventType = Literal[
    "game-start",
    "mulligan-start",
    "turn-start",
    "zone-change",
    "game-over",
]


def _player_payload(player: Player) -> dict[str, Any]:
    return player.model_dump(mode="json")


@dataclass(frozen=True, slots=True)
class GameStartEvent:
    players: tuple[Player, ...]

    @property
    def event_type(self) -> EventType:
        return "game-start"

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.event_type, "players": [_player_payload(p) for p in self.players]}


@dataclass(frozen=True, slots=True)
class MulliganStartEvent:
    @property
    def event_type(self) -> EventType:
        return "mulligan-start"

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.event_type}


@dataclass(frozen=True, slots=True)
class TurnStartEvent:
    number: int
    player: Player

    @property
    def event_type(self) -> EventType:
        return "turn-start"

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.event_type, "number": self.number, "player": _player_payload(self.player)}


@dataclass(frozen=True, slots=True)
class ZoneChangeEvent:
    card_name: str
    card_id: int
    team: Team
    zone: str

    @property
    def event_type(self) -> EventType:
        return "zone-change"

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.event_type,
            "card_name": self.card_name,
            "card_id": self.card_id,
            "team": self.team.value,
            "zone": self.zone,
        }


@dataclass(frozen=True, slots=True)
class GameOverEvent:
    players: tuple[Player, ...]

    @property
    def event_type(self) -> EventType:
        return "game-over"

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.event_type, "players": [_player_payload(p) for p in self.players]}


GameEvent = GameStartEvent | MulliganStartEvent | TurnStartEvent | ZoneChangeEvent | GameOverEvent


def event_to_fields(event: GameEvent) -> dict[str, str]:
    """Flatten an event into string fields for a Redis Stream entry.

    Nested values (player lists) are JSON-encoded; everything else is stringified.
    """

    fields: dict[str, str] = {}
    for key, value in event.to_payload().items():
        if isinstance(value, (dict, list)):
            fields[key] = json.dumps(value, separators=(",", ":"))
        else:
            fields[key] = str(value)
    return fields
