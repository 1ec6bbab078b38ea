from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from hearthwatch.core.classifier import (
    FirstPlayer,
    LineRecord,
    MulliganChoice,
    MulliganWaiting,
    PlayerEntered,
    PlayState,
    TeamId,
    TurnStartMarker,
    TurnValue,
    ZoneChange,
    classify,
    split_lines,
)
from hearthwatch.core.events import (
    GameEvent,
    GameOverEvent,
    GameStartEvent,
    MulliganStartEvent,
    TurnStartEvent,
    ZoneChangeEvent,
)
from hearthwatch.core.models import Player, SessionPhase, SessionState, Team, TurnOnePolicy
from hearthwatch.fsm import SessionFSM

logger = logging.getLogger(__name__)

# One logger per event kind so each stream can be switched on independently.
_log_game_start = logger.getChild("game_start")
_log_mulligan_start = logger.getChild("mulligan_start")
_log_turn_start = logger.getChild("turn_start")
_log_zone_change = logger.getChild("zone_change")
_log_game_over = logger.getChild("game_over")

MAX_PLAYERS = 2


@dataclass(frozen=True, slots=True)
class ReducerConfig:
    """Core configuration. Platform-specific defaults are resolved by the caller."""

    line_break: str
    turn_one_policy: TurnOnePolicy = TurnOnePolicy.mulligan_wait


@dataclass(frozen=True, slots=True)
class UnresolvedIdentity:
    """An event was dropped because its player could not be resolved."""

    entity_name: str | None
    context: str
    line: str


@dataclass(slots=True)
class FeedResult:
    """Result of reducing one buffer.

    - `events`: emitted events, in the order of their triggering lines.
    - `unresolved`: events dropped for lack of a player reference.
    """

    events: list[GameEvent] = field(default_factory=list)
    unresolved: list[UnresolvedIdentity] = field(default_factory=list)

    def extend(self, other: FeedResult) -> None:
        self.events.extend(other.events)
        self.unresolved.extend(other.unresolved)


def resolve_player(session: SessionState, name: str) -> Player | None:
    """Look a player up by name, falling back to the opposing player.

    Against the computer the opponent enters play under a placeholder name and is
    logged under its hero name afterwards, so any unknown name is taken to be the
    opposing side. Returns None when the opposing player is not known yet.
    """

    return session.players_by_name.get(name) or session.opposing_player


class SessionReducer:
    """Reduces log text into game events for one continuous log stream."""

    def __init__(self, config: ReducerConfig, session: SessionState | None = None):
        self.config = config
        self.session = session if session is not None else SessionState()
        self.fsm = SessionFSM(self.session)
        # Players of the match that just ended; their terminal lines may still be
        # repeated by the other log section until the next match is set up.
        self._finished: tuple[Player, ...] = ()

    def feed(self, text: str | bytes) -> FeedResult:
        """Reduce a buffer of log text, line by line in order."""

        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")
        return self.feed_lines(split_lines(text, self.config.line_break))

    def feed_lines(self, lines: Iterable[str]) -> FeedResult:
        result = FeedResult()
        for line in lines:
            self._reduce_line(line, result)
        return result

    def reset(self) -> None:
        """Discard the current match and start over from a pristine session."""

        self._finished = ()
        self.fsm.game_finished()
        self.session = SessionState()
        self.fsm.rebind(self.session)

    def _reduce_line(self, line: str, result: FeedResult) -> None:
        for record in classify(line):
            self._apply(record, line, result)

    def _apply(self, record: LineRecord, line: str, result: FeedResult) -> None:
        s = self.session

        if isinstance(record, ZoneChange):
            self._emit(
                result,
                ZoneChangeEvent(card_name=record.card_name, card_id=record.card_id, team=record.team, zone=record.zone),
            )
            _log_zone_change.debug("%s moved to %s %s.", record.card_name, record.team.value, record.zone)

        elif isinstance(record, TurnValue):
            if record.turn <= 1:
                self._finished = ()
            s.turn = record.turn

        elif isinstance(record, TurnStartMarker):
            self._on_turn_start_marker(record, line, result)

        elif isinstance(record, PlayerEntered):
            self._finished = ()
            if s.turn < 2 and record.entity_name not in s.players_by_name and len(s.players) < MAX_PLAYERS:
                s.add_player(record.entity_name)

        elif isinstance(record, TeamId):
            self._finished = ()
            if s.turn < 2:
                player = self._player_for_setup(record.entity_name)
                if player is None:
                    self._unresolved(result, record.entity_name, "team_id", line)
                else:
                    player.team_id = record.team_id

        elif isinstance(record, FirstPlayer):
            if s.turn < 2:
                player = self._player_for_setup(record.entity_name)
                if player is None:
                    self._unresolved(result, record.entity_name, "first_player", line)
                else:
                    s.first_player = player

        elif isinstance(record, MulliganChoice):
            if s.turn < 2 and self.fsm.phase is SessionPhase.init:
                self._start_game(record.team_id, result)

        elif isinstance(record, MulliganWaiting):
            if (
                self.config.turn_one_policy is TurnOnePolicy.mulligan_wait
                and s.turn == 1
                and self.fsm.phase is SessionPhase.mulligan
                and s.friendly_player is not None
                and record.entity_name == s.friendly_player.name
            ):
                self._start_turn(1, s.first_player, None, line, result)

        elif isinstance(record, PlayState):
            self._on_play_state(record, line, result)

    def _on_turn_start_marker(self, record: TurnStartMarker, line: str, result: FeedResult) -> None:
        s = self.session
        phase = self.fsm.phase

        if record.is_game_entity:
            if s.turn == 1 and phase is not SessionPhase.playing and not s.mulligan_started:
                s.mulligan_started = True
                self._emit(result, MulliganStartEvent())
                _log_mulligan_start.debug("Mulligan turn started.")
            return

        if phase is SessionPhase.init:
            # No GameStart yet for this match; a turn cannot precede it.
            return

        if s.turn == 1:
            # The mulligan-wait policy starts turn 1 from the wait line instead: when the
            # opposing side is handled first, this line precedes the mulligan zone changes.
            if self.config.turn_one_policy is TurnOnePolicy.first_turn_start and phase is SessionPhase.mulligan:
                self._start_turn(1, resolve_player(s, record.entity_name), record.entity_name, line, result)
            return

        if s.turn > 1:
            self._start_turn(s.turn, resolve_player(s, record.entity_name), record.entity_name, line, result)

    def _player_for_setup(self, name: str) -> Player | None:
        s = self.session
        player = s.players_by_name.get(name)
        if player is not None:
            return player
        if len(s.players) < MAX_PLAYERS:
            return s.add_player(name)
        return resolve_player(s, name)

    def _start_game(self, friendly_team_id: int, result: FeedResult) -> None:
        s = self.session
        for player in s.players:
            if player.team_id == friendly_team_id:
                player.team = Team.FRIENDLY
                s.friendly_player = player
            else:
                player.team = Team.OPPOSING
                s.opposing_player = player

        self.fsm.game_started()
        self.fsm.sync_phase_to_model()
        self._emit(result, GameStartEvent(players=s.snapshot()))
        _log_game_start.info("A game has started.")

    def _start_turn(
        self,
        number: int,
        player: Player | None,
        entity_name: str | None,
        line: str,
        result: FeedResult,
    ) -> None:
        self.fsm.turn_started()
        self.fsm.sync_phase_to_model()

        if player is None:
            self._unresolved(result, entity_name, "turn_start", line)
            return

        self._emit(result, TurnStartEvent(number=number, player=player.model_copy()))
        _log_turn_start.debug("Turn %s started, %s player.", number, player.team.value if player.team else "unknown")

    def _on_play_state(self, record: PlayState, line: str, result: FeedResult) -> None:
        s = self.session
        if self._finished:
            _log_game_over.debug("Ignoring %s %s from the finished game.", record.entity_name, record.status.value)
            return

        player = resolve_player(s, record.entity_name)
        if player is None and len(s.players) < MAX_PLAYERS:
            player = s.add_player(record.entity_name)
        if player is None:
            self._unresolved(result, record.entity_name, "play_state", line)
            return

        # Both log sections print the terminal state; count each player once.
        if player.status is not None:
            return

        player.status = record.status
        s.game_over_count += 1
        if s.game_over_count < MAX_PLAYERS:
            return

        snapshot = s.snapshot()
        self._emit(result, GameOverEvent(players=snapshot))
        _log_game_over.info("The current game has ended.")

        self.fsm.game_finished()
        self.session = SessionState()
        self.fsm.rebind(self.session)
        self._finished = snapshot

    def _emit(self, result: FeedResult, event: GameEvent) -> None:
        result.events.append(event)

    def _unresolved(self, result: FeedResult, entity_name: str | None, context: str, line: str) -> None:
        logger.warning("Could not resolve player %r for %s; dropping it.", entity_name, context)
        result.unresolved.append(UnresolvedIdentity(entity_name=entity_name, context=context, line=line))
