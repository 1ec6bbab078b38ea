from __future__ import annotations

import logging

from statemachine import State, StateMachine

from hearthwatch.core.models import SessionPhase, SessionState

logger = logging.getLogger(__name__)


class SessionFSM(StateMachine):
    """FSM wrapper around SessionState.

    Phases: init (teams unresolved) -> mulligan (teams resolved, turn 1 pending)
    -> playing -> init again once both players have a terminal play state.
    The reducer mutates the session; the FSM only guards which lifecycle
    transitions are allowed from the current phase.
    """

    init = State(SessionPhase.init.value, value=SessionPhase.init.value, initial=True)
    mulligan = State(SessionPhase.mulligan.value, value=SessionPhase.mulligan.value)
    playing = State(SessionPhase.playing.value, value=SessionPhase.playing.value)

    game_started = init.to(mulligan)
    turn_started = mulligan.to(playing) | playing.to.itself()
    game_finished = init.to.itself() | mulligan.to(init) | playing.to(init)

    def __init__(self, session: SessionState):
        self.session = session
        super().__init__(start_value=session.phase.value)

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase(str(self.current_state.value))

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.debug("%s: %s -> %s", event, source.id, target.id)

    def sync_phase_to_model(self) -> None:
        self.session.phase = self.phase

    def rebind(self, session: SessionState) -> None:
        """Point the FSM at a fresh session (after a reset) and mirror the phase into it."""

        self.session = session
        self.sync_phase_to_model()
