"""Turn-based play session between a human and the prediction service's agent."""

import threading
import time
import uuid
from typing import Callable, List, Optional

from .board import Board, GameKind, Mark, Move, apply_move, create_initial, is_terminal, winner
from .client import PredictionClient
from .exceptions import (
    IllegalMoveError,
    MalformedResponseError,
    PredictionError,
    StateTransitionError,
)
from .session_state import (
    SessionState,
    StateTransition,
    get_valid_next_states,
    is_valid_transition,
)
from .tracking.activity_logger import ActivityLogger

Listener = Callable[[str, SessionState, SessionState], None]


class GameSession:
    """
    Drives one interactive marking game end-to-end.

    The human always plays X and moves first. After every accepted human
    move the session waits in AWAITING_AGENT until the agent's move has
    been requested and applied; no human move is accepted meanwhile.

    Every board change and every reset bumps the session's version. An
    agent request remembers the version it was issued for, and a response
    that arrives after the version moved on (e.g. after a reset) is
    discarded.

    The lock is released while a request is in flight so that reset() can
    be called from another thread.
    """

    human_mark = Mark.X

    def __init__(
        self,
        client: PredictionClient,
        session_id: Optional[str] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        """
        Initialize the session with a fresh board.

        Args:
            client: Prediction client used for agent moves
            session_id: Optional identifier (default: random)
            activity_logger: Optional activity logger
        """
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self._client = client
        self._activity = activity_logger
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []

        self._board = create_initial()
        self._state = SessionState.HUMAN_TURN
        self._version = 0
        self._in_flight = False
        self._history: List[StateTransition] = []
        self.last_error: Optional[PredictionError] = None

        if self._activity:
            self._activity.log_session_start(GameKind.TIC_TAC_TOE.value)

    @property
    def board(self) -> Board:
        return self._board

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def version(self) -> int:
        return self._version

    @property
    def request_in_flight(self) -> bool:
        return self._in_flight

    @property
    def history(self) -> List[StateTransition]:
        with self._lock:
            return list(self._history)

    @property
    def outcome(self) -> Optional[str]:
        """'X' or 'O' for a win, 'draw', or None while the game continues."""
        if self._state != SessionState.DONE:
            return None
        mark = winner(self._board)
        return mark.value if mark else "draw"

    def play(self, move: Move) -> bool:
        """
        Apply a human move.

        Illegal moves, and moves outside HUMAN_TURN, are dropped without
        changing the session.

        Args:
            move: Target cell

        Returns:
            True if the move was applied
        """
        with self._lock:
            if self._state != SessionState.HUMAN_TURN:
                self._log_rejected(move, f"not the human's turn ({self._state.value})")
                return False

            try:
                board = apply_move(self._board, move, self.human_mark)
            except IllegalMoveError as e:
                self._log_rejected(move, str(e))
                return False

            self._board = board
            self._version += 1
            self.last_error = None
            if self._activity:
                self._activity.log_human_move(
                    move.row, move.col, self.human_mark.value, self._version
                )

            if is_terminal(board):
                self._transition(SessionState.DONE, "human move ended the game")
            else:
                self._transition(SessionState.AWAITING_AGENT, "human moved")
            return True

    def agent_turn(self) -> bool:
        """
        Request the agent's move and apply it.

        Returns:
            True if the move was applied, False if the response was discarded
            because the session was reset while the request was in flight

        Raises:
            StateTransitionError: If the session is not awaiting the agent or
                a request is already in flight
            PredictionError: If the request fails or the agent's move is
                illegal; the board is left unchanged and the session stays
                in AWAITING_AGENT so the request can be retried
        """
        with self._lock:
            if self._state != SessionState.AWAITING_AGENT:
                raise StateTransitionError(
                    f"Session {self.session_id} is not awaiting the agent "
                    f"(state: {self._state.value})"
                )
            if self._in_flight:
                raise StateTransitionError(
                    f"Session {self.session_id} already has an agent request in flight"
                )
            self._in_flight = True
            version = self._version
            board = self._board
            if self._activity:
                self._activity.log_agent_request(version)

        started = time.monotonic()
        try:
            move = self._client.request_move(board)
        except Exception as e:
            with self._lock:
                if version != self._version:
                    self._log_stale(version)
                    return False
                self._in_flight = False
                if isinstance(e, PredictionError):
                    self.last_error = e
                    if self._activity:
                        self._activity.log_agent_failure(e, version, _elapsed_ms(started))
            raise

        with self._lock:
            if version != self._version:
                self._log_stale(version)
                return False
            self._in_flight = False

            try:
                new_board = apply_move(board, move, board.player)
            except IllegalMoveError as e:
                error = MalformedResponseError(
                    f"Agent chose an illegal move ({move.row}, {move.col}): {e}"
                )
                self.last_error = error
                if self._activity:
                    self._activity.log_agent_failure(error, version, _elapsed_ms(started))
                raise error from e

            self._board = new_board
            self._version += 1
            self.last_error = None
            if self._activity:
                self._activity.log_agent_move(
                    move.row,
                    move.col,
                    board.player.value,
                    self._version,
                    _elapsed_ms(started),
                )

            if is_terminal(new_board):
                self._transition(SessionState.DONE, "agent move ended the game")
            else:
                self._transition(SessionState.HUMAN_TURN, "agent moved")
            return True

    def submit_move(self, move: Move) -> bool:
        """
        Apply a human move and, if the game goes on, the agent's reply.

        Returns:
            True if the human move was applied

        Raises:
            PredictionError: If the agent request fails (see agent_turn)
        """
        if not self.play(move):
            return False
        if self._state == SessionState.AWAITING_AGENT:
            self.agent_turn()
        return True

    def reset(self) -> None:
        """Start over with a fresh board. Valid in every state."""
        with self._lock:
            self._board = create_initial()
            self._version += 1
            self._in_flight = False
            self.last_error = None
            self._transition(SessionState.HUMAN_TURN, "reset")
            if self._activity:
                self._activity.log_reset(self._version)

    def add_listener(self, listener: Listener) -> None:
        """
        Add a listener for state transitions.

        Args:
            listener: Callback function(session_id, from_state, to_state)
        """
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _transition(self, to_state: SessionState, reason: str) -> None:
        from_state = self._state
        if not is_valid_transition(from_state, to_state):
            valid_states = get_valid_next_states(from_state)
            raise StateTransitionError(
                f"Invalid transition for session {self.session_id}: "
                f"{from_state.value} -> {to_state.value}. "
                f"Valid next states: {[s.value for s in valid_states]}"
            )

        self._history.append(
            StateTransition(
                from_state=from_state,
                to_state=to_state,
                reason=reason,
                version=self._version,
            )
        )
        self._state = to_state

        if to_state == SessionState.DONE and self._activity:
            self._activity.log_game_over(self.outcome or "", self._version)

        for listener in list(self._listeners):
            listener(self.session_id, from_state, to_state)

    def _log_rejected(self, move: Move, reason: str) -> None:
        if self._activity:
            self._activity.log_move_rejected(move.row, move.col, reason, self._state.value)

    def _log_stale(self, issued_version: int) -> None:
        if self._activity:
            self._activity.log_stale_response(issued_version, self._version)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
