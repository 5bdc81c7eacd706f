"""Play session state definitions and transitions."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SessionState(str, Enum):
    """Play session states."""

    HUMAN_TURN = "human_turn"
    AWAITING_AGENT = "awaiting_agent"
    DONE = "done"


class StateTransition(BaseModel):
    """Represents a state transition event."""

    from_state: SessionState
    to_state: SessionState
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reason: Optional[str] = None
    version: int = 0


# HUMAN_TURN is reachable from every state through reset
VALID_TRANSITIONS: Dict[SessionState, List[SessionState]] = {
    SessionState.HUMAN_TURN: [
        SessionState.AWAITING_AGENT,
        SessionState.DONE,
        SessionState.HUMAN_TURN,
    ],
    SessionState.AWAITING_AGENT: [SessionState.HUMAN_TURN, SessionState.DONE],
    SessionState.DONE: [SessionState.HUMAN_TURN],
}


def is_valid_transition(from_state: SessionState, to_state: SessionState) -> bool:
    """Check if a state transition is valid."""
    return to_state in VALID_TRANSITIONS.get(from_state, [])


def get_valid_next_states(current_state: SessionState) -> List[SessionState]:
    """Get list of valid next states for a given state."""
    return VALID_TRANSITIONS.get(current_state, [])


def is_terminal_state(state: SessionState) -> bool:
    """Check if a state only accepts a reset."""
    return state == SessionState.DONE
