"""rl-playground: play grid games against a learned policy and inspect it."""

from .board import (
    Board,
    CellState,
    Direction,
    GameKind,
    GridPosition,
    Mark,
    Move,
    apply_move,
    create_initial,
    is_terminal,
)
from .client import PredictionClient
from .exceptions import (
    ActivityTrackingError,
    ConfigurationError,
    IllegalMoveError,
    MalformedPolicyTableError,
    MalformedResponseError,
    PlaygroundError,
    PredictionError,
    ServiceError,
    ServiceUnreachableError,
    StateTransitionError,
)
from .policy_table import PolicyRecord, PolicyTable, StateDescriptor, build_policy_table
from .session import GameSession
from .session_state import SessionState

__version__ = "0.1.0"

__all__ = [
    # Boards
    "Board",
    "CellState",
    "Direction",
    "GameKind",
    "GridPosition",
    "Mark",
    "Move",
    "apply_move",
    "create_initial",
    "is_terminal",
    # Service
    "PredictionClient",
    # Policy tables
    "PolicyRecord",
    "PolicyTable",
    "StateDescriptor",
    "build_policy_table",
    # Sessions
    "GameSession",
    "SessionState",
    # Exceptions
    "PlaygroundError",
    "IllegalMoveError",
    "PredictionError",
    "ServiceUnreachableError",
    "ServiceError",
    "MalformedResponseError",
    "MalformedPolicyTableError",
    "ConfigurationError",
    "ActivityTrackingError",
    "StateTransitionError",
]
