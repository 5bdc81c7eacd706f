"""rl-playground exception classes."""

from typing import Optional


class PlaygroundError(Exception):
    """Base exception for all rl-playground errors."""

    pass


class IllegalMoveError(PlaygroundError):
    """Raised when a move cannot be applied to a board."""

    pass


class ConfigurationError(PlaygroundError):
    """Raised when configuration is invalid."""

    pass


class ActivityTrackingError(PlaygroundError):
    """Raised when activity tracking fails."""

    pass


class StateTransitionError(PlaygroundError):
    """Raised when an invalid session state transition is attempted."""

    pass


class MalformedPolicyTableError(PlaygroundError):
    """Raised when policy records cannot form a dense row-major table."""

    pass


class PredictionError(PlaygroundError):
    """Base class for failures talking to the prediction service."""

    pass


class ServiceUnreachableError(PredictionError):
    """Raised when the prediction service cannot be reached."""

    pass


class ServiceError(PredictionError):
    """Raised when the prediction service answers with a non-success status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(PredictionError):
    """Raised when a service response does not have the expected shape."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index
