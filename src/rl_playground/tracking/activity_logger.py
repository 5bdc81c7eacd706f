"""Activity logging for play sessions and policy views."""

import json
import threading
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from rl_playground.exceptions import ActivityTrackingError


class EventType(str, Enum):
    """Types of events that can be logged."""

    SESSION_START = "session_start"
    HUMAN_MOVE = "human_move"
    MOVE_REJECTED = "move_rejected"
    AGENT_REQUEST = "agent_request"
    AGENT_MOVE = "agent_move"
    AGENT_REQUEST_FAILED = "agent_request_failed"
    STALE_RESPONSE = "stale_response"
    GAME_OVER = "game_over"
    RESET = "reset"
    POLICY_FETCHED = "policy_fetched"
    POLICY_UNAVAILABLE = "policy_unavailable"


LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}

EVENT_LEVELS: Dict[EventType, str] = {
    EventType.MOVE_REJECTED: "DEBUG",
    EventType.AGENT_REQUEST: "DEBUG",
    EventType.STALE_RESPONSE: "WARN",
    EventType.AGENT_REQUEST_FAILED: "ERROR",
    EventType.POLICY_UNAVAILABLE: "ERROR",
}


class ActivityEvent(BaseModel):
    """Activity event model."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: EventType = Field(..., description="Type of event")
    level: str = Field(default="INFO", description="Severity of the event")
    session_id: str = Field(..., description="Session identifier")
    message: str = Field(..., description="Event message")
    version: Optional[int] = Field(None, description="Board version of the session")
    state: Optional[str] = Field(None, description="Session state after the event")
    duration_ms: Optional[int] = Field(None, description="Duration in milliseconds")

    data: Dict[str, Any] = Field(
        default_factory=dict, description="Additional event data"
    )


class ActivityLogger:
    """Thread-safe JSON-lines activity logger."""

    def __init__(self, session_id: str, logs_dir: Path, level: str = "INFO"):
        """Initialize activity logger.

        Args:
            session_id: Session identifier
            logs_dir: Directory to store log files
            level: Minimum level written (DEBUG, INFO, WARN, ERROR)
        """
        if level.upper() not in LEVELS:
            raise ActivityTrackingError(f"Unknown log level: {level}")

        self.session_id = session_id
        self.logs_dir = logs_dir
        self.level = level.upper()
        self.session_log_dir = logs_dir / "sessions" / session_id

        try:
            self.session_log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ActivityTrackingError(
                f"Cannot create log directory {self.session_log_dir}: {e}"
            ) from e

        self.main_log_file = self.session_log_dir / "activity.jsonl"
        self._lock = threading.Lock()

    def log_event(self, event_type: EventType, message: str, **kwargs) -> None:
        """Log an activity event.

        Args:
            event_type: Type of event
            message: Event message
            **kwargs: version, state, duration_ms, or extra event data
        """
        level = EVENT_LEVELS.get(event_type, "INFO")
        if LEVELS[level] < LEVELS[self.level]:
            return

        event_fields: Dict[str, Any] = {
            "event_type": event_type,
            "level": level,
            "session_id": self.session_id,
            "message": message,
        }
        data_fields = {}
        for key, value in kwargs.items():
            if key in ("version", "state", "duration_ms"):
                event_fields[key] = value
            else:
                data_fields[key] = value
        if data_fields:
            event_fields["data"] = data_fields

        self._write_event(ActivityEvent(**event_fields))

    def log_session_start(self, game: str) -> None:
        self.log_event(
            EventType.SESSION_START, f"Session started: {self.session_id}", game=game
        )

    def log_human_move(self, row: int, col: int, mark: str, version: int) -> None:
        self.log_event(
            EventType.HUMAN_MOVE,
            f"{mark} played ({row}, {col})",
            version=version,
            row=row,
            col=col,
            mark=mark,
        )

    def log_move_rejected(self, row: int, col: int, reason: str, state: str) -> None:
        self.log_event(
            EventType.MOVE_REJECTED,
            f"Move ({row}, {col}) rejected: {reason}",
            state=state,
            row=row,
            col=col,
            reason=reason,
        )

    def log_agent_request(self, version: int) -> None:
        self.log_event(
            EventType.AGENT_REQUEST, "Requesting agent move", version=version
        )

    def log_agent_move(
        self, row: int, col: int, mark: str, version: int, duration_ms: int
    ) -> None:
        self.log_event(
            EventType.AGENT_MOVE,
            f"Agent {mark} played ({row}, {col})",
            version=version,
            duration_ms=duration_ms,
            row=row,
            col=col,
            mark=mark,
        )

    def log_agent_failure(self, error: Exception, version: int, duration_ms: int) -> None:
        self.log_event(
            EventType.AGENT_REQUEST_FAILED,
            f"Agent request failed: {error}",
            version=version,
            duration_ms=duration_ms,
            error=str(error),
            error_type=type(error).__name__,
        )

    def log_stale_response(self, issued_version: int, current_version: int) -> None:
        self.log_event(
            EventType.STALE_RESPONSE,
            "Discarded agent response for an outdated board",
            version=current_version,
            issued_version=issued_version,
        )

    def log_game_over(self, outcome: str, version: int) -> None:
        self.log_event(
            EventType.GAME_OVER, f"Game over: {outcome}", version=version, outcome=outcome
        )

    def log_reset(self, version: int) -> None:
        self.log_event(EventType.RESET, "Session reset", version=version)

    def log_policy_fetched(self, game: str, rows: int, cols: int, duration_ms: int) -> None:
        self.log_event(
            EventType.POLICY_FETCHED,
            f"Fetched {rows}x{cols} policy table for {game}",
            duration_ms=duration_ms,
            game=game,
            rows=rows,
            cols=cols,
        )

    def log_policy_unavailable(self, game: str, error: Exception) -> None:
        self.log_event(
            EventType.POLICY_UNAVAILABLE,
            f"Policy table for {game} unavailable: {error}",
            game=game,
            error=str(error),
            error_type=type(error).__name__,
        )

    def get_recent_events(self, limit: int = 100) -> List[ActivityEvent]:
        """Get recent events from the session.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events, oldest first
        """
        events = []

        if self.main_log_file.exists():
            with open(self.main_log_file, "r", encoding="utf-8") as f:
                lines = f.readlines()

            for line in lines[-limit:]:
                try:
                    events.append(ActivityEvent(**json.loads(line.strip())))
                except (json.JSONDecodeError, ValueError):
                    continue

        return events

    def _write_event(self, event: ActivityEvent) -> None:
        """Append an event to the log file in a thread-safe manner."""
        with self._lock:
            try:
                with open(self.main_log_file, "a", encoding="utf-8") as f:
                    json.dump(
                        event.model_dump(mode="json"),
                        f,
                        default=str,
                        separators=(",", ":"),
                    )
                    f.write("\n")
            except OSError as e:
                raise ActivityTrackingError(
                    f"Failed to write to {self.main_log_file}: {e}"
                ) from e
