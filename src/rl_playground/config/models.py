"""Configuration models for rl-playground."""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from rl_playground.board import GameKind, Mark


class ServiceConfig(BaseModel):
    """Prediction service connection configuration."""

    base_url: str = Field(
        default="http://localhost:8000", description="Prediction service base URL"
    )
    action_path: str = Field(
        default="/predict/{game}", description="Path template for single actions"
    )
    policy_path: str = Field(
        default="/predict_all/{game}", description="Path template for full policies"
    )
    timeout: float = Field(default=10.0, description="Request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate URL scheme."""
        if not re.match(r"^(https?://|\$\{)", v):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("action_path", "policy_path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate path templates."""
        if not v.startswith("/"):
            raise ValueError("Path must start with '/'")
        unknown = set(re.findall(r"\{([^}]*)\}", v)) - {"game"}
        if unknown:
            raise ValueError(
                f"Unknown placeholder(s) {sorted(unknown)}; only {{game}} is supported"
            )
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v


class PlayConfig(BaseModel):
    """Interactive play configuration."""

    human_mark: Mark = Field(default=Mark.X, description="Mark played by the human")
    policy_game: GameKind = Field(
        default=GameKind.GRID, description="Game whose policy table is shown"
    )
    trace_max_steps: int = Field(default=100, description="Step limit for traces")

    @field_validator("human_mark")
    @classmethod
    def validate_human_mark(cls, v: Mark) -> Mark:
        """The human always opens the game."""
        if v != Mark.X:
            raise ValueError("human_mark must be X; the human always moves first")
        return v

    @field_validator("trace_max_steps")
    @classmethod
    def validate_trace_max_steps(cls, v: int) -> int:
        """Validate trace step limit."""
        if v < 1:
            raise ValueError("trace_max_steps must be at least 1")
        return v


class LoggingConfig(BaseModel):
    """Activity logging configuration."""

    enabled: bool = Field(default=True, description="Write session activity logs")
    level: str = Field(default="INFO", description="Log level")
    output_dir: str = Field(
        default=".rl-playground/logs", description="Log output directory"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARN", "ERROR"]
        if v.upper() not in valid_levels:
            raise ValueError(f"level must be one of: {', '.join(valid_levels)}")
        return v.upper()


class PlaygroundConfig(BaseModel):
    """Main rl-playground configuration."""

    service: ServiceConfig = Field(
        default_factory=ServiceConfig, description="Prediction service configuration"
    )
    play: PlayConfig = Field(
        default_factory=PlayConfig, description="Play configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    def resolve_env_vars(self) -> "PlaygroundConfig":
        """Resolve environment variables in configuration values."""
        config_dict = self.model_dump(mode="json")
        resolved_dict = _resolve_env_vars_recursive(config_dict)
        return PlaygroundConfig(**resolved_dict)

    def get_log_dir(self) -> Path:
        """Get the log directory as a Path object."""
        return Path(self.logging.output_dir).expanduser().resolve()


def _resolve_env_vars_recursive(obj: Any) -> Any:
    """Recursively resolve environment variables in configuration."""
    if isinstance(obj, dict):
        return {key: _resolve_env_vars_recursive(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_resolve_env_vars_recursive(item) for item in obj]
    elif isinstance(obj, str):
        return _resolve_env_var_string(obj)
    else:
        return obj


def _resolve_env_var_string(value: str) -> str:
    """Resolve environment variables in a string."""
    # ${VAR_NAME} or ${VAR_NAME:default_value}
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replace_var(match):
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.getenv(var_name, default_value)

    return re.sub(pattern, replace_var, value)
