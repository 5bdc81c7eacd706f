"""Configuration for rl-playground."""

from .loader import load_config, save_config
from .models import LoggingConfig, PlayConfig, PlaygroundConfig, ServiceConfig

__all__ = [
    "load_config",
    "save_config",
    "LoggingConfig",
    "PlayConfig",
    "PlaygroundConfig",
    "ServiceConfig",
]
