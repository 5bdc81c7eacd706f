"""Helpers shared by the CLI commands."""

import uuid
from typing import Optional

import click

from rl_playground.client import PredictionClient
from rl_playground.config.loader import load_config
from rl_playground.config.models import PlaygroundConfig
from rl_playground.tracking.activity_logger import ActivityLogger


def get_config(ctx: click.Context) -> PlaygroundConfig:
    """Load configuration once per invocation and cache it on the context."""
    obj = ctx.ensure_object(dict)
    if obj.get("loaded_config") is None:
        obj["loaded_config"] = load_config(config_path=obj.get("config"))
    return obj["loaded_config"]


def create_client(ctx: click.Context, config: PlaygroundConfig) -> PredictionClient:
    """Create a prediction client; a transport on the context object overrides the network."""
    obj = ctx.ensure_object(dict)
    return PredictionClient(config.service, transport=obj.get("transport"))


def create_activity_logger(
    config: PlaygroundConfig, session_id: Optional[str] = None
) -> Optional[ActivityLogger]:
    """Create an activity logger, or None when logging is disabled."""
    if not config.logging.enabled:
        return None
    return ActivityLogger(
        session_id or uuid.uuid4().hex[:12],
        config.get_log_dir(),
        level=config.logging.level,
    )
