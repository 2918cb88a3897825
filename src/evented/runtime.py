"""Apply loaded configuration to the process."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .config import load_config
from .events import Evented, ListenerErrorPolicy
from .logging_utils import configure_logging

LOGGER = logging.getLogger(__name__)


def apply_events_config(events_config: dict[str, Any]) -> None:
    """Install dispatch defaults on ``Evented``.

    Instances that set their own ``listener_errors`` keep it.
    """
    Evented.listener_errors = ListenerErrorPolicy(
        events_config.get("listener_errors", ListenerErrorPolicy.LOG)
    )
    Evented.log_unhandled_errors = bool(events_config.get("log_unhandled_errors", True))


def configure(
    config: dict[str, Any] | None = None, config_path: Path | None = None
) -> dict[str, Any]:
    """Load (unless given) and apply configuration; return the config used."""
    if config is None:
        config = load_config(config_path)
    configure_logging(config["logging"])
    apply_events_config(config["events"])
    LOGGER.info(
        "runtime.configured",
        extra={
            "event": "runtime.configured",
            "listener_errors": config["events"]["listener_errors"],
        },
    )
    return config
