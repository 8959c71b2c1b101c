"""Folder mirror modules."""

from folder_mirror.config_loader import Config, ConfigError, load_config
from folder_mirror.events import ChangeEvent, ChangeKind, EventSink, LoggingEventSink, Side
from folder_mirror.logging_setup import get_logger, setup_logging
from folder_mirror.synchronizer import RunState, Synchronizer

__all__ = [
    "Config",
    "ConfigError",
    "load_config",
    "setup_logging",
    "get_logger",
    "ChangeEvent",
    "ChangeKind",
    "EventSink",
    "LoggingEventSink",
    "Side",
    "RunState",
    "Synchronizer",
]
