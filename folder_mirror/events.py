"""Change events and the sinks that narrate them."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from folder_mirror.logging_setup import get_logger

ORIGIN_SYNCHRONIZER = "SYNCHRONIZER:"
ORIGIN_EXTERNAL = "EXTERNAL:"
ORIGIN_COLUMN_WIDTH = 13
ERROR_INDICATOR = "!!! ERROR: "


class Side(Enum):
    """Which folder an event happened in."""

    SOURCE = "source"
    REPLICA = "replica"


class ChangeKind(Enum):
    """Kinds of file changes."""

    ADDED = "added"
    MODIFIED = "modified"
    RENAMED = "renamed"
    DELETED = "deleted"


@dataclass(frozen=True)
class ChangeEvent:
    """A single classified change."""

    kind: ChangeKind
    side: Side
    file_name: str
    old_file_name: Optional[str] = None
    performed_by_synchronizer: bool = False


class EventSink(ABC):
    """Receives classified changes and non-fatal operation errors."""

    @abstractmethod
    def file_added(self, side: Side, file_name: str, performed_by_synchronizer: bool) -> None:
        """A file appeared."""

    @abstractmethod
    def file_modified(self, side: Side, file_name: str, performed_by_synchronizer: bool) -> None:
        """A file kept its name but changed content."""

    @abstractmethod
    def file_renamed(
        self,
        side: Side,
        old_file_name: str,
        new_file_name: str,
        performed_by_synchronizer: bool,
    ) -> None:
        """A file kept its content but changed name."""

    @abstractmethod
    def file_deleted(self, side: Side, file_name: str, performed_by_synchronizer: bool) -> None:
        """A file disappeared."""

    @abstractmethod
    def operation_error(self, message: str) -> None:
        """A file operation failed; the mirror keeps running."""

    def emit(self, event: ChangeEvent) -> None:
        """Dispatch an event to the matching handler."""
        if event.kind == ChangeKind.ADDED:
            self.file_added(event.side, event.file_name, event.performed_by_synchronizer)
        elif event.kind == ChangeKind.MODIFIED:
            self.file_modified(event.side, event.file_name, event.performed_by_synchronizer)
        elif event.kind == ChangeKind.RENAMED:
            self.file_renamed(
                event.side,
                event.old_file_name,
                event.file_name,
                event.performed_by_synchronizer,
            )
        elif event.kind == ChangeKind.DELETED:
            self.file_deleted(event.side, event.file_name, event.performed_by_synchronizer)
        else:
            raise ValueError(f"Unknown change kind: {event.kind}")


def _require_text(value: Optional[str], name: str) -> None:
    if value is None or not str(value).strip():
        raise ValueError(f"'{name}' cannot be empty or whitespace")


def format_origin(message: str, performed_by_synchronizer: bool) -> str:
    """Prefix a message with a fixed-width origin column."""
    origin = ORIGIN_SYNCHRONIZER if performed_by_synchronizer else ORIGIN_EXTERNAL
    return f"{origin.ljust(ORIGIN_COLUMN_WIDTH)} {message}"


class LoggingEventSink(EventSink):
    """Narrates changes to the mirror logger.

    Each change becomes one INFO record such as::

        SYNCHRONIZER: File renamed in replica folder: a.txt -> b.txt
        EXTERNAL:     File added to source folder: c.txt
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger()

    def _log(self, message: str, performed_by_synchronizer: bool) -> None:
        self.logger.info(format_origin(message, performed_by_synchronizer))

    def file_added(self, side: Side, file_name: str, performed_by_synchronizer: bool) -> None:
        _require_text(file_name, "file_name")
        self._log(f"File added to {side.value} folder: {file_name}", performed_by_synchronizer)

    def file_modified(self, side: Side, file_name: str, performed_by_synchronizer: bool) -> None:
        _require_text(file_name, "file_name")
        self._log(f"File modified in {side.value} folder: {file_name}", performed_by_synchronizer)

    def file_renamed(
        self,
        side: Side,
        old_file_name: str,
        new_file_name: str,
        performed_by_synchronizer: bool,
    ) -> None:
        _require_text(old_file_name, "old_file_name")
        _require_text(new_file_name, "new_file_name")
        self._log(
            f"File renamed in {side.value} folder: {old_file_name} -> {new_file_name}",
            performed_by_synchronizer,
        )

    def file_deleted(self, side: Side, file_name: str, performed_by_synchronizer: bool) -> None:
        _require_text(file_name, "file_name")
        self._log(f"File deleted from {side.value} folder: {file_name}", performed_by_synchronizer)

    def operation_error(self, message: str) -> None:
        _require_text(message, "message")
        self.logger.error(
            format_origin(f'{ERROR_INDICATOR}File operation error: "{message}"', True)
        )
