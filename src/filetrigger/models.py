"""Shared data models for filetrigger."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

FILE_PLACEHOLDER = "${file}"
"""Token in a command template replaced with the absolute path of the changed file."""

QUIET_PERIOD_MS = 300
"""Quiet period a watch unit waits after the last raw event before firing."""

DEFAULT_TRIGGER_FILE = ".claude-notification-trigger"
DEFAULT_COMMAND = 'echo "Triggered: ${file}"'

NotificationFlag = Callable[[], bool]
"""Zero-arg callable returning the current show_notifications value."""


@dataclass(frozen=True)
class WatcherSpec:
    """Declarative (path, command) pair from configuration."""

    file_path: str
    """Path of the watched file, relative to the project root."""

    command: str
    """Shell command template. May contain FILE_PLACEHOLDER."""

    def to_dict(self) -> dict[str, str]:
        return {"file_path": self.file_path, "command": self.command}


def default_watchers() -> list[WatcherSpec]:
    return [WatcherSpec(file_path=DEFAULT_TRIGGER_FILE, command=DEFAULT_COMMAND)]


@dataclass
class WatchSettings:
    """One configuration snapshot: the notification flag and the watcher list."""

    show_notifications: bool = True
    """Whether to show a notice before dispatching a command."""

    watchers: list[WatcherSpec] = field(default_factory=default_watchers)
    """Watchers in declaration order."""


class WatchState(Enum):
    """Lifecycle of a single watch unit within one generation."""

    STOPPED = "stopped"
    WATCHING = "watching"
    PENDING_FIRE = "pending_fire"


@dataclass
class WatchSetStatus:
    """Outcome of building one generation of watch units."""

    active: list[Path] = field(default_factory=list)
    """Absolute paths of units that started successfully."""

    failures: list[tuple[str, str]] = field(default_factory=list)
    """(file_path, error message) for specs that could not be watched."""

    @property
    def ok(self) -> bool:
        return not self.failures
