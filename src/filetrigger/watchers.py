"""Abstract protocol for the host file-event source."""

from typing import Protocol

from watchdog.events import FileSystemEventHandler
from watchdog.observers.api import ObservedWatch


class EventSource(Protocol):
    """The subset of a watchdog observer a watch unit needs."""

    def schedule(
        self, event_handler: FileSystemEventHandler, path: str, recursive: bool = False
    ) -> ObservedWatch:
        """Register a handler for events under path."""
        ...

    def remove_handler_for_watch(
        self, event_handler: FileSystemEventHandler, watch: ObservedWatch
    ) -> None:
        """Detach a handler previously registered with schedule()."""
        ...
