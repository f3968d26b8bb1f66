"""Debounced per-file watch unit built on watchdog."""

import asyncio
import logging
import os
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers.api import ObservedWatch

from filetrigger.errors import WatchRegistrationError
from filetrigger.models import QUIET_PERIOD_MS, WatchState
from filetrigger.watchers import EventSource

logger = logging.getLogger(__name__)


class _TargetFileHandler(FileSystemEventHandler):
    """Forwards create/modify events for one exact path to the event loop.

    Runs on the watchdog observer thread; everything past the filter is
    marshalled onto the loop with call_soon_threadsafe.
    """

    def __init__(self, target: Path, loop: asyncio.AbstractEventLoop, on_event: Callable[[], None]):
        super().__init__()
        self.target = os.path.normpath(str(target))
        self.loop = loop
        self.on_event = on_event

    def _matches(self, raw_path: str | bytes) -> bool:
        return os.path.normpath(os.fsdecode(raw_path)) == self.target

    def _forward(self, kind: str) -> None:
        logger.debug(f"{kind}: {self.target}")
        try:
            self.loop.call_soon_threadsafe(self.on_event)
        except RuntimeError:
            # Loop already closed during shutdown
            logger.debug(f"Dropped {kind} event for {self.target}: event loop closed")

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._forward("File created")

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._forward("File modified")

    def on_moved(self, event: FileSystemEvent) -> None:
        # Atomic saves write a temp file and rename it over the target
        if not event.is_directory and self._matches(event.dest_path):
            self._forward("File replaced")


class DebouncedWatchUnit:
    """Watches one file and invokes a callback once per burst of changes.

    Trailing debounce: each raw event restarts the quiet-period timer, so the
    callback fires quiet_period seconds after the last event of a burst.
    Timer state is only touched from the event loop thread.
    """

    def __init__(
        self,
        target: Path,
        callback: Callable[[], None],
        loop: asyncio.AbstractEventLoop,
        quiet_period: float = QUIET_PERIOD_MS / 1000.0,
        anchor: Path | None = None,
    ):
        """Initialize unit.

        Args:
            target: Absolute path of the watched file
            callback: Called with no arguments when a burst settles
            loop: Event loop that owns the debounce timer
            quiet_period: Seconds to wait after the last event
            anchor: Directory that outlives the target's own parents, usually
                the project root. Watching from it keeps the unit alive when
                intermediate directories are deleted and recreated.
        """
        self.target = target
        self.callback = callback
        self.loop = loop
        self.quiet_period = quiet_period
        self.anchor = anchor
        self.state = WatchState.STOPPED
        self._timer: asyncio.TimerHandle | None = None
        self._source: EventSource | None = None
        self._watch: ObservedWatch | None = None
        self._handler = _TargetFileHandler(target, loop, self.notify)
        self._stopped = False

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def _watch_root(self) -> tuple[Path, bool]:
        """Directory to register with the observer and whether to recurse.

        With an anchor, the anchor is watched, recursively unless the target
        sits directly in it. Without one, the parent is watched; if it does
        not exist yet (the writer creates it later), the nearest existing
        ancestor is watched recursively.
        """
        parent = self.target.parent
        if self.anchor is not None:
            return self.anchor, parent != self.anchor
        if parent.is_dir():
            return parent, False
        ancestor = parent
        while not ancestor.is_dir():
            if ancestor.parent == ancestor:
                break
            ancestor = ancestor.parent
        return ancestor, True

    def start(self, source: EventSource) -> None:
        """Register for create/modify events on the target.

        Raises:
            WatchRegistrationError: If the observer rejects the watch
        """
        if self._stopped:
            raise RuntimeError(f"Watch unit for {self.target} was stopped and cannot be restarted")
        if self._watch is not None:
            return

        watch_dir, recursive = self._watch_root()
        try:
            self._watch = source.schedule(self._handler, str(watch_dir), recursive=recursive)
        except OSError as e:
            raise WatchRegistrationError(str(self.target), str(e)) from e
        self._source = source
        self.state = WatchState.WATCHING
        logger.info(f"Watching {self.target} (via {watch_dir}, recursive={recursive})")

    def notify(self) -> None:
        """Restart the quiet-period timer. No-op once stopped."""
        if self._stopped:
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self.loop.call_later(self.quiet_period, self._fire)
        self.state = WatchState.PENDING_FIRE

    def _fire(self) -> None:
        self._timer = None
        if self._stopped:
            return
        self.state = WatchState.WATCHING
        logger.debug(f"Quiet period elapsed for {self.target}")
        try:
            self.callback()
        except Exception as e:
            logger.exception(f"Callback for {self.target} failed: {e}")

    def stop(self) -> None:
        """Cancel any pending fire and release the watch."""
        self._stopped = True
        self.state = WatchState.STOPPED
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._source is not None and self._watch is not None:
            try:
                self._source.remove_handler_for_watch(self._handler, self._watch)
            except KeyError:
                # Observer already dropped the watch
                pass
            logger.debug(f"Stopped watching {self.target}")
        self._source = None
        self._watch = None
