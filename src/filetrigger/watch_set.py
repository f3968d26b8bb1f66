"""Watch set manager: builds and tears down generations of watch units."""

import asyncio
import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from filetrigger.dispatcher import CommandDispatcher
from filetrigger.errors import WatchRegistrationError
from filetrigger.file_watcher import DebouncedWatchUnit
from filetrigger.models import QUIET_PERIOD_MS, NotificationFlag, WatcherSpec, WatchSetStatus
from filetrigger.notifier import FileTriggerNotifier, NoOpNotifier

logger = logging.getLogger(__name__)


def resolve_target(root: Path, file_path: str) -> Path:
    """Resolve a configured path against the project root.

    Raises:
        WatchRegistrationError: If the path is empty, absolute, or escapes root
    """
    if not file_path.strip():
        raise WatchRegistrationError(file_path, "file path is empty")
    if Path(file_path).is_absolute():
        raise WatchRegistrationError(file_path, "file path must be relative to the project root")

    target = Path(os.path.normpath(root / file_path))
    if target == root or not target.is_relative_to(root):
        raise WatchRegistrationError(file_path, "file path resolves outside the project root")
    return target


def release_observer(observer: BaseObserver, loop: asyncio.AbstractEventLoop) -> None:
    """Stop an observer without blocking a running loop on its thread exit.

    Callers stop their units first, so nothing depends on the join finishing.
    """
    if not observer.is_alive():
        return
    observer.stop()
    if loop.is_running():
        loop.run_in_executor(None, observer.join, 2.0)
    else:
        observer.join(timeout=2.0)


class WatchSetManager:
    """Owns the active generation of watch units.

    A generation is replaced only by rebuild(), which fully stops the old
    units (and their observer) before creating any new ones. Units from a
    torn-down generation can never fire.
    """

    def __init__(
        self,
        root: str | Path,
        loop: asyncio.AbstractEventLoop,
        notifier: FileTriggerNotifier | None = None,
        dispatcher: CommandDispatcher | None = None,
        quiet_period: float = QUIET_PERIOD_MS / 1000.0,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ):
        """Initialize manager.

        Args:
            root: Project root; watcher paths are relative to it
            loop: Event loop for debounce timers and command tasks
            notifier: User-visible notices (defaults to NoOpNotifier)
            dispatcher: Command dispatcher (defaults to one on loop reporting to notifier)
            quiet_period: Debounce quiet period in seconds
            observer_factory: Creates the watchdog observer for each generation
        """
        self.root = Path(root).resolve()
        self.loop = loop
        self.notifier = notifier or NoOpNotifier()
        self.dispatcher = dispatcher or CommandDispatcher(loop, self.notifier)
        self.quiet_period = quiet_period
        self.observer_factory = observer_factory
        self.generation = 0
        self._units: list[DebouncedWatchUnit] = []
        self._observer: BaseObserver | None = None

    @property
    def units(self) -> tuple[DebouncedWatchUnit, ...]:
        return tuple(self._units)

    @property
    def active_paths(self) -> list[Path]:
        return [unit.target for unit in self._units]

    def _make_callback(
        self, spec: WatcherSpec, target: Path, notifications_enabled: NotificationFlag
    ) -> Callable[[], None]:
        def on_fire() -> None:
            # Flag is read now, not when the unit was built
            if notifications_enabled():
                self.notifier.info(f"File changed: {spec.file_path}")
            self.dispatcher.dispatch(spec.command, str(target))

        return on_fire

    def rebuild(
        self, specs: Sequence[WatcherSpec], notifications_enabled: NotificationFlag
    ) -> WatchSetStatus:
        """Replace the current generation with one unit per spec.

        A spec that cannot be watched is reported and skipped; the rest still
        start.

        Args:
            specs: Watcher specs in declaration order
            notifications_enabled: Read each time a unit fires

        Returns:
            WatchSetStatus listing active paths and per-spec failures
        """
        self.teardown_all()
        self.generation += 1

        observer = self.observer_factory()
        # Started before scheduling so a bad path fails in its own schedule() call
        observer.start()
        self._observer = observer

        status = WatchSetStatus()
        units: list[DebouncedWatchUnit] = []
        for spec in specs:
            try:
                target = resolve_target(self.root, spec.file_path)
                if not spec.command.strip():
                    raise WatchRegistrationError(spec.file_path, "command is empty")
                unit = DebouncedWatchUnit(
                    target,
                    self._make_callback(spec, target, notifications_enabled),
                    self.loop,
                    quiet_period=self.quiet_period,
                    anchor=self.root,
                )
                unit.start(observer)
            except Exception as e:
                reason = e.reason if isinstance(e, WatchRegistrationError) else str(e)
                message = f"Failed to start watcher for {spec.file_path}: {reason}"
                logger.error(message)
                self.notifier.error(message)
                status.failures.append((spec.file_path, reason))
                continue
            units.append(unit)
            status.active.append(target)

        self._units = units
        logger.info(
            f"Generation {self.generation}: {len(status.active)} watcher(s) active, "
            f"{len(status.failures)} failed"
        )
        return status

    def teardown_all(self) -> None:
        """Stop every unit and the observer, leaving an empty set."""
        for unit in self._units:
            unit.stop()
        self._units = []

        if self._observer is not None:
            release_observer(self._observer, self.loop)
            self._observer = None
            logger.info(f"Stopped watchers (generation {self.generation})")
