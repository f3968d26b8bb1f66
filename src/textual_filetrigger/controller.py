"""Non-Textual controller for filetrigger. Primary embed point."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from filetrigger.config import default_config_path, load_settings, save_settings
from filetrigger.errors import ConfigurationAbsentError
from filetrigger.file_watcher import DebouncedWatchUnit
from filetrigger.models import QUIET_PERIOD_MS, WatchSetStatus, WatchSettings
from filetrigger.notifier import FileTriggerNotifier, NoOpNotifier
from filetrigger.watch_set import WatchSetManager, release_observer

logger = logging.getLogger(__name__)


class FileTriggerController:
    """Connects a config file to a WatchSetManager. Primary embed point.

    Host entry points:
    - attach(loop): build watchers from the current config (startup)
    - on_config_changed(): full teardown + rebuild from disk
    - save_settings(settings): write config from a settings panel and apply it
    - detach(): tear everything down (shutdown)
    """

    def __init__(
        self,
        root: str | Path,
        config_path: str | Path | None = None,
        notifier: FileTriggerNotifier | None = None,
        watch_config: bool = True,
        quiet_period: float = QUIET_PERIOD_MS / 1000.0,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ):
        """Initialize controller.

        Args:
            root: Project root directory
            config_path: TOML config (defaults to <root>/.filetrigger.toml)
            notifier: Optional notification handler (defaults to NoOpNotifier - silent)
            watch_config: If True, edits to the config file on disk are applied automatically
            quiet_period: Debounce quiet period in seconds
            observer_factory: Creates watchdog observers
        """
        self.root = Path(root)
        self.config_path = Path(config_path) if config_path else default_config_path(self.root)
        self.notifier = notifier or NoOpNotifier()
        self.watch_config = watch_config
        self.quiet_period = quiet_period
        self.observer_factory = observer_factory

        self.settings = WatchSettings(watchers=[])
        self.status = WatchSetStatus()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._manager: WatchSetManager | None = None
        self._config_unit: DebouncedWatchUnit | None = None
        self._config_observer: BaseObserver | None = None

        # Outbound event (host wires this)
        self.on_status_changed: Callable[[WatchSetStatus], None] | None = None

    @property
    def attached(self) -> bool:
        return self._loop is not None

    @property
    def show_notifications(self) -> bool:
        """Current notification flag, read by watchers each time they fire."""
        return self.settings.show_notifications

    @property
    def manager(self) -> WatchSetManager | None:
        return self._manager

    def _check_root(self) -> None:
        if not self.root.is_dir():
            raise ConfigurationAbsentError(f"No project root open: {self.root} is not a directory")

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach to a running event loop and build watchers from config.

        Idempotent. A missing project root is reported and leaves the
        controller detached with no watchers.

        Raises:
            RuntimeError: If loop is not running
        """
        if self._loop is not None:
            return

        if not loop.is_running():
            raise RuntimeError(
                "Event loop must be running before attach(). "
                "Call attach() from within on_mount() or after loop started."
            )

        try:
            self._check_root()
        except ConfigurationAbsentError as e:
            logger.error(str(e))
            self.notifier.error(f"File trigger: {e}")
            return

        self._loop = loop
        self._manager = WatchSetManager(
            self.root,
            loop,
            notifier=self.notifier,
            quiet_period=self.quiet_period,
            observer_factory=self.observer_factory,
        )

        try:
            self.settings = load_settings(self.config_path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            self.notifier.error(f"Failed to load configuration: {e}")
            self.settings = WatchSettings(watchers=[])

        self._apply()

        if self.watch_config:
            self._start_config_watch(loop)

    def _apply(self) -> None:
        self.status = self._manager.rebuild(self.settings.watchers, lambda: self.show_notifications)
        if self.on_status_changed:
            self.on_status_changed(self.status)

    def _start_config_watch(self, loop: asyncio.AbstractEventLoop) -> None:
        try:
            observer = self.observer_factory()
            observer.start()
            self._config_observer = observer
            self._config_unit = DebouncedWatchUnit(
                self.config_path.resolve(),
                self._on_config_file_changed,
                loop,
                quiet_period=self.quiet_period,
            )
            self._config_unit.start(observer)
        except Exception as e:
            logger.error(f"Failed to watch config file {self.config_path}: {e}")
            self.notifier.warning(f"Config changes on disk will not be picked up: {e}")

    def _stop_config_watch(self) -> None:
        if self._config_unit:
            self._config_unit.stop()
            self._config_unit = None
        if self._config_observer:
            release_observer(self._config_observer, self._loop)
            self._config_observer = None

    def _on_config_file_changed(self) -> None:
        """Config file changed on disk; rebuild only if its contents changed."""
        try:
            loaded = load_settings(self.config_path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to reload config: {e}")
            self.notifier.error(f"Failed to reload configuration: {e}")
            return
        if loaded == self.settings:
            logger.debug("Config file touched without changes")
            return
        self.settings = loaded
        self._apply()
        logger.info("Configuration reloaded from disk")

    def on_config_changed(self) -> bool:
        """Reload configuration from disk and rebuild every watcher.

        On a load failure the current watchers are kept and the error reported.

        Returns:
            True if the new configuration was applied
        """
        if not self.attached:
            logger.warning("Configuration change ignored - controller not attached")
            return False
        try:
            self.settings = load_settings(self.config_path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to reload config: {e}")
            self.notifier.error(f"Failed to reload configuration: {e}")
            return False
        self._apply()
        logger.info("Configuration reloaded")
        return True

    def get_settings(self) -> WatchSettings:
        """Copy of the current settings, for a settings panel to edit."""
        return WatchSettings(
            show_notifications=self.settings.show_notifications,
            watchers=list(self.settings.watchers),
        )

    def save_settings(self, settings: WatchSettings) -> bool:
        """Persist settings and apply them if attached.

        Returns:
            True if the config file was written
        """
        try:
            save_settings(self.config_path, settings)
        except OSError as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")
            self.notifier.error(f"Failed to save configuration: {e}")
            return False

        self.notifier.info("Configuration saved!")
        self.settings = settings
        if self.attached:
            self._apply()
        return True

    def detach(self) -> None:
        """Stop all watchers and the config watch."""
        self._stop_config_watch()
        if self._manager:
            self._manager.teardown_all()
        self._loop = None
        self.status = WatchSetStatus()

    async def aclose(self, timeout: float = 5.0) -> None:
        """Detach, then wait for dispatched commands to finish."""
        self.detach()
        if self._manager:
            await self._manager.dispatcher.aclose(timeout)
