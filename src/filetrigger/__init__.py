"""filetrigger: run commands when trigger files in a project change."""

__version__ = "0.1.0"

from filetrigger.config import create_default_config, load_settings, save_settings
from filetrigger.dispatcher import CommandDispatcher, render_command
from filetrigger.errors import (
    CommandExecutionError,
    ConfigurationAbsentError,
    FileTriggerError,
    WatchRegistrationError,
)
from filetrigger.file_watcher import DebouncedWatchUnit
from filetrigger.models import (
    FILE_PLACEHOLDER,
    QUIET_PERIOD_MS,
    WatcherSpec,
    WatchSetStatus,
    WatchSettings,
    WatchState,
)
from filetrigger.notifier import FileTriggerNotifier, LoggingNotifier, NoOpNotifier
from filetrigger.watch_set import WatchSetManager

__all__ = [
    "__version__",
    # Models
    "WatcherSpec",
    "WatchSettings",
    "WatchSetStatus",
    "WatchState",
    "FILE_PLACEHOLDER",
    "QUIET_PERIOD_MS",
    # Errors
    "FileTriggerError",
    "ConfigurationAbsentError",
    "WatchRegistrationError",
    "CommandExecutionError",
    # Runtime
    "CommandDispatcher",
    "render_command",
    "DebouncedWatchUnit",
    "WatchSetManager",
    # Notifiers
    "FileTriggerNotifier",
    "NoOpNotifier",
    "LoggingNotifier",
    # Config
    "load_settings",
    "save_settings",
    "create_default_config",
]
