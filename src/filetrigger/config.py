"""Configuration loading and saving for filetrigger."""

import logging
import tomllib
from pathlib import Path

import tomli_w

from filetrigger.models import WatcherSpec, WatchSettings, default_watchers

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".filetrigger.toml"

# Default config template written on first run
DEFAULT_CONFIG_TEMPLATE = """\
# Auto-generated config for filetrigger
#
# Each [[watcher]] runs its command when file_path (relative to the project
# root) is created or modified. ${file} is replaced with the absolute path.

show_notifications = true

[[watcher]]
file_path = ".claude-notification-trigger"
command = 'echo "Triggered: ${file}"'
"""


def default_config_path(root: str | Path) -> Path:
    return Path(root) / CONFIG_FILENAME


def create_default_config(config_path: Path) -> bool:
    """
    Create a default config file if it doesn't exist.

    Args:
        config_path: Path where config should be created

    Returns:
        True if config was created, False if it already exists

    Raises:
        PermissionError: If unable to write to the directory
        OSError: If other file system errors occur
    """
    if config_path.exists():
        return False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_TEMPLATE)
    return True


def _parse_watcher(index: int, raw: object) -> WatcherSpec:
    if not isinstance(raw, dict):
        raise ValueError(f"watcher #{index + 1} must be a table, got {type(raw).__name__}")
    file_path = raw.get("file_path", "")
    command = raw.get("command", "")
    if not isinstance(file_path, str) or not isinstance(command, str):
        raise ValueError(f"watcher #{index + 1}: file_path and command must be strings")
    return WatcherSpec(file_path=file_path, command=command)


def load_settings(path: str | Path) -> WatchSettings:
    """Load watcher settings from a TOML file.

    Entries are parsed but not validated; an empty path or command is left
    for the watch set to reject so that one bad entry does not hide the rest.

    Args:
        path: Path to TOML config file

    Returns:
        WatchSettings snapshot

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid TOML or has malformed entries
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\nRun 'filetrigger' without --config to auto-create a default config."
        )

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse config file {path}: {e}") from e

    show_notifications = raw.get("show_notifications", True)
    if not isinstance(show_notifications, bool):
        raise ValueError(f"show_notifications must be true or false in {path}")

    if "watcher" in raw:
        entries = raw["watcher"]
        if not isinstance(entries, list):
            raise ValueError(f"'watcher' must be an array of tables in {path}")
        watchers = [_parse_watcher(i, w) for i, w in enumerate(entries)]
    else:
        watchers = default_watchers()

    logger.debug(f"Loaded {len(watchers)} watcher(s) from {path}")
    return WatchSettings(show_notifications=show_notifications, watchers=watchers)


def save_settings(path: str | Path, settings: WatchSettings) -> None:
    """Write settings back to a TOML file, replacing its contents."""
    path = Path(path)
    document = {
        "show_notifications": settings.show_notifications,
        "watcher": [w.to_dict() for w in settings.watchers],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(document, f)
    logger.info(f"Saved {len(settings.watchers)} watcher(s) to {path}")
