"""Pluggable notification protocol for filetrigger.

Decouples the watch set and dispatcher from whatever surface shows notices.
Hosts pass their own implementation (a TUI toast, a log line, a test spy).
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class FileTriggerNotifier(Protocol):
    """Protocol for user-visible notices - host can provide custom implementation."""

    def info(self, message: str) -> None:
        """Informational message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message."""
        ...


class NoOpNotifier:
    """Silent notifier - default when embedded without a view."""

    def info(self, msg: str) -> None:
        pass

    def warning(self, msg: str) -> None:
        pass

    def error(self, msg: str) -> None:
        pass


class LoggingNotifier:
    """Implementation using stdlib logging - for headless runs."""

    def info(self, msg: str) -> None:
        logger.info(msg)

    def warning(self, msg: str) -> None:
        logger.warning(msg)

    def error(self, msg: str) -> None:
        logger.error(msg)
