"""Exception types raised inside filetrigger.

None of these escape to the host: each is caught where it occurs and turned
into a notifier report.
"""


class FileTriggerError(Exception):
    """Base class for filetrigger errors."""


class ConfigurationAbsentError(FileTriggerError):
    """No usable project root is open."""


class WatchRegistrationError(FileTriggerError):
    """A single watcher's path cannot be watched."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(reason)
        self.file_path = file_path
        self.reason = reason


class CommandExecutionError(FileTriggerError):
    """A dispatched command failed to spawn or exited non-zero."""

    def __init__(self, command: str, returncode: int | None, detail: str = ""):
        self.command = command
        self.returncode = returncode
        self.detail = detail
        if returncode is None:
            message = f"could not start '{command}': {detail}"
        else:
            message = f"'{command}' exited with code {returncode}"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message)
