"""textual-filetrigger: TUI and CLI host for filetrigger."""

__version__ = "0.1.0"

# Public API
from textual_filetrigger.app import FileTriggerApp
from textual_filetrigger.controller import FileTriggerController

__all__ = [
    "__version__",
    "FileTriggerApp",
    "FileTriggerController",
]
