"""TUI application for textual-filetrigger.

Shows the active watchers for a project root, surfaces notices as toasts,
and hosts the settings panel.
"""

import asyncio
import logging
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Header, Static

from filetrigger.models import WatchSetStatus, WatchSettings
from textual_filetrigger.controller import FileTriggerController
from textual_filetrigger.settings_screen import SettingsScreen

logger = logging.getLogger(__name__)


class TextualNotifier:
    """Notifier that shows messages as Textual toasts."""

    def __init__(self, app: App):
        self.app = app

    def info(self, msg: str) -> None:
        self.app.notify(msg, severity="information")

    def warning(self, msg: str) -> None:
        self.app.notify(msg, severity="warning")

    def error(self, msg: str) -> None:
        self.app.notify(msg, severity="error", timeout=10)


class FileTriggerApp(App):
    """TUI host for a FileTriggerController."""

    TITLE = "filetrigger"
    BINDINGS = [
        Binding("s", "open_settings", "Settings"),
        Binding("r", "reload_config", "Reload"),
        Binding("q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        layout: vertical;
    }

    #root-label {
        padding: 0 1;
        color: $text-muted;
    }

    #watchers-table {
        height: 1fr;
        border: solid $accent;
    }
    """

    def __init__(self, root: str | Path = ".", config_path: str | Path | None = None, **kwargs):
        """Initialize app.

        Args:
            root: Project root directory
            config_path: TOML config (defaults to <root>/.filetrigger.toml)
        """
        super().__init__(**kwargs)
        self.controller = FileTriggerController(
            root,
            config_path=config_path,
            notifier=TextualNotifier(self),
        )
        self.controller.on_status_changed = self._on_status_changed

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(f"Project root: {self.controller.root.resolve()}", id="root-label", markup=False)
        yield DataTable(id="watchers-table", cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        """Attach controller to the running loop."""
        table = self.query_one("#watchers-table", DataTable)
        table.add_columns("File", "Command", "Status")
        try:
            self.controller.attach(asyncio.get_running_loop())
        except Exception as e:
            logger.error(f"Failed to start watchers: {e}", exc_info=True)
            self.notify(f"File trigger failed: {e}", severity="error")
        self._refresh_table(self.controller.status)

    def on_unmount(self) -> None:
        self.controller.detach()

    def _on_status_changed(self, status: WatchSetStatus) -> None:
        self._refresh_table(status)

    def _refresh_table(self, status: WatchSetStatus) -> None:
        try:
            table = self.query_one("#watchers-table", DataTable)
        except NoMatches:
            # Not composed yet; on_mount refreshes once it is
            return
        table.clear()
        failures = dict(status.failures)
        for spec in self.controller.settings.watchers:
            state = f"⚠ {failures[spec.file_path]}" if spec.file_path in failures else "watching"
            table.add_row(spec.file_path, spec.command, state)

    def action_open_settings(self) -> None:
        """Open the settings panel on a copy of the current settings."""
        self.push_screen(SettingsScreen(self.controller.get_settings()), self._on_settings_closed)

    def _on_settings_closed(self, settings: WatchSettings | None) -> None:
        if settings is None:
            return
        self.controller.save_settings(settings)
        self._refresh_table(self.controller.status)

    def action_reload_config(self) -> None:
        """Reload configuration from disk."""
        if not self.controller.attached:
            self.notify("No project root open", severity="warning")
            return
        if self.controller.on_config_changed():
            self.notify("Configuration reloaded", severity="information")


def main(root: str = ".") -> None:
    """Run standalone app.

    Args:
        root: Project root directory
    """
    app = FileTriggerApp(root=root)
    app.run()


if __name__ == "__main__":
    main()
