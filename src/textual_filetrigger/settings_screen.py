"""Modal settings panel for editing watchers and the notification flag."""

import logging

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Checkbox, Input, Label, Static

from filetrigger.models import FILE_PLACEHOLDER, WatcherSpec, WatchSettings

logger = logging.getLogger(__name__)


class WatcherForm(Vertical):
    """Editable form for one watcher entry."""

    def __init__(self, spec: WatcherSpec, **kwargs):
        super().__init__(**kwargs)
        self.spec = spec

    def compose(self) -> ComposeResult:
        yield Button("Remove", classes="remove-btn", variant="error")
        yield Label("File Path")
        yield Input(
            value=self.spec.file_path,
            placeholder="path/to/watched/file.txt",
            classes="file-path",
        )
        yield Static("Relative path from project root", classes="help-text")
        yield Label("Command")
        yield Input(
            value=self.spec.command,
            placeholder="Command to execute...",
            classes="command",
        )
        yield Static(f"Use {FILE_PLACEHOLDER} as placeholder for file path", classes="help-text", markup=False)

    def to_spec(self) -> WatcherSpec:
        """Current form values as a WatcherSpec."""
        return WatcherSpec(
            file_path=self.query_one(".file-path", Input).value,
            command=self.query_one(".command", Input).value,
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.has_class("remove-btn"):
            event.stop()
            self.remove()


class SettingsScreen(ModalScreen[WatchSettings | None]):
    """Settings panel. Dismisses with the edited WatchSettings, or None on cancel."""

    BINDINGS = [("escape", "cancel_settings", "Cancel")]

    DEFAULT_CSS = """
    SettingsScreen {
        align: center middle;
    }

    #settings-dialog {
        width: 90%;
        height: 90%;
        background: $panel;
        border: solid $accent;
        padding: 1 2;
    }

    .settings-header {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }

    #watchers-container {
        height: 1fr;
    }

    WatcherForm {
        height: auto;
        border: solid $primary;
        padding: 0 1;
        margin-bottom: 1;
    }

    .help-text {
        color: $text-muted;
        text-style: italic;
    }

    #settings-buttons {
        height: auto;
    }
    """

    def __init__(self, settings: WatchSettings, **kwargs):
        """Initialize settings screen.

        Args:
            settings: Snapshot to edit; not modified in place
        """
        super().__init__(**kwargs)
        self.settings = settings

    def compose(self) -> ComposeResult:
        with Vertical(id="settings-dialog"):
            yield Static("File Trigger Configuration", classes="settings-header")
            yield Checkbox(
                "Show notification popups when files change",
                value=self.settings.show_notifications,
                id="show-notifications",
            )
            yield Static(
                "When disabled, commands still run but no notification appears",
                classes="help-text",
            )
            with VerticalScroll(id="watchers-container"):
                for spec in self.settings.watchers:
                    yield WatcherForm(spec)
            with Horizontal(id="settings-buttons"):
                yield Button("+ Add Watcher", id="add-watcher")
                yield Button("Save Configuration", id="save-settings", variant="primary")
                yield Button("Cancel", id="cancel-settings")

    def collect_settings(self) -> WatchSettings:
        """Read the form back into a WatchSettings, in on-screen order."""
        return WatchSettings(
            show_notifications=self.query_one("#show-notifications", Checkbox).value,
            watchers=[form.to_spec() for form in self.query(WatcherForm)],
        )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "add-watcher":
            await self.query_one("#watchers-container", VerticalScroll).mount(
                WatcherForm(WatcherSpec(file_path="", command=""))
            )
        elif event.button.id == "save-settings":
            settings = self.collect_settings()
            logger.debug(f"Settings panel saved {len(settings.watchers)} watcher(s)")
            self.dismiss(settings)
        elif event.button.id == "cancel-settings":
            self.dismiss(None)

    def action_cancel_settings(self) -> None:
        self.dismiss(None)
