from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from redminedash.config import AppConfig

HELP_LINES = (
    "1. Server URL: your Redmine server, e.g. https://redmine.example.com",
    "2. API Key: found in your Redmine profile under 'API access key'",
    "3. Testing: press r on the main screen to load issues",
)


class SettingsScreen(ModalScreen[AppConfig | None]):
    """Edits the connection settings for the running session."""

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("ctrl+s", "save", "Save"),
    ]

    def __init__(self, config: AppConfig) -> None:
        super().__init__()
        self.config = config

    def compose(self) -> ComposeResult:
        with Vertical(id="settings-dialog"):
            yield Static("REDMINE SETTINGS", id="settings-header")
            yield Static("Server Name", classes="settings-label")
            yield Input(value=self.config.server_name, placeholder="My Redmine Server", id="server-name")
            yield Static("Redmine URL", classes="settings-label")
            yield Input(value=self.config.server_url, placeholder="https://myserver.mydomain", id="server-url")
            yield Static("API Key", classes="settings-label")
            yield Input(
                value=self.config.api_key,
                placeholder="Your API key from Redmine profile",
                password=True,
                id="api-key",
            )
            yield Static("\n".join(HELP_LINES), id="settings-help")
            yield Static("Enter / ctrl+s save  ·  Esc cancel", id="settings-hint")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.action_save()

    def collect(self) -> AppConfig:
        return self.config.with_connection(
            self.query_one("#server-name", Input).value,
            self.query_one("#server-url", Input).value,
            self.query_one("#api-key", Input).value,
        )

    def action_save(self) -> None:
        self.dismiss(self.collect())

    def action_cancel(self) -> None:
        self.dismiss(None)
