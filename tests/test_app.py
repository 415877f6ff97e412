from __future__ import annotations

from types import SimpleNamespace

import pytest

from redminedash import app as app_module
from redminedash.app import RedmineDash
from redminedash.config import AppConfig
from redminedash.data import DataManager
from redminedash.models import Issue
from redminedash.redmine import HttpError

CONFIG = AppConfig(server_name="Work", server_url="https://redmine.example.com", api_key="k")

ISSUES = [
    Issue(1, "Login fails", "New", "Portal", "High"),
    Issue(2, "Typo in footer", "New", "Portal", None),
]


class FakeClient:
    def __init__(self, issues=None, error=None):
        self.issues = issues if issues is not None else list(ISSUES)
        self.error = error

    async def fetch_assigned_issues(self):
        if self.error:
            raise self.error
        return self.issues


def _app(client: FakeClient | None = None, config: AppConfig = CONFIG) -> RedmineDash:
    client = client or FakeClient()
    return RedmineDash(DataManager(config, client_factory=lambda _config: client))


def test_header_uses_server_name() -> None:
    assert _app().header_text() == "MY REDMINE TASKS  ·  Work"


def test_list_message_before_first_fetch() -> None:
    assert _app().list_message() == "No tasks to display."


@pytest.mark.asyncio
async def test_list_message_none_when_issues_displayed() -> None:
    app = _app()
    await app.data_manager.refresh_issues()
    assert app.list_message() is None


@pytest.mark.asyncio
async def test_list_message_when_filters_hide_everything() -> None:
    app = _app()
    await app.data_manager.refresh_issues()
    app.data_manager.toggle_status("Closed")
    assert app.list_message().startswith("No issues match the current filters")


@pytest.mark.asyncio
async def test_load_issues_notifies_error_and_keeps_list(monkeypatch) -> None:
    client = FakeClient()
    app = _app(client)
    await app.data_manager.refresh_issues()
    notices: list[tuple[str, str]] = []
    monkeypatch.setattr(app, "_notify", lambda message, severity="information": notices.append((message, severity)))

    client.error = HttpError(401)
    await app._load_issues()

    assert notices == [("HTTP error 401", "error")]
    assert app.data_manager.issues == ISSUES
    assert app.list_message() == "⚠️ HTTP error 401\n\nPress r to retry."


@pytest.mark.asyncio
async def test_load_issues_without_settings_reports_configuration(monkeypatch) -> None:
    app = _app(config=AppConfig())
    notices: list[str] = []
    monkeypatch.setattr(app, "_notify", lambda message, severity="information": notices.append(message))

    await app._load_issues()

    assert notices == ["URL and API key are required"]


def test_open_issue_in_browser(monkeypatch) -> None:
    app = _app()
    opened: list[str] = []
    monkeypatch.setattr(app_module.webbrowser, "open", lambda url: opened.append(url))

    app.open_issue_in_browser(42)

    assert opened == ["https://redmine.example.com/issues/42"]


def test_open_issue_in_browser_requires_url(monkeypatch) -> None:
    app = _app(config=AppConfig())
    opened: list[str] = []
    notices: list[str] = []
    monkeypatch.setattr(app_module.webbrowser, "open", lambda url: opened.append(url))
    monkeypatch.setattr(app, "_notify", lambda message, severity="information": notices.append(message))

    app.open_issue_in_browser(42)

    assert opened == []
    assert notices == ["Redmine URL is not configured"]


def test_apply_settings_updates_config_and_reloads(monkeypatch) -> None:
    app = _app()
    reloads: list[bool] = []
    monkeypatch.setattr(app, "action_load_issues", lambda: reloads.append(True))

    app.apply_settings(CONFIG.with_connection("Home", "https://home.example.com", "other"))

    assert app.config.server_url == "https://home.example.com"
    assert app.header_text() == "MY REDMINE TASKS  ·  Home"
    assert reloads == [True]


def test_apply_settings_cancelled_is_noop(monkeypatch) -> None:
    app = _app()
    reloads: list[bool] = []
    monkeypatch.setattr(app, "action_load_issues", lambda: reloads.append(True))

    app.apply_settings(None)

    assert app.config is CONFIG
    assert reloads == []


def test_filters_changed_replaces_filter_state() -> None:
    app = _app()
    state = app.data_manager.filter_state.toggle_status("New")

    app.on_filters_changed(SimpleNamespace(state=state))

    assert app.data_manager.filter_state == state


def test_clear_filters_action() -> None:
    app = _app()
    app.data_manager.toggle_priority("High")
    app.action_clear_filters()
    assert app.data_manager.filter_state.is_empty


def test_open_detail_without_focused_card_does_nothing(monkeypatch) -> None:
    app = _app()
    pushed: list[object] = []
    monkeypatch.setattr(app, "_focused_card", lambda: None)
    monkeypatch.setattr(app, "push_screen", lambda screen, *args, **kwargs: pushed.append(screen))

    app.action_open_detail()

    assert pushed == []
