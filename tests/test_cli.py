from __future__ import annotations

import json

import pytest

from redminedash import cli
from redminedash.config import AppConfig
from redminedash.models import FilterOptions, FilterState, Issue, IssueDetail
from redminedash.redmine import ConfigurationError, HttpError
from redminedash.services.filters import apply_filters, derive_options

ISSUES = [
    Issue(1, "Login fails", "New", "Portal", "High"),
    Issue(2, "Typo in footer", "New", "Portal", None),
    Issue(3, "Archive old tickets", "Closed", "Ops", "Low"),
]


class FakeDataManager:
    error: Exception | None = None
    detail_error: Exception | None = None

    def __init__(self, config: AppConfig | None = None):
        self.config = config or AppConfig(server_name="Work", server_url="https://r.example.com", api_key="k")
        self.issues: list[Issue] = []
        self.options = FilterOptions()
        self.filter_state = FilterState()

    async def refresh_issues(self) -> list[Issue]:
        if self.error:
            raise self.error
        self.issues = list(ISSUES)
        self.options = derive_options(self.issues)
        return self.issues

    async def fetch_issue_detail(self, issue_id: int) -> IssueDetail:
        if self.detail_error:
            raise self.detail_error
        return IssueDetail(issue_id, "Login fails", "New", "Portal", "Steps to reproduce")

    def set_filter_state(self, state: FilterState) -> None:
        self.filter_state = state

    def displayed_issues(self) -> list[Issue]:
        return apply_filters(self.issues, self.filter_state)

    def status_summary(self) -> str:
        return f"{len(self.displayed_issues())} issues"

    def issue_url(self, issue_id: int) -> str:
        return f"{self.config.server_url}/issues/{issue_id}"


@pytest.fixture
def fake_dm(monkeypatch):
    FakeDataManager.error = None
    FakeDataManager.detail_error = None
    monkeypatch.setattr(cli, "DataManager", FakeDataManager)
    return FakeDataManager


def test_no_subcommand_runs_tui(monkeypatch) -> None:
    called: list[bool] = []
    monkeypatch.setattr("sys.argv", ["rd"])
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.setattr("redminedash.app.run", lambda: called.append(True))

    cli.main()

    assert called == [True]


def test_list_dispatch_exits_with_command_result(monkeypatch, fake_dm) -> None:
    monkeypatch.setattr("sys.argv", ["rd", "list", "--status", "New"])
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)

    with pytest.raises(SystemExit) as raised:
        cli.main()

    assert raised.value.code == 0


@pytest.mark.asyncio
async def test_list_prints_filtered_issues(fake_dm, capsys) -> None:
    code = await cli.list_issues(["New"], ["High"])
    out = capsys.readouterr().out

    assert code == 0
    assert "📋 Work: 1 issues" in out
    assert "Login fails" in out
    assert "Typo in footer" not in out


@pytest.mark.asyncio
async def test_list_json_output(fake_dm, capsys) -> None:
    code = await cli.list_issues([], ["Low"], as_json=True)
    data = json.loads(capsys.readouterr().out)

    assert code == 0
    assert data == [
        {"id": 3, "subject": "Archive old tickets", "status": "Closed", "project": "Ops", "priority": "Low"}
    ]


@pytest.mark.asyncio
async def test_list_reports_no_matches(fake_dm, capsys) -> None:
    code = await cli.list_issues(["Resolved"], [])
    assert code == 0
    assert "No issues match the current filters." in capsys.readouterr().out


@pytest.mark.asyncio
async def test_list_reports_fetch_error(fake_dm, capsys) -> None:
    fake_dm.error = HttpError(401)
    code = await cli.list_issues([], [])
    assert code == 1
    assert "❌ Error: HTTP error 401" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_list_reports_missing_settings(fake_dm, capsys) -> None:
    fake_dm.error = ConfigurationError(("server_url", "api_key"))
    code = await cli.list_issues([], [])
    assert code == 1
    assert "URL and API key are required" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_show_prints_detail(fake_dm, capsys) -> None:
    code = await cli.show_issue(12)
    out = capsys.readouterr().out

    assert code == 0
    assert "#12  Login fails" in out
    assert "https://r.example.com/issues/12" in out
    assert "Steps to reproduce" in out


@pytest.mark.asyncio
async def test_show_reports_error(fake_dm, capsys) -> None:
    fake_dm.detail_error = HttpError(404)
    assert await cli.show_issue(99) == 1
    assert "HTTP error 404" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_options_prints_sorted_values(fake_dm, capsys) -> None:
    code = await cli.show_options()
    out = capsys.readouterr().out

    assert code == 0
    assert out.index("  - Closed") < out.index("  - New")
    assert "  - High" in out
    assert "  - Low" in out


@pytest.mark.asyncio
async def test_doctor_flags_missing_settings(monkeypatch, capsys) -> None:
    monkeypatch.delenv("REDMINE_URL", raising=False)
    monkeypatch.delenv("REDMINE_API_KEY", raising=False)
    monkeypatch.setenv("RD_CONFIG_PATH", "non-existent-config-file.json")

    code = await cli.doctor()
    out = capsys.readouterr().out

    assert code == 1
    assert "[✕] REDMINE_URL" in out
    assert "[✕] REDMINE_API_KEY" in out
    assert "Testing connection" not in out


@pytest.mark.asyncio
async def test_doctor_tests_connection(monkeypatch, fake_dm, capsys) -> None:
    monkeypatch.setenv("REDMINE_URL", "https://r.example.com")
    monkeypatch.setenv("REDMINE_API_KEY", "k")
    monkeypatch.setenv("RD_CONFIG_PATH", "non-existent-config-file.json")

    code = await cli.doctor()
    out = capsys.readouterr().out

    assert code == 0
    assert "OK: 3 open issues assigned to you" in out
