from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Static

from redminedash.models import Issue, IssueDetail


class IssueDetailScreen(Screen):
    BINDINGS = [
        ("escape", "close_screen", "Close"),
        ("q", "close_screen", "Close"),
        ("o", "open_in_browser", "Open in Browser"),
        ("r", "reload_detail", "Reload"),
    ]

    def __init__(self, issue: Issue, detail: IssueDetail | None = None) -> None:
        super().__init__()
        self.issue = issue
        self.detail = detail
        self.detail_loading = detail is None

    def compose(self) -> ComposeResult:
        yield Static("", id="issue-detail-header")
        yield Static("", id="issue-detail-meta")
        yield Static("", id="issue-detail-description")
        yield Static("", id="issue-detail-hint")

    def on_mount(self) -> None:
        self.refresh_view()
        if self.detail is None:
            self.run_worker(self._load_detail(), exclusive=True, group="issue-detail")

    def refresh_view(self) -> None:
        self.query_one("#issue-detail-header", Static).update(Text(self.header_text()))
        self.query_one("#issue-detail-meta", Static).update(Text("\n".join(self.meta_lines())))
        self.query_one("#issue-detail-description", Static).update(Text(self.description_text()))
        self.query_one("#issue-detail-hint", Static).update(
            "o open in browser  ·  r reload  ·  Esc / q close"
        )

    def header_text(self) -> str:
        subject = self.detail.subject if self.detail else self.issue.subject
        return f"#{self.issue.id}  ·  {subject}"

    def meta_lines(self) -> list[str]:
        status = self.detail.status if self.detail else self.issue.status
        project = self.detail.project if self.detail else self.issue.project
        return [
            f"Status     {status}",
            f"Priority   {self.issue.priority or '–'}",
            f"Project    {project}",
        ]

    def description_text(self) -> str:
        if self.detail_loading:
            return "DESCRIPTION\n\nLoading details…"
        if self.detail and self.detail.description:
            return f"DESCRIPTION\n\n{self.detail.description}"
        return "DESCRIPTION\n\nNo description provided."

    async def _load_detail(self) -> None:
        self.detail_loading = True
        self.refresh_view()
        detail = await self.app.data_manager.load_issue_detail(self.issue.id)
        self.detail_loading = False
        if detail is not None:
            self.detail = detail
        self.refresh_view()

    def action_reload_detail(self) -> None:
        self.run_worker(self._load_detail(), exclusive=True, group="issue-detail")

    def action_open_in_browser(self) -> None:
        self.app.open_issue_in_browser(self.issue.id)

    def action_close_screen(self) -> None:
        self.app.pop_screen()
