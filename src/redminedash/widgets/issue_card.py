from textual.widgets import Static
from textual.message import Message
from textual import events
from rich.text import Text
from redminedash.models import Issue, IssueDetail
from redminedash.widgets.badges import priority_badge, status_badge


class IssueCardSelected(Message):
    def __init__(self, issue_id: int) -> None:
        super().__init__()
        self.issue_id = issue_id


class IssueCardFocused(Message):
    def __init__(self, card: "IssueCard") -> None:
        super().__init__()
        self.card = card


class IssueCard(Static):
    can_focus = True

    def __init__(self, issue: Issue, **kwargs):
        super().__init__(**kwargs)
        self.issue = issue
        self.detail: IssueDetail | None = None
        self.detail_loading = False
        self.expanded = False

    def on_click(self, event: events.Click) -> None:  # type: ignore[override]
        self.post_message(IssueCardSelected(self.issue.id))

    def on_focus(self, event: events.Focus) -> None:  # type: ignore[override]
        self.expanded = True
        self.refresh()
        if self.detail is None and not self.detail_loading:
            self.post_message(IssueCardFocused(self))

    def on_blur(self, event: events.Blur) -> None:  # type: ignore[override]
        self.expanded = False
        self.refresh()

    def set_detail_loading(self) -> None:
        self.detail_loading = True
        self.refresh()

    def set_detail(self, detail: IssueDetail | None) -> None:
        self.detail_loading = False
        self.detail = detail
        self.refresh()

    def render(self):
        issue = self.issue
        header = Text.assemble(
            (f"#{issue.id} ", "bold #888888"),
            (f"[{issue.project}] ", "#5f87ff"),
        )
        if issue.priority:
            header.append_text(priority_badge(issue.priority))
            header.append(" ")
        header.append_text(status_badge(issue.status))

        body = Text.assemble(header, "\n", (issue.subject, "bold #ffffff"))
        if self.expanded:
            if self.detail_loading:
                body.append("\nLoading details…", style="italic #888888")
            elif self.detail and self.detail.description:
                body.append(f"\n{self.detail.description}", style="#aaaaaa")
        return body
