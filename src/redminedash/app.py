import logging
import webbrowser

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.logging import TextualHandler
from textual.widgets import Footer, SelectionList, Static
from dotenv import load_dotenv

from redminedash.config import AppConfig
from redminedash.data import DataManager
from redminedash.logs import configure_logging
from redminedash.models import Issue
from redminedash.redmine import RedmineError
from redminedash.views.filters_panel import FiltersChanged, FiltersPanel
from redminedash.views.issue_detail import IssueDetailScreen
from redminedash.views.settings import SettingsScreen
from redminedash.widgets.issue_card import IssueCard, IssueCardFocused, IssueCardSelected

logger = logging.getLogger(__name__)

MAIN_SCREEN_ACTIONS = {
    "load_issues",
    "toggle_filters",
    "clear_filters",
    "open_settings",
    "open_detail",
    "open_in_browser",
}


class RedmineDash(App):
    CSS_PATH = "redminedash.tcss"

    BINDINGS = [
        ("r", "load_issues", "Load Issues"),
        ("f", "toggle_filters", "Filters"),
        ("c", "clear_filters", "Clear Filters"),
        ("s", "open_settings", "Settings"),
        ("j", "focus_next", "Next"),
        ("k", "focus_previous", "Previous"),
        ("enter", "open_detail", "Open Detail"),
        ("o", "open_in_browser", "Open in Browser"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, data_manager: DataManager | None = None, **kwargs):
        super().__init__(**kwargs)
        self.data_manager = data_manager or DataManager(AppConfig.from_env())
        self.filters_visible = False
        self._rendered_issues: list[Issue] | None = None
        self._unsubscribe = None

    @property
    def config(self) -> AppConfig:
        return self.data_manager.config

    def compose(self) -> ComposeResult:
        yield Static(self.header_text(), id="app-header")
        yield Static("Status: initializing...", id="app-status")
        yield FiltersPanel(id="filters-panel")
        yield Static("", id="issue-message")
        yield VerticalScroll(id="issue-list")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(FiltersPanel).display = self.filters_visible
        self._unsubscribe = self.data_manager.subscribe(self.refresh_views)
        self.refresh_views()
        self.action_load_issues()

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def header_text(self) -> str:
        return f"MY REDMINE TASKS  ·  {self.config.server_name}"

    def _main_screen(self):
        return self.screen_stack[0]

    def refresh_views(self) -> None:
        data = self.data_manager
        try:
            main = self._main_screen()
            main.query_one("#app-header", Static).update(Text(self.header_text()))
            main.query_one("#app-status", Static).update(Text(f"Status: {data.status_summary()}"))
            main.query_one(FiltersPanel).sync(data.options, data.filter_state)
            message = self.list_message()
            notice = main.query_one("#issue-message", Static)
            notice.update(Text(message or ""))
            notice.display = message is not None
        except Exception:
            logger.exception("View refresh failed")
            return
        self._render_issue_list(data.displayed_issues())

    def list_message(self) -> str | None:
        data = self.data_manager
        if data.fetch_in_progress:
            return "Loading tasks…"
        if data.last_fetch_result == "failed":
            return f"⚠️ {data.last_error or 'Failed to load issues'}\n\nPress r to retry."
        if data.issues and not data.displayed_issues():
            return "No issues match the current filters\n\nPress c to clear filters."
        if not data.issues:
            return "No tasks to display."
        return None

    def _render_issue_list(self, issues: list[Issue]) -> None:
        if issues == self._rendered_issues:
            return
        self._rendered_issues = list(issues)
        container = self._main_screen().query_one("#issue-list", VerticalScroll)
        container.remove_children()
        if issues:
            container.mount_all([IssueCard(issue) for issue in issues])

    async def _load_issues(self) -> None:
        try:
            await self.data_manager.refresh_issues()
        except RedmineError as e:
            self._notify(str(e), severity="error")

    def action_load_issues(self) -> None:
        self.run_worker(self._load_issues(), exclusive=True, group="issues")

    def action_toggle_filters(self) -> None:
        self.filters_visible = not self.filters_visible
        panel = self.query_one(FiltersPanel)
        panel.display = self.filters_visible
        if self.filters_visible:
            panel.query_one("#status-filter", SelectionList).focus()

    def action_clear_filters(self) -> None:
        self.data_manager.clear_filters()

    def on_filters_changed(self, event: FiltersChanged) -> None:
        self.data_manager.set_filter_state(event.state)

    def on_issue_card_focused(self, event: IssueCardFocused) -> None:
        card = event.card
        card.set_detail_loading()
        self.run_worker(self._load_card_detail(card), group="card-detail")

    async def _load_card_detail(self, card: IssueCard) -> None:
        detail = await self.data_manager.load_issue_detail(card.issue.id)
        if card.is_attached:
            card.set_detail(detail)

    def on_issue_card_selected(self, event: IssueCardSelected) -> None:
        self.open_issue_in_browser(event.issue_id)

    def _focused_card(self) -> IssueCard | None:
        focused = self.focused
        return focused if isinstance(focused, IssueCard) else None

    def action_open_detail(self) -> None:
        card = self._focused_card()
        if card is None:
            return
        self.push_screen(IssueDetailScreen(card.issue, card.detail))

    def action_open_in_browser(self) -> None:
        card = self._focused_card()
        if card is None:
            return
        self.open_issue_in_browser(card.issue.id)

    def open_issue_in_browser(self, issue_id: int) -> None:
        if not self.config.server_url:
            self._notify("Redmine URL is not configured", severity="error")
            return
        url = self.data_manager.issue_url(issue_id)
        logger.info("Opening %s", url)
        webbrowser.open(url)

    def action_open_settings(self) -> None:
        self.push_screen(SettingsScreen(self.config), callback=self.apply_settings)

    def apply_settings(self, config: AppConfig | None) -> None:
        if config is None:
            return
        self.data_manager.update_config(config)
        self.action_load_issues()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action in MAIN_SCREEN_ACTIONS and len(self.screen_stack) > 1:
            return False
        return True

    def _notify(self, message: str, severity: str = "information") -> None:
        try:
            self.notify(message, severity=severity)
        except Exception:
            logger.warning(message)


def run() -> None:
    load_dotenv()
    configure_logging(TextualHandler())
    app = RedmineDash()
    app.run()


if __name__ == "__main__":
    run()
