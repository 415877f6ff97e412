from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List

from redminedash.config import AppConfig
from redminedash.models import FilterOptions, FilterState, Issue, IssueDetail
from redminedash.redmine import RedmineClient, RedmineError, issue_web_url
from redminedash.services.filters import apply_filters, derive_options, filter_summary

logger = logging.getLogger(__name__)

Listener = Callable[[], None]
ClientFactory = Callable[[AppConfig], RedmineClient]


class DataManager:
    """Owns the fetched issue list and the filter selection.

    Both are replaced whole, never edited in place, and listeners are told
    after every replacement. A failed fetch leaves them as they were.
    """

    def __init__(self, config: AppConfig | None = None, client_factory: ClientFactory | None = None):
        self.config = config or AppConfig.from_env()
        self.client_factory = client_factory or RedmineClient.from_config
        self.issues: List[Issue] = []
        self.options = FilterOptions()
        self.filter_state = FilterState()
        self.fetch_in_progress = False
        self.last_fetch_result: str = "idle"
        self.last_fetch_at: str | None = None
        self.last_error: RedmineError | None = None
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def update_config(self, config: AppConfig) -> None:
        self.config = config
        self._notify()

    async def refresh_issues(self) -> List[Issue]:
        """Fetches the assigned issues and swaps them in.

        Raises the typed ``RedmineError`` on failure after recording it.
        """
        self.fetch_in_progress = True
        self.last_fetch_result = "loading"
        self.last_error = None
        self._notify()
        try:
            self.config.require_connection()
            client = self.client_factory(self.config)
            issues = await client.fetch_assigned_issues()
        except RedmineError as e:
            logger.warning("Issue fetch failed: %s", e)
            self.last_error = e
            self.last_fetch_result = "failed"
            raise
        except Exception:
            logger.exception("Unexpected error while fetching issues")
            self.last_fetch_result = "failed"
            raise
        finally:
            self.fetch_in_progress = False
            if self.last_fetch_result == "failed":
                self._notify()

        self.issues = list(issues)
        self.options = derive_options(self.issues)
        self.last_fetch_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self.last_fetch_result = "success"
        logger.info("Loaded %d issues from %s", len(self.issues), self.config.server_url)
        self._notify()
        return self.issues

    async def fetch_issue_detail(self, issue_id: int) -> IssueDetail:
        self.config.require_connection()
        client = self.client_factory(self.config)
        return await client.fetch_issue_detail(issue_id)

    async def load_issue_detail(self, issue_id: int) -> IssueDetail | None:
        """Best-effort detail fetch; failures only reach the log."""
        if self.config.missing_settings():
            return None
        try:
            return await self.fetch_issue_detail(issue_id)
        except RedmineError as e:
            logger.debug("Detail fetch for #%s failed: %s", issue_id, e)
            return None

    def displayed_issues(self) -> List[Issue]:
        return apply_filters(self.issues, self.filter_state)

    def set_filter_state(self, state: FilterState) -> None:
        if state == self.filter_state:
            return
        self.filter_state = state
        self._notify()

    def toggle_status(self, status: str) -> None:
        self.set_filter_state(self.filter_state.toggle_status(status))

    def toggle_priority(self, priority: str) -> None:
        self.set_filter_state(self.filter_state.toggle_priority(priority))

    def clear_filters(self) -> None:
        self.set_filter_state(self.filter_state.cleared())

    def issue_url(self, issue_id: int) -> str:
        return issue_web_url(self.config.server_url, issue_id)

    def status_summary(self) -> str:
        if self.fetch_in_progress:
            return "loading"
        if self.last_fetch_result == "failed":
            return f"failed: {self.last_error}" if self.last_error else "failed"
        if self.last_fetch_result == "success":
            shown = len(self.displayed_issues())
            total = len(self.issues)
            summary = f"{shown} issues" if shown == total else f"{shown} of {total} issues"
            return f"{summary} | filters: {filter_summary(self.filter_state)}"
        return self.last_fetch_result
