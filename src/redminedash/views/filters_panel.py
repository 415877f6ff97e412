from __future__ import annotations

from rich.text import Text
from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import SelectionList, Static

from redminedash.models import FilterOptions, FilterState
from redminedash.widgets.badges import priority_color, status_color


class FiltersChanged(Message):
    def __init__(self, state: FilterState) -> None:
        super().__init__()
        self.state = state


class FiltersPanel(Vertical):
    """Status and priority pickers built from the values present in the list."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.options = FilterOptions()
        self.state = FilterState()
        self._shown_values: dict[str, list[str]] = {}

    def compose(self) -> ComposeResult:
        yield Static("FILTERS  ·  space toggle  ·  c clear all", id="filters-header")
        with Horizontal(id="filters-lists"):
            with Vertical(classes="filter-column"):
                yield Static("Status", classes="filter-title")
                yield SelectionList[str](id="status-filter")
            with Vertical(classes="filter-column"):
                yield Static("Priority", classes="filter-title")
                yield SelectionList[str](id="priority-filter")

    def sync(self, options: FilterOptions, state: FilterState) -> None:
        self.options = options
        self.state = state
        self._fill(
            self.query_one("#status-filter", SelectionList),
            options.sorted_statuses(),
            state.selected_statuses,
            status_color,
        )
        self._fill(
            self.query_one("#priority-filter", SelectionList),
            options.sorted_priorities(),
            state.selected_priorities,
            priority_color,
        )

    def _fill(self, selection: SelectionList, values: list[str], selected: frozenset[str], color) -> None:
        shown = self._shown_values.get(selection.id or "")
        if shown == values and set(selection.selected) == selected & set(values):
            return
        self._shown_values[selection.id or ""] = values
        selection.clear_options()
        selection.add_options(
            [(Text(value, style=color(value)), value, value in selected) for value in values]
        )

    @on(SelectionList.SelectedChanged, "#status-filter")
    def _status_changed(self, event: SelectionList.SelectedChanged) -> None:
        # Keep selections for values that vanished from the latest fetch.
        hidden = self.state.selected_statuses - self.options.statuses
        state = self.state.with_statuses(set(event.selection_list.selected) | hidden)
        self._publish(state)

    @on(SelectionList.SelectedChanged, "#priority-filter")
    def _priority_changed(self, event: SelectionList.SelectedChanged) -> None:
        hidden = self.state.selected_priorities - self.options.priorities
        state = self.state.with_priorities(set(event.selection_list.selected) | hidden)
        self._publish(state)

    def _publish(self, state: FilterState) -> None:
        if state == self.state:
            return
        self.state = state
        self.post_message(FiltersChanged(state))
