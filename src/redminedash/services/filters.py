from __future__ import annotations

from typing import Iterable

from redminedash.models import FilterOptions, FilterState, Issue


def matches(issue: Issue, state: FilterState) -> bool:
    """AND across status and priority, OR within each selected set."""
    if state.selected_statuses and issue.status not in state.selected_statuses:
        return False
    if state.selected_priorities:
        # An issue without a priority never satisfies a priority restriction.
        if issue.priority is None:
            return False
        if issue.priority not in state.selected_priorities:
            return False
    return True


def apply_filters(issues: Iterable[Issue], state: FilterState) -> list[Issue]:
    return [issue for issue in issues if matches(issue, state)]


def derive_options(issues: Iterable[Issue]) -> FilterOptions:
    statuses: set[str] = set()
    priorities: set[str] = set()
    for issue in issues:
        statuses.add(issue.status)
        if issue.priority is not None:
            priorities.add(issue.priority)
    return FilterOptions(statuses=frozenset(statuses), priorities=frozenset(priorities))


def filter_summary(state: FilterState) -> str:
    if state.is_empty:
        return "none"
    parts: list[str] = []
    if state.selected_statuses:
        parts.append(f"status={','.join(sorted(state.selected_statuses))}")
    if state.selected_priorities:
        parts.append(f"priority={','.join(sorted(state.selected_priorities))}")
    return " ".join(parts)
