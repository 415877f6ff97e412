from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional


@dataclass(frozen=True)
class Issue:
    id: int
    subject: str
    status: str
    project: str
    priority: Optional[str] = None


@dataclass(frozen=True)
class IssueDetail:
    id: int
    subject: str
    status: str
    project: str
    description: Optional[str] = None


@dataclass(frozen=True)
class FilterState:
    """User selection over statuses and priorities.

    An empty set on either dimension places no restriction on it. Every
    change returns a new value so the state can be swapped in one step.
    """

    selected_statuses: frozenset[str] = field(default_factory=frozenset)
    selected_priorities: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.selected_statuses and not self.selected_priorities

    def toggle_status(self, status: str) -> "FilterState":
        return FilterState(_toggled(self.selected_statuses, status), self.selected_priorities)

    def toggle_priority(self, priority: str) -> "FilterState":
        return FilterState(self.selected_statuses, _toggled(self.selected_priorities, priority))

    def with_statuses(self, statuses: Iterable[str]) -> "FilterState":
        return FilterState(frozenset(statuses), self.selected_priorities)

    def with_priorities(self, priorities: Iterable[str]) -> "FilterState":
        return FilterState(self.selected_statuses, frozenset(priorities))

    def cleared(self) -> "FilterState":
        return FilterState()


@dataclass(frozen=True)
class FilterOptions:
    statuses: frozenset[str] = field(default_factory=frozenset)
    priorities: frozenset[str] = field(default_factory=frozenset)

    def sorted_statuses(self) -> list[str]:
        return sorted(self.statuses)

    def sorted_priorities(self) -> list[str]:
        return sorted(self.priorities)


def _toggled(values: frozenset[str], value: str) -> frozenset[str]:
    if value in values:
        return values - {value}
    return values | {value}
