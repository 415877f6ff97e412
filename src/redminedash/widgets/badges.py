from __future__ import annotations

from rich.text import Text

STATUS_COLORS = {
    "new": "dodger_blue1",
    "in progress": "dark_orange",
    "resolved": "green",
    "closed": "grey50",
}

PRIORITY_COLORS = {
    "low": "green",
    "normal": "dodger_blue1",
    "high": "dark_orange",
    "urgent": "red",
    "immediate": "red",
}

DEFAULT_COLOR = "dodger_blue1"


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status.strip().lower(), DEFAULT_COLOR)


def priority_color(priority: str) -> str:
    return PRIORITY_COLORS.get(priority.strip().lower(), DEFAULT_COLOR)


def status_badge(status: str) -> Text:
    return Text(f" {status} ", style=f"bold {status_color(status)} reverse")


def priority_badge(priority: str) -> Text:
    return Text(f" {priority} ", style=f"{priority_color(priority)}")
