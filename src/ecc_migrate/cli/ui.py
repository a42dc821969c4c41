"""Reusable UI helpers for ecc-migrate CLI output."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from ecc_migrate.core.categories import ALL_CATEGORIES
from ecc_migrate.migrate import MigrationSummary, OutcomeStatus


class StepTracker:
    """Track and render a list of steps with Rich trees."""

    def __init__(self, title: str):
        self.title = title
        self.steps = []  # list of dicts: {key, label, status, detail}

    def add(self, key: str, label: str):
        if key not in [s["key"] for s in self.steps]:
            self.steps.append({"key": key, "label": label, "status": "pending", "detail": ""})

    def complete(self, key: str, detail: str = ""):
        self._update(key, status="done", detail=detail)

    def warn(self, key: str, detail: str = ""):
        self._update(key, status="warning", detail=detail)

    def error(self, key: str, detail: str = ""):
        self._update(key, status="error", detail=detail)

    def skip(self, key: str, detail: str = ""):
        self._update(key, status="skipped", detail=detail)

    def _update(self, key: str, status: str, detail: str):
        for s in self.steps:
            if s["key"] == key:
                s["status"] = status
                if detail:
                    s["detail"] = detail
                return
        # If not present, add it
        self.steps.append({"key": key, "label": key, "status": status, "detail": detail})

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        for step in self.steps:
            label = step["label"]
            detail_text = step["detail"].strip() if step["detail"] else ""

            status = step["status"]
            if status == "done":
                symbol = "[green]●[/green]"
            elif status == "warning":
                symbol = "[yellow]●[/yellow]"
            elif status == "error":
                symbol = "[red]●[/red]"
            elif status == "skipped":
                symbol = "[yellow]○[/yellow]"
            else:
                symbol = " "

            if detail_text:
                line = f"{symbol} [white]{label}[/white] [bright_black]({detail_text})[/bright_black]"
            else:
                line = f"{symbol} [white]{label}[/white]"

            tree.add(line)
        return tree


def summary_tracker(summary: MigrationSummary) -> StepTracker:
    """Build a tracker with one line per category; unselected ones show as skipped."""
    title = "Migration plan (dry run)" if summary.dry_run else "Migration results"
    tracker = StepTracker(title)
    for category in ALL_CATEGORIES:
        tracker.add(category.value, category.value)

    for outcome in summary.outcomes:
        key = outcome.category.value
        if outcome.status == OutcomeStatus.FAILED:
            tracker.error(key, escape(outcome.error or "failed"))
        elif outcome.status == OutcomeStatus.WARNING:
            parts = [outcome.detail, *outcome.warnings]
            tracker.warn(key, escape("; ".join(part for part in parts if part)))
        else:
            tracker.complete(key, escape(outcome.detail))

    for step in tracker.steps:
        if step["status"] == "pending":
            tracker.skip(step["key"], "not selected")
    return tracker


def print_summary(summary: MigrationSummary, console: Console | None = None) -> None:
    (console or Console()).print(summary_tracker(summary).render())


__all__ = ["StepTracker", "print_summary", "summary_tracker"]
