"""CLI helpers exposed for other modules."""

from .ui import StepTracker, print_summary, summary_tracker

__all__ = ["StepTracker", "print_summary", "summary_tracker"]
