"""Run the per-category migration steps against one target directory.

Categories are processed strictly in the order given. A failing category
is recorded and the run continues with the next one; the summary lists
what happened to each.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from ecc_migrate.assets.copier import CopyReport
from ecc_migrate.assets.fallback import copy_rules, copy_with_fallback
from ecc_migrate.assets.hooks import HookMergeReport, migrate_hooks
from ecc_migrate.assets.mcp import McpMergeResult, migrate_mcp_configs
from ecc_migrate.core.categories import AssetCategory
from ecc_migrate.core.constants import CLAUDE_DIR, DEFAULT_FILTER_INTERPRETER
from ecc_migrate.errors import MigrationError

logger = logging.getLogger(__name__)

CategoryReport = Union[CopyReport, HookMergeReport, McpMergeResult]


class OutcomeStatus(Enum):
    """Final state of one category."""

    DONE = "done"
    WARNING = "warning"
    FAILED = "failed"


@dataclass
class MigrationPlan:
    """Everything the engine needs from the command line layer."""

    source_root: Path
    target_dir: Path
    categories: list[AssetCategory]
    languages: list[str] = field(default_factory=list)
    locale: str = ""
    dry_run: bool = False
    filter_interpreter: str = DEFAULT_FILTER_INTERPRETER

    @property
    def claude_dir(self) -> Path:
        return self.target_dir / CLAUDE_DIR


@dataclass
class CategoryOutcome:
    category: AssetCategory
    status: OutcomeStatus
    detail: str = ""
    warnings: list[str] = field(default_factory=list)
    report: CategoryReport | None = None
    error: str | None = None


@dataclass
class MigrationSummary:
    """Per-category outcomes of one run, in processing order."""

    outcomes: list[CategoryOutcome] = field(default_factory=list)
    dry_run: bool = False

    @property
    def failed(self) -> list[CategoryOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    @property
    def warnings(self) -> list[str]:
        return [warning for outcome in self.outcomes for warning in outcome.warnings]

    def outcome_for(self, category: AssetCategory) -> CategoryOutcome | None:
        for outcome in self.outcomes:
            if outcome.category == category:
                return outcome
        return None


def migrate_category(plan: MigrationPlan, category: AssetCategory) -> CategoryReport:
    """Install a single *category* according to *plan*."""
    if category == AssetCategory.HOOKS:
        return migrate_hooks(
            plan.source_root,
            plan.target_dir,
            dry_run=plan.dry_run,
            start_index=0,
            interpreter=plan.filter_interpreter,
        )
    if category == AssetCategory.MCP_CONFIGS:
        return migrate_mcp_configs(plan.source_root, plan.target_dir, dry_run=plan.dry_run)

    dest = plan.claude_dir / category.value
    if category == AssetCategory.RULES:
        return copy_rules(plan.source_root, plan.locale, plan.languages, dest, dry_run=plan.dry_run)
    return copy_with_fallback(plan.source_root, category, plan.locale, dest, dry_run=plan.dry_run)


def describe_report(report: CategoryReport) -> str:
    """One-line human summary of a category report."""
    if isinstance(report, HookMergeReport):
        verb = "would add" if report.dry_run else "added"
        parts = [f"{report.added} hook entries {verb}", f"{report.skipped} skipped"]
        if report.filter_scripts:
            parts.append(f"{len(report.filter_scripts)} filter scripts")
        if report.scripts.written:
            parts.append(f"{report.scripts.written} hook scripts")
        return ", ".join(parts)

    if isinstance(report, McpMergeResult):
        verb = "would add" if report.dry_run else "added"
        return f"{report.added} servers {verb}, {report.skipped} skipped (already exist)"

    if report.dry_run:
        text = f"would copy {report.copied} files"
        if report.filled_from_fallback:
            text += f", ~{report.filled_from_fallback} from fallback"
        return text
    parts = [f"{report.copied} copied"]
    if report.filled_from_fallback:
        parts.append(f"{report.filled_from_fallback} filled from fallback")
    if report.skipped_existing:
        parts.append(f"{report.skipped_existing} already present")
    return ", ".join(parts)


def execute_migration(plan: MigrationPlan) -> MigrationSummary:
    """Install every category in *plan*, never aborting on a single failure."""
    summary = MigrationSummary(dry_run=plan.dry_run)

    for category in plan.categories:
        logger.info("Installing %s", category.value)
        try:
            report = migrate_category(plan, category)
        except (MigrationError, OSError) as exc:
            logger.error("Failed to install %s: %s", category.value, exc)
            summary.outcomes.append(
                CategoryOutcome(category=category, status=OutcomeStatus.FAILED, error=str(exc))
            )
            continue

        status = OutcomeStatus.WARNING if report.warnings else OutcomeStatus.DONE
        summary.outcomes.append(
            CategoryOutcome(
                category=category,
                status=status,
                detail=describe_report(report),
                warnings=list(report.warnings),
                report=report,
            )
        )

    return summary


__all__ = [
    "CategoryOutcome",
    "MigrationPlan",
    "MigrationSummary",
    "OutcomeStatus",
    "describe_report",
    "execute_migration",
    "migrate_category",
]
