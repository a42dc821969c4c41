"""File-level merging copy of asset trees.

Existing destination files are never overwritten: a file is only written
when nothing exists yet at its relative path under the destination.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


@dataclass
class CopyReport:
    """Counts for one category copy (or planned copy in dry-run mode)."""

    label: str = ""
    attempted: int = 0
    copied: int = 0
    filled_from_fallback: int = 0
    skipped_existing: int = 0
    warnings: list[str] = field(default_factory=list)
    dry_run: bool = False

    def add(self, other: "CopyReport") -> None:
        """Fold the counts and warnings of *other* into this report."""
        self.attempted += other.attempted
        self.copied += other.copied
        self.filled_from_fallback += other.filled_from_fallback
        self.skipped_existing += other.skipped_existing
        self.warnings.extend(other.warnings)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    @property
    def written(self) -> int:
        return self.copied + self.filled_from_fallback


def iter_files(root: Path) -> Iterator[Path]:
    """Yield every file under *root* in a stable order."""
    for path in sorted(root.rglob("*")):
        if path.is_file():
            yield path


def count_files(root: Path) -> int:
    """Number of files under *root* (0 if it is missing or not a directory)."""
    if not root.is_dir():
        return 0
    return sum(1 for _ in iter_files(root))


def relative_files(root: Path) -> set[Path]:
    """Relative paths of every file under *root*."""
    if not root.is_dir():
        return set()
    return {path.relative_to(root) for path in iter_files(root)}


def copy_tree(src: Path, dest: Path, *, dry_run: bool = False, label: str = "") -> CopyReport:
    """Copy *src* into *dest* without overwriting anything already there.

    A single-file source is copied to the path *dest* itself, creating its
    parent directories. A directory source is merged file by file. A missing
    source yields a warning and an empty report. In dry-run mode nothing is
    written and the report carries the total number of files found under the
    source.
    """
    report = CopyReport(label=label or src.name, dry_run=dry_run)

    if not src.exists():
        report.warn(f"Source not found: {src}")
        return report

    if src.is_file():
        report.attempted = 1
        if dest.exists():
            report.skipped_existing = 1
            return report
        report.copied = 1
        if not dry_run:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dest)
        return report

    if dry_run:
        total = count_files(src)
        report.attempted = total
        report.copied = total
        logger.info("[DRY RUN] Would copy %d files from %s", total, report.label)
        return report

    dest.mkdir(parents=True, exist_ok=True)
    for path in iter_files(src):
        target = dest / path.relative_to(src)
        report.attempted += 1
        if target.exists():
            report.skipped_existing += 1
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        report.copied += 1

    logger.debug(
        "Copied %d files from %s (%d already present)",
        report.copied,
        report.label,
        report.skipped_existing,
    )
    return report


__all__ = ["CopyReport", "copy_tree", "count_files", "iter_files", "relative_files"]
