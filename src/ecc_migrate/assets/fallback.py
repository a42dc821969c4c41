"""Localized copies with original-language fallback.

Localized content is copied first; afterwards every original-language file
whose relative path is still missing at the destination is filled in, so
the destination always ends up with at least the original tree's paths.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

from ecc_migrate.assets.copier import CopyReport, copy_tree, iter_files, relative_files
from ecc_migrate.assets.resolver import locale_category_dir, root_category_dir
from ecc_migrate.core.categories import AssetCategory
from ecc_migrate.core.constants import COMMON_RULES_DIR

logger = logging.getLogger(__name__)


def _fill_missing(
    fallback: Path,
    dest: Path,
    covered: set[Path],
    report: CopyReport,
    dry_run: bool,
) -> None:
    """Copy files from *fallback* whose relative path is absent at *dest*.

    *covered* holds the relative paths the localized tree provides; in
    dry-run mode those count as present even though nothing was written.
    """
    for path in iter_files(fallback):
        rel = path.relative_to(fallback)
        if rel in covered:
            continue
        target = dest / rel
        report.attempted += 1
        if target.exists():
            report.skipped_existing += 1
            continue
        report.filled_from_fallback += 1
        if not dry_run:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)


def merge_with_fallback(
    localized: Path | None,
    fallback: Path,
    dest: Path,
    *,
    dry_run: bool = False,
    label: str = "",
) -> CopyReport:
    """Copy *localized* into *dest*, then fill gaps from *fallback*."""
    report = CopyReport(label=label, dry_run=dry_run)
    covered: set[Path] = set()

    if localized is not None and localized.is_dir():
        report.add(copy_tree(localized, dest, dry_run=dry_run, label=f"{label} (localized)"))
        covered = relative_files(localized)

    if fallback.is_dir():
        _fill_missing(fallback, dest, covered, report, dry_run)
        if report.filled_from_fallback:
            verb = "Would fill" if dry_run else "Filled"
            logger.info("%s %d missing files from original fallback", verb, report.filled_from_fallback)

    return report


def copy_with_fallback(
    source_root: Path,
    category: AssetCategory,
    locale: str,
    dest: Path,
    *,
    dry_run: bool = False,
) -> CopyReport:
    """Install a markdown-tree *category* into *dest*, honouring *locale*.

    Without a locale this is a plain merging copy of the original tree.
    """
    label = f"{category.value}/"
    root = root_category_dir(source_root, category)
    shadow = locale_category_dir(source_root, category, locale)

    if not root.is_dir() and (shadow is None or not shadow.is_dir()):
        report = CopyReport(label=label, dry_run=dry_run)
        report.warn(f"No {category.value} found in source")
        return report

    if not locale:
        return copy_tree(root, dest, dry_run=dry_run, label=label)

    if shadow is None or not shadow.is_dir():
        logger.info("No %s content for %s, using original language", locale, category.value)
    return merge_with_fallback(shadow, root, dest, dry_run=dry_run, label=label)


def copy_rules(
    source_root: Path,
    locale: str,
    languages: Iterable[str],
    dest: Path,
    *,
    dry_run: bool = False,
) -> CopyReport:
    """Install shared rules plus one subdirectory per selected language.

    Shared rules follow the locale fallback logic. Language rules have no
    localized version and go to ``<dest>/<lang>/`` so they never collide
    with shared rule files of the same name.
    """
    report = CopyReport(label="rules/", dry_run=dry_run)
    rules_root = root_category_dir(source_root, AssetCategory.RULES)
    if not rules_root.is_dir():
        report.warn("No rules found in source")
        return report

    common = rules_root / COMMON_RULES_DIR
    shadow = locale_category_dir(source_root, AssetCategory.RULES, locale)
    if locale:
        report.add(merge_with_fallback(shadow, common, dest, dry_run=dry_run, label="rules/common/"))
    elif common.is_dir():
        report.add(copy_tree(common, dest, dry_run=dry_run, label="rules/common/"))
    else:
        report.warn("No common rules found in source")

    for lang in languages:
        lang_dir = rules_root / lang
        if not lang_dir.is_dir():
            report.warn(f"Language rules not found: {lang}")
            continue
        report.add(copy_tree(lang_dir, dest / lang, dry_run=dry_run, label=f"rules/{lang}/"))

    return report


__all__ = ["copy_rules", "copy_with_fallback", "merge_with_fallback"]
