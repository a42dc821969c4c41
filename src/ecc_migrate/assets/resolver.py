"""Locale-aware source resolution for markdown-tree categories.

For markdown content a locale shadow tree under ``docs/<locale>/`` is
preferred when it exists; otherwise the root-level (original language)
directory is used. Code-bearing categories are always read from the root.
"""

from __future__ import annotations

from pathlib import Path

from ecc_migrate.core.categories import AssetCategory
from ecc_migrate.core.constants import LOCALE_DOCS_DIR


def root_category_dir(source_root: Path, category: AssetCategory) -> Path:
    """Original-language directory for *category*."""
    return source_root / category.value


def locale_category_dir(source_root: Path, category: AssetCategory, locale: str) -> Path | None:
    """Locale shadow directory for *category*, or None when no locale is set."""
    if not locale:
        return None
    return source_root / LOCALE_DOCS_DIR / locale / category.value


def resolve_category_source(source_root: Path, category: AssetCategory, locale: str = "") -> Path:
    """Return the directory to read *category* from.

    Never fails: callers check existence of the returned path themselves.
    """
    shadow = locale_category_dir(source_root, category, locale)
    if shadow is not None and shadow.is_dir():
        return shadow
    return root_category_dir(source_root, category)


__all__ = ["locale_category_dir", "resolve_category_source", "root_category_dir"]
