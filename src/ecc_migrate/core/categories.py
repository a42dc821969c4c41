"""Asset categories and selection parsing."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from ecc_migrate.core.constants import RULE_LANGUAGES

logger = logging.getLogger(__name__)


class AssetCategory(Enum):
    """Kinds of configuration assets the migration knows how to install."""

    AGENTS = "agents"
    COMMANDS = "commands"
    SKILLS = "skills"
    RULES = "rules"
    PLUGINS = "plugins"
    HOOKS = "hooks"
    CONTEXTS = "contexts"
    MCP_CONFIGS = "mcp-configs"

    @property
    def is_tree(self) -> bool:
        """True for markdown-tree categories, False for the singleton-file ones."""
        return self not in (AssetCategory.HOOKS, AssetCategory.MCP_CONFIGS)


ALL_CATEGORIES: tuple[AssetCategory, ...] = tuple(AssetCategory)
TREE_CATEGORIES: tuple[AssetCategory, ...] = tuple(c for c in AssetCategory if c.is_tree)


def parse_categories(tags: Iterable[str]) -> tuple[list[AssetCategory], list[str]]:
    """Validate category tags, preserving order and dropping duplicates.

    Returns:
        (selected categories, unknown tags)
    """
    selected: list[AssetCategory] = []
    unknown: list[str] = []
    for tag in tags:
        try:
            category = AssetCategory(tag.strip())
        except ValueError:
            logger.warning("Unknown component: %s", tag)
            unknown.append(tag)
            continue
        if category not in selected:
            selected.append(category)
    return selected, unknown


def parse_languages(tags: Iterable[str]) -> tuple[list[str], list[str]]:
    """Validate rule-language tags against RULE_LANGUAGES.

    Returns:
        (selected languages, unknown tags)
    """
    selected: list[str] = []
    unknown: list[str] = []
    for tag in tags:
        lang = tag.strip()
        if lang not in RULE_LANGUAGES:
            logger.warning("Unknown language: %s", tag)
            unknown.append(tag)
            continue
        if lang not in selected:
            selected.append(lang)
    return selected, unknown


__all__ = [
    "ALL_CATEGORIES",
    "AssetCategory",
    "TREE_CATEGORIES",
    "parse_categories",
    "parse_languages",
]
