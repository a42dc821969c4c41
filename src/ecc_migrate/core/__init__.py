"""Core types, constants and configuration exports."""

from .categories import (
    ALL_CATEGORIES,
    TREE_CATEGORIES,
    AssetCategory,
    parse_categories,
    parse_languages,
)
from .config import MigrateConfig, find_config_file, load_migrate_config
from .constants import KNOWN_LOCALES, RULE_LANGUAGES

__all__ = [
    "ALL_CATEGORIES",
    "AssetCategory",
    "KNOWN_LOCALES",
    "MigrateConfig",
    "RULE_LANGUAGES",
    "TREE_CATEGORIES",
    "find_config_file",
    "load_migrate_config",
    "parse_categories",
    "parse_languages",
]
