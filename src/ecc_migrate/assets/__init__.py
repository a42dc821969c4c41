"""Asset installation engine.

This subpackage holds the per-category logic: locale-aware path
resolution, merging tree copies, hook conversion and MCP descriptor
merging.
"""

from ecc_migrate.assets.copier import CopyReport, copy_tree, count_files
from ecc_migrate.assets.fallback import copy_rules, copy_with_fallback, merge_with_fallback
from ecc_migrate.assets.hooks import (
    HookMergeReport,
    convert_hooks,
    merge_hook_entries,
    migrate_hooks,
    parse_matcher,
)
from ecc_migrate.assets.mcp import McpMergeResult, merge_mcp_descriptor, migrate_mcp_configs
from ecc_migrate.assets.resolver import resolve_category_source

__all__ = [
    "CopyReport",
    "HookMergeReport",
    "McpMergeResult",
    "convert_hooks",
    "copy_rules",
    "copy_tree",
    "copy_with_fallback",
    "count_files",
    "merge_hook_entries",
    "merge_mcp_descriptor",
    "merge_with_fallback",
    "migrate_hooks",
    "migrate_mcp_configs",
    "parse_matcher",
    "resolve_category_source",
]
