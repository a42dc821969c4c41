"""MCP server descriptor merging.

Servers from the source descriptor are added to the project's ``.mcp.json``
unless a server with the same name is already configured there. The
human-oriented ``description`` field is dropped from every added entry.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ecc_migrate.assets.jsonio import load_json_object, write_json_atomic
from ecc_migrate.core.constants import MCP_DEST_FILE, MCP_SOURCE_FILE
from ecc_migrate.errors import MalformedDocumentError

logger = logging.getLogger(__name__)

SERVERS_KEY = "mcpServers"
STRIPPED_FIELDS = ("description",)
_PLACEHOLDER_RE = re.compile(r"YOUR_[A-Z0-9_]*HERE")


@dataclass
class McpMergeResult:
    """Outcome of one descriptor merge (or planned merge in dry-run mode)."""

    added: int = 0
    skipped: int = 0
    created: bool = False
    dest_path: Path | None = None
    needs_keys: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    dry_run: bool = False

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def strip_description(config: dict[str, Any]) -> dict[str, Any]:
    """Shallow copy of *config* without the human-oriented fields."""
    return {key: value for key, value in config.items() if key not in STRIPPED_FIELDS}


def _has_placeholder(value: Any) -> bool:
    if isinstance(value, str):
        return bool(_PLACEHOLDER_RE.search(value))
    if isinstance(value, dict):
        return any(_has_placeholder(item) for item in value.values())
    if isinstance(value, list):
        return any(_has_placeholder(item) for item in value)
    return False


def _servers(document: dict[str, Any], path: Path) -> dict[str, Any]:
    servers = document.get(SERVERS_KEY)
    if servers is None:
        return {}
    if not isinstance(servers, dict):
        raise MalformedDocumentError(path, f"'{SERVERS_KEY}' must be an object")
    return servers


def merge_servers(
    existing: dict[str, Any],
    incoming: dict[str, Any],
) -> tuple[list[str], list[str]]:
    """Add *incoming* servers to *existing* in place, skipping names already present.

    Returns:
        (added names, skipped names)
    """
    added: list[str] = []
    skipped: list[str] = []
    for name, config in incoming.items():
        if name in existing:
            skipped.append(name)
            continue
        existing[name] = strip_description(config) if isinstance(config, dict) else config
        added.append(name)
    return added, skipped


def merge_mcp_descriptor(src: Path, dest: Path, *, dry_run: bool = False) -> McpMergeResult:
    """Merge the servers of *src* into the descriptor at *dest*.

    When *dest* does not exist a clean document holding only the stripped
    source servers is written. Nothing is written in dry-run mode.

    Raises:
        MalformedDocumentError: Either document is invalid JSON or has the wrong shape.
    """
    result = McpMergeResult(dest_path=dest, dry_run=dry_run)

    incoming = _servers(load_json_object(src), src)

    if dest.exists():
        document = load_json_object(dest, empty_ok=True)
        existing = _servers(document, dest)
        document[SERVERS_KEY] = existing
    else:
        document = {SERVERS_KEY: {}}
        existing = document[SERVERS_KEY]
        result.created = True

    added, skipped = merge_servers(existing, incoming)
    result.added = len(added)
    result.skipped = len(skipped)
    result.needs_keys = [name for name in added if _has_placeholder(existing[name])]
    if result.needs_keys:
        result.warn(
            "MCP servers contain placeholder API keys (YOUR_*_HERE): " + ", ".join(result.needs_keys)
        )

    if dry_run:
        logger.info("[DRY RUN] Would merge MCP servers into %s: %d added, %d skipped", dest, result.added, result.skipped)
        return result

    if not result.created and not added:
        logger.info("MCP servers already present in %s, nothing to add", dest)
        return result

    write_json_atomic(dest, document)
    logger.info("Merged MCP servers into %s: %d added, %d skipped", dest, result.added, result.skipped)
    return result


def migrate_mcp_configs(source_root: Path, target_dir: Path, *, dry_run: bool = False) -> McpMergeResult:
    """Install the source MCP descriptor as the project's ``.mcp.json``."""
    src = source_root / MCP_SOURCE_FILE
    dest = target_dir / MCP_DEST_FILE
    if not src.is_file():
        result = McpMergeResult(dest_path=dest, dry_run=dry_run)
        result.warn("No MCP configs found in source")
        return result
    return merge_mcp_descriptor(src, dest, dry_run=dry_run)


__all__ = [
    "McpMergeResult",
    "merge_mcp_descriptor",
    "merge_servers",
    "migrate_mcp_configs",
    "strip_description",
]
