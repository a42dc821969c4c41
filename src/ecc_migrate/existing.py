"""Inspection and backup of a target's existing Claude configuration."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ecc_migrate.assets.copier import count_files, relative_files
from ecc_migrate.core.categories import TREE_CATEGORIES
from ecc_migrate.core.constants import BACKUP_PREFIX, CLAUDE_DIR, CLAUDE_MD, MCP_DEST_FILE, SETTINGS_FILE

logger = logging.getLogger(__name__)

# (relative path, is_dir) markers that indicate an existing configuration
_CONFIG_MARKERS: tuple[tuple[str, bool], ...] = (
    (f"{CLAUDE_DIR}/", True),
    (CLAUDE_MD, False),
    (f"{CLAUDE_DIR}/agents/", True),
    (f"{CLAUDE_DIR}/commands/", True),
    (f"{CLAUDE_DIR}/skills/", True),
    (f"{CLAUDE_DIR}/rules/", True),
    (f"{CLAUDE_DIR}/{SETTINGS_FILE}", False),
    (MCP_DEST_FILE, False),
)


@dataclass(frozen=True)
class DiffEntry:
    """Comparison of one category between the target and the source."""

    category: str
    existing: int
    incoming: int
    new: int


def detect_existing_config(target_dir: Path) -> list[str]:
    """Return the configuration markers present in *target_dir* (empty if a clean install)."""
    found = []
    for rel, is_dir in _CONFIG_MARKERS:
        path = target_dir / rel.rstrip("/")
        if (is_dir and path.is_dir()) or (not is_dir and path.is_file()):
            found.append(rel)
    return found


def preview_diff(source_root: Path, target_dir: Path) -> list[DiffEntry]:
    """Compare markdown categories present both in the target's ``.claude/`` and the source."""
    claude_dir = target_dir / CLAUDE_DIR
    entries: list[DiffEntry] = []
    if not claude_dir.is_dir():
        return entries

    for category in TREE_CATEGORIES:
        existing = claude_dir / category.value
        incoming = source_root / category.value
        if not (existing.is_dir() and incoming.is_dir()):
            continue
        new = sum(1 for rel in relative_files(incoming) if not (existing / rel).is_file())
        entries.append(
            DiffEntry(
                category=category.value,
                existing=count_files(existing),
                incoming=count_files(incoming),
                new=new,
            )
        )
    return entries


def backup_path_for(target_dir: Path, now: datetime | None = None) -> Path:
    timestamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return target_dir / f"{BACKUP_PREFIX}{timestamp}"


def backup_claude_dir(target_dir: Path, *, dry_run: bool = False, now: datetime | None = None) -> Path | None:
    """Copy ``.claude/`` to a timestamped sibling directory.

    Returns:
        The backup path (planned path in dry-run mode), or None when there
        is no ``.claude/`` directory to back up.
    """
    claude_dir = target_dir / CLAUDE_DIR
    if not claude_dir.is_dir():
        return None

    backup_path = backup_path_for(target_dir, now)
    if dry_run:
        logger.info("[DRY RUN] Would backup %s -> %s", claude_dir, backup_path)
        return backup_path

    shutil.copytree(claude_dir, backup_path)
    logger.info("Backup created: %s", backup_path)
    return backup_path


__all__ = [
    "DiffEntry",
    "backup_claude_dir",
    "backup_path_for",
    "detect_existing_config",
    "preview_diff",
]
