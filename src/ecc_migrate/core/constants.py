"""Shared path constants for the source and destination layouts."""

from __future__ import annotations

DEFAULT_REPO_URL = "https://github.com/affaan-m/everything-claude-code.git"
REPO_NAME = "everything-claude-code"

CLAUDE_DIR = ".claude"
CLAUDE_MD = "CLAUDE.md"
SETTINGS_FILE = "settings.json"
MCP_DEST_FILE = ".mcp.json"
BACKUP_PREFIX = ".claude-backup-"

# Source-relative locations
LOCALE_DOCS_DIR = "docs"
HOOKS_SOURCE_FILE = "hooks/hooks.json"
MCP_SOURCE_FILE = "mcp-configs/mcp-servers.json"
HOOK_SCRIPTS_DIR = "scripts/hooks"
HOOK_LIB_DIR = "scripts/lib"
COMMON_RULES_DIR = "common"

RULE_LANGUAGES: tuple[str, ...] = ("typescript", "python", "golang")
KNOWN_LOCALES: tuple[str, ...] = ("zh-CN", "zh-TW")

CONFIG_FILE_NAME = "ecc-migrate.yaml"
CONFIG_ENV_VAR = "ECC_MIGRATE_CONFIG"
REPO_URL_ENV_VAR = "ECC_MIGRATE_REPO_URL"

DEFAULT_FILTER_INTERPRETER = "python3"

__all__ = [
    "BACKUP_PREFIX",
    "CLAUDE_DIR",
    "CLAUDE_MD",
    "COMMON_RULES_DIR",
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "DEFAULT_FILTER_INTERPRETER",
    "DEFAULT_REPO_URL",
    "HOOKS_SOURCE_FILE",
    "HOOK_LIB_DIR",
    "HOOK_SCRIPTS_DIR",
    "KNOWN_LOCALES",
    "LOCALE_DOCS_DIR",
    "MCP_DEST_FILE",
    "MCP_SOURCE_FILE",
    "REPO_NAME",
    "REPO_URL_ENV_VAR",
    "RULE_LANGUAGES",
    "SETTINGS_FILE",
]
