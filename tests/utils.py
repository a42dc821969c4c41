"""Shared helpers and fixture data for the ecc-migrate test suite."""

from __future__ import annotations

import json
from pathlib import Path

LEGACY_HOOKS = {
    "hooks": {
        "PreToolUse": [
            {
                "matcher": 'tool == "Bash"',
                "hooks": [
                    {
                        "type": "command",
                        "command": 'node "${CLAUDE_PLUGIN_ROOT}/scripts/hooks/check-bash.js"',
                    }
                ],
            },
            {
                "matcher": 'tool == "Edit" || tool == "Write"',
                "hooks": [{"type": "command", "command": "echo editing"}],
            },
        ],
        "PostToolUse": [
            {
                "matcher": 'tool == "Edit" && tool_input.file_path matches "\\\\.ts$"',
                "hooks": [{"type": "command", "command": "npx prettier --write .", "timeout": 30}],
            }
        ],
        "SessionStart": [
            {
                "matcher": "*",
                "hooks": [
                    {
                        "type": "command",
                        "command": "node -e \"process.stdin.on('data', () => {})\"",
                        "async": True,
                    }
                ],
            }
        ],
    }
}

MCP_SERVERS = {
    "mcpServers": {
        "github": {
            "command": "npx",
            "args": ["-y", "@modelcontextprotocol/server-github"],
            "env": {"GITHUB_PERSONAL_ACCESS_TOKEN": "YOUR_GITHUB_PAT_HERE"},
            "description": "GitHub operations - PRs, issues, repos",
        },
        "memory": {
            "command": "npx",
            "args": ["-y", "@modelcontextprotocol/server-memory"],
            "description": "Persistent memory across sessions",
        },
    }
}

SOURCE_FILES = {
    "agents/planner.md": "# Planner\n",
    "agents/reviewer.md": "# Reviewer\n",
    "commands/plan.md": "# /plan\n",
    "skills/tdd/SKILL.md": "# TDD skill\n",
    "rules/common/coding-style.md": "# Coding style\n",
    "rules/common/testing.md": "# Testing\n",
    "rules/typescript/coding-style.md": "# TypeScript style\n",
    "rules/python/coding-style.md": "# Python style\n",
    "rules/golang/coding-style.md": "# Go style\n",
    "plugins/README.md": "# Plugins\n",
    "contexts/dev.md": "# Dev context\n",
    "docs/zh-CN/agents/planner.md": "# 规划者\n",
    "docs/zh-CN/rules/coding-style.md": "# 编码风格\n",
    "scripts/hooks/check-bash.js": "// check bash\n",
    "scripts/lib/utils.js": "// utils\n",
}


def write_files(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def snapshot(root: Path) -> dict[str, bytes]:
    """Map every file under *root* to its bytes."""
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def build_source_repo(root: Path) -> Path:
    """Write a miniature source repository with every asset category under *root*."""
    write_files(root, SOURCE_FILES)
    write_files(
        root,
        {
            "hooks/hooks.json": json.dumps(LEGACY_HOOKS, indent=2),
            "mcp-configs/mcp-servers.json": json.dumps(MCP_SERVERS, indent=2),
        },
    )
    return root
