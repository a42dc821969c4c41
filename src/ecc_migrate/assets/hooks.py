"""Conversion of legacy plugin hooks into project settings hooks.

Legacy hook descriptors use an expression language for matchers, e.g.
``tool == "Edit" || tool == "Write"`` or
``tool == "Edit" && tool_input.file_path matches "\\.ts$"``. Project
settings only accept a plain tool-name regex, so matchers are rewritten
and any ``tool_input`` condition is moved into a generated filter script
that inspects the event payload on stdin before running the hook.

Conversion is a pure function of (legacy document, first filter index);
files are only written by :func:`migrate_hooks` once everything parsed and
merged in memory.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ecc_migrate.assets.copier import CopyReport, copy_tree
from ecc_migrate.assets.jsonio import load_json_object, write_json_atomic
from ecc_migrate.core.constants import (
    CLAUDE_DIR,
    DEFAULT_FILTER_INTERPRETER,
    HOOK_LIB_DIR,
    HOOK_SCRIPTS_DIR,
    HOOKS_SOURCE_FILE,
    SETTINGS_FILE,
)
from ecc_migrate.errors import MalformedDocumentError, MigrationError

logger = logging.getLogger(__name__)

PLUGIN_ROOT_PLACEHOLDER = "${CLAUDE_PLUGIN_ROOT}"
INSTALLED_ROOT = "$CLAUDE_PROJECT_DIR/.claude"
FILTER_SCRIPT_PREFIX = "hook-filter-"
DEDUP_PREFIX_LENGTH = 80

# Checked in this order: two-name union, then field condition, then bare tool name.
_OR_TOOLS_RE = re.compile(r'tool\s*==\s*"(\w+)"\s*\|\|\s*tool\s*==\s*"(\w+)"')
_TOOL_RE = re.compile(r'tool\s*==\s*"(\w+)"')
_INPUT_CONDITION_RE = re.compile(r'tool_input\.(\w+)\s*matches\s*"((?:[^"\\]|\\.)*)"')

_INLINE_PYTHON_RE = re.compile(r'^python3?\s+-c\s+"((?:[^"\\]|\\.)*)"$', re.DOTALL)
_SHELL_DQ_ESCAPE_RE = re.compile(r'\\(["\\$`])')
# A $ or backtick not preceded by an odd number of backslashes is expanded by the shell.
_SHELL_EXPANSION_RE = re.compile(r'(?<!\\)(?:\\\\)*[$`]')
GENERATED_MARKER = "# Generated by ecc-migrate."
_STDIN_MARKERS = ("process.stdin", "sys.stdin")


@dataclass(frozen=True)
class ParsedMatcher:
    """A legacy matcher split into a tool matcher and an optional payload condition."""

    tool_matcher: str
    field: str | None = None
    pattern: str | None = None

    @property
    def has_condition(self) -> bool:
        return bool(self.field and self.pattern)


@dataclass(frozen=True)
class FilterScript:
    """A generated filter script, not yet written to disk."""

    name: str
    content: str


@dataclass
class ConversionResult:
    """Output of :func:`convert_hooks`."""

    hooks: dict[str, list[dict[str, Any]]]
    next_index: int
    filter_scripts: list[FilterScript] = field(default_factory=list)


@dataclass
class HookMergeReport:
    """Outcome of merging converted hooks into the settings document."""

    added: int = 0
    skipped: int = 0
    filter_scripts: list[str] = field(default_factory=list)
    scripts: CopyReport = field(default_factory=lambda: CopyReport(label="scripts/"))
    settings_path: Path | None = None
    warnings: list[str] = field(default_factory=list)
    dry_run: bool = False

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


# ---------------------------------------------------------------------------
# Matcher parsing
# ---------------------------------------------------------------------------

def parse_matcher(expression: str | None) -> ParsedMatcher:
    """Parse a legacy matcher expression.

    Unsupported clauses degrade to best-effort tool-name extraction.
    """
    if not expression or expression == "*":
        return ParsedMatcher("*")
    if "tool ==" not in expression and "tool_input" not in expression:
        return ParsedMatcher(expression)

    or_match = _OR_TOOLS_RE.search(expression)
    if or_match:
        return ParsedMatcher(f"{or_match.group(1)}|{or_match.group(2)}")

    tool_match = _TOOL_RE.search(expression)
    tool_name = tool_match.group(1) if tool_match else "*"

    condition = _INPUT_CONDITION_RE.search(expression)
    if condition:
        pattern = condition.group(2).replace("\\\\", "\\")
        return ParsedMatcher(tool_name, field=condition.group(1), pattern=pattern)

    return ParsedMatcher(tool_name)


# ---------------------------------------------------------------------------
# Filter scripts
# ---------------------------------------------------------------------------

def filter_script_name(index: int) -> str:
    return f"{FILTER_SCRIPT_PREFIX}{index}.py"


def filter_command(name: str, interpreter: str = DEFAULT_FILTER_INTERPRETER) -> str:
    """Settings command that runs the installed filter script *name*."""
    return f'{interpreter} "{INSTALLED_ROOT}/{HOOK_SCRIPTS_DIR}/{name}"'


def consumes_stdin(command: str) -> bool:
    return any(marker in command for marker in _STDIN_MARKERS)


def extract_inline_snippet(command: str) -> str | None:
    """Return the code of a ``python -c "..."`` command, or None if it is anything else.

    Commands with more than the single quoted argument, or whose argument
    relies on shell expansion, return None and run as a subprocess.
    """
    match = _INLINE_PYTHON_RE.match(command.strip())
    if not match:
        return None
    body = match.group(1)
    if _SHELL_EXPANSION_RE.search(body):
        return None
    return _SHELL_DQ_ESCAPE_RE.sub(r"\1", body)


def render_filter_script(command: str, field_name: str, pattern: str) -> str:
    """Render a filter script that runs *command* only when the payload matches.

    The script always echoes the payload it received unless the wrapped
    logic exits first.
    """
    snippet = extract_inline_snippet(command)
    lines = [
        "#!/usr/bin/env python3",
        f"{GENERATED_MARKER} Do not edit; rerun the migration instead.",
        f"# Filters: tool_input.{field_name} matches /{pattern}/",
        "import json",
        "import re",
        "import subprocess",
        "import sys",
        "",
        f"FIELD = {field_name!r}",
        f"PATTERN = {pattern!r}",
    ]
    if snippet is not None:
        lines.append(f"INLINE = {snippet!r}")
    else:
        lines.append(f"COMMAND = {command!r}")
    lines += [
        "",
        "",
        "def main():",
        "    raw = sys.stdin.read()",
        "    try:",
        "        payload = json.loads(raw)",
        "    except ValueError:",
        "        payload = {}",
        "    tool_input = payload.get('tool_input') if isinstance(payload, dict) else None",
        "    value = tool_input.get(FIELD) if isinstance(tool_input, dict) else None",
        "    if re.search(PATTERN, value if isinstance(value, str) else ''):",
    ]
    if snippet is not None:
        lines.append("        exec(compile(INLINE, '<hook>', 'exec'), {'__name__': '__main__', 'payload': payload})")
    else:
        lines += [
            "        completed = subprocess.run(COMMAND, shell=True, input=raw, text=True)",
            "        if completed.returncode != 0:",
            "            return completed.returncode",
        ]
    lines += [
        "    sys.stdout.write(raw)",
        "    return 0",
        "",
        "",
        "if __name__ == '__main__':",
        "    sys.exit(main())",
        "",
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

def _check_entry(entry: dict[str, Any], where: str) -> None:
    """Raise ValueError unless *entry* has a string matcher and string hook commands."""
    matcher = entry.get("matcher")
    if matcher is not None and not isinstance(matcher, str):
        raise ValueError(f"{where} matcher must be a string")
    hooks = entry.get("hooks")
    if hooks is None:
        return
    if not isinstance(hooks, list):
        raise ValueError(f"{where} 'hooks' must be a list")
    for hook in hooks:
        if not isinstance(hook, dict):
            raise ValueError(f"{where} hook definitions must be objects")
        command = hook.get("command")
        if command is not None and not isinstance(command, str):
            raise ValueError(f"{where} hook command must be a string")


def _convert_hook(
    hook: dict[str, Any],
    parsed: ParsedMatcher,
    index: int,
    interpreter: str,
) -> tuple[dict[str, Any], FilterScript | None]:
    converted: dict[str, Any] = {"type": hook.get("type")}
    command = (hook.get("command") or "").replace(PLUGIN_ROOT_PLACEHOLDER, INSTALLED_ROOT)

    script = None
    if parsed.has_condition and not consumes_stdin(command):
        name = filter_script_name(index)
        script = FilterScript(name, render_filter_script(command, parsed.field, parsed.pattern))
        command = filter_command(name, interpreter)

    converted["command"] = command
    if hook.get("async"):
        converted["async"] = hook["async"]
    if hook.get("timeout"):
        converted["timeout"] = hook["timeout"]
    return converted, script


def convert_hooks(
    document: dict[str, Any],
    start_index: int = 0,
    interpreter: str = DEFAULT_FILTER_INTERPRETER,
) -> ConversionResult:
    """Convert a legacy hooks document into settings-format hook entries.

    Args:
        document: Parsed legacy descriptor (``{"hooks": {event: [entry, ...]}}``).
        start_index: Number of the first generated filter script.
        interpreter: Interpreter placed in front of filter script commands.

    Returns:
        ConversionResult with the converted hooks, the next free filter
        index and the filter scripts to write.

    Raises:
        ValueError: If the document does not have the legacy shape.
    """
    events = document.get("hooks") or {}
    if not isinstance(events, dict):
        raise ValueError("'hooks' must be an object mapping event names to entry lists")

    index = start_index
    result: dict[str, list[dict[str, Any]]] = {}
    scripts: list[FilterScript] = []

    for event, entries in events.items():
        if not isinstance(entries, list):
            raise ValueError(f"hooks.{event} must be a list")
        converted_entries = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise ValueError(f"hooks.{event} entries must be objects")
            _check_entry(entry, f"hooks.{event}")
            parsed = parse_matcher(entry.get("matcher"))
            converted_entry: dict[str, Any] = {"matcher": parsed.tool_matcher, "hooks": []}
            for hook in entry.get("hooks") or []:
                converted, script = _convert_hook(hook, parsed, index, interpreter)
                if script is not None:
                    scripts.append(script)
                    index += 1
                converted_entry["hooks"].append(converted)
            converted_entries.append(converted_entry)
        result[event] = converted_entries

    return ConversionResult(hooks=result, next_index=index, filter_scripts=scripts)


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def hook_entry_key(entry: dict[str, Any]) -> str:
    """Dedup key: matcher plus the start of the first hook's command."""
    hooks = entry.get("hooks") or []
    first_command = ""
    if hooks and isinstance(hooks[0], dict):
        first_command = hooks[0].get("command") or ""
    return f"{entry.get('matcher') or ''}::{first_command[:DEDUP_PREFIX_LENGTH]}"


def merge_hook_entries(
    settings: dict[str, Any],
    converted: dict[str, list[dict[str, Any]]],
) -> tuple[int, int]:
    """Merge *converted* hooks into *settings* in place.

    Entries whose key already exists under the same event are skipped.
    Other top-level settings are left untouched.

    Returns:
        (added, skipped)
    """
    hooks_section = settings.setdefault("hooks", {})
    if not isinstance(hooks_section, dict):
        raise ValueError("existing 'hooks' must be an object")

    added = skipped = 0
    for event, entries in converted.items():
        existing = hooks_section.setdefault(event, [])
        if not isinstance(existing, list):
            raise ValueError(f"existing hooks.{event} must be a list")
        seen = set()
        for entry in existing:
            if isinstance(entry, dict):
                _check_entry(entry, f"existing hooks.{event}")
                seen.add(hook_entry_key(entry))
        for entry in entries:
            key = hook_entry_key(entry)
            if key in seen:
                skipped += 1
                continue
            existing.append(entry)
            seen.add(key)
            added += 1
    return added, skipped


def is_generated_filter(path: Path) -> bool:
    """True if *path* holds a filter script written by a previous migration."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            head = f.read(512)
    except (OSError, UnicodeDecodeError):
        return False
    return GENERATED_MARKER in head


def _check_filter_slot(dest: Path, source_script: Path) -> None:
    """Refuse to write a filter script over a file it did not generate."""
    if source_script.exists():
        raise MigrationError(f"Source hook script {source_script} clashes with generated filter {dest.name}")
    if dest.exists() and not is_generated_filter(dest):
        raise MigrationError(f"Refusing to overwrite {dest}: not a generated filter script")


def migrate_hooks(
    source_root: Path,
    target_dir: Path,
    *,
    dry_run: bool = False,
    start_index: int = 0,
    interpreter: str = DEFAULT_FILTER_INTERPRETER,
) -> HookMergeReport:
    """Convert the source hooks descriptor and merge it into ``.claude/settings.json``.

    Hook scripts and their ``lib`` dependencies are copied alongside so the
    converted commands resolve. Nothing is written in dry-run mode; counts
    still reflect the merge that would happen.

    Raises:
        MalformedDocumentError: The source descriptor or existing settings are invalid.
    """
    claude_dir = target_dir / CLAUDE_DIR
    settings_path = claude_dir / SETTINGS_FILE
    report = HookMergeReport(settings_path=settings_path, dry_run=dry_run)

    src = source_root / HOOKS_SOURCE_FILE
    if not src.is_file():
        report.warn("No hooks.json found in source")
        return report

    legacy = load_json_object(src)
    try:
        conversion = convert_hooks(legacy, start_index=start_index, interpreter=interpreter)
    except ValueError as exc:
        raise MalformedDocumentError(src, str(exc)) from exc

    settings = load_json_object(settings_path, empty_ok=True) if settings_path.exists() else {}
    try:
        report.added, report.skipped = merge_hook_entries(settings, conversion.hooks)
    except ValueError as exc:
        raise MalformedDocumentError(settings_path, str(exc)) from exc
    report.filter_scripts = [script.name for script in conversion.filter_scripts]

    scripts_dest = claude_dir / HOOK_SCRIPTS_DIR
    for script in conversion.filter_scripts:
        _check_filter_slot(scripts_dest / script.name, source_root / HOOK_SCRIPTS_DIR / script.name)

    for rel_dir in (HOOK_SCRIPTS_DIR, HOOK_LIB_DIR):
        scripts_src = source_root / rel_dir
        if scripts_src.is_dir():
            report.scripts.add(
                copy_tree(scripts_src, claude_dir / rel_dir, dry_run=dry_run, label=f"{rel_dir}/")
            )

    if dry_run:
        logger.info(
            "[DRY RUN] Would merge hooks into %s: %d added, %d skipped",
            settings_path,
            report.added,
            report.skipped,
        )
        return report

    for script in conversion.filter_scripts:
        scripts_dest.mkdir(parents=True, exist_ok=True)
        script_path = scripts_dest / script.name
        script_path.write_text(script.content, encoding="utf-8")
        script_path.chmod(0o755)

    if report.added or not settings_path.exists():
        write_json_atomic(settings_path, settings)
    logger.info(
        "Converted hooks to settings format: %d added, %d skipped", report.added, report.skipped
    )
    return report


__all__ = [
    "ConversionResult",
    "FilterScript",
    "HookMergeReport",
    "ParsedMatcher",
    "convert_hooks",
    "extract_inline_snippet",
    "filter_command",
    "hook_entry_key",
    "merge_hook_entries",
    "migrate_hooks",
    "parse_matcher",
    "render_filter_script",
]
