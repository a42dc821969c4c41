"""Tests for ecc_migrate.assets.hooks - legacy hook conversion and merging."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest

from ecc_migrate.assets.hooks import (
    convert_hooks,
    extract_inline_snippet,
    filter_command,
    hook_entry_key,
    merge_hook_entries,
    migrate_hooks,
    parse_matcher,
    render_filter_script,
)
from ecc_migrate.errors import MalformedDocumentError, MigrationError
from tests.utils import LEGACY_HOOKS, snapshot


class TestParseMatcher:
    """parse_matcher() turns the expression language into a tool-name regex."""

    @pytest.mark.parametrize("expression", [None, "", "*"])
    def test_wildcards(self, expression) -> None:
        parsed = parse_matcher(expression)
        assert parsed.tool_matcher == "*"
        assert not parsed.has_condition

    def test_plain_regex_passes_through(self) -> None:
        assert parse_matcher("Edit|Write").tool_matcher == "Edit|Write"

    def test_single_tool(self) -> None:
        parsed = parse_matcher('tool == "Bash"')
        assert parsed.tool_matcher == "Bash"
        assert parsed.field is None

    def test_or_of_two_tools(self) -> None:
        parsed = parse_matcher('tool == "Edit" || tool == "Write"')
        assert parsed.tool_matcher == "Edit|Write"
        assert not parsed.has_condition

    def test_tool_with_input_condition(self) -> None:
        parsed = parse_matcher('tool == "Edit" && tool_input.file_path matches "\\\\.ts$"')
        assert parsed.tool_matcher == "Edit"
        assert parsed.field == "file_path"
        assert parsed.pattern == "\\.ts$"
        assert parsed.has_condition

    def test_condition_without_tool_matches_all_tools(self) -> None:
        parsed = parse_matcher('tool_input.command matches "git push"')
        assert parsed.tool_matcher == "*"
        assert parsed.field == "command"
        assert parsed.pattern == "git push"

    def test_unparseable_clause_degrades_to_tool_name(self) -> None:
        parsed = parse_matcher('tool == "Bash" && tool_input.command startsWith "rm"')
        assert parsed.tool_matcher == "Bash"
        assert not parsed.has_condition


class TestInlineSnippet:
    def test_extracts_python_snippet(self) -> None:
        snippet = extract_inline_snippet('python3 -c "print(\\"hi\\")"')
        assert snippet == 'print("hi")'

    def test_other_commands_are_not_inline(self) -> None:
        assert extract_inline_snippet("npx prettier --write .") is None
        assert extract_inline_snippet('node -e "console.log(1)"') is None

    def test_chained_command_is_not_inline(self) -> None:
        """Only a command that is exactly one quoted argument is embedded."""
        assert extract_inline_snippet('python3 -c "import sys" && echo "ran-second"') is None

    def test_shell_expansion_is_not_inline(self) -> None:
        assert extract_inline_snippet("python3 -c \"print('$HOME')\"") is None
        assert extract_inline_snippet('python3 -c "print(`date`)"') is None

    def test_escaped_dollar_stays_inline(self) -> None:
        assert extract_inline_snippet('python3 -c "print(\'\\$HOME\')"') == "print('$HOME')"

    def test_chained_command_runs_as_subprocess(self) -> None:
        script = render_filter_script('python3 -c "import sys" && echo "ran-second"', "command", "git")
        assert "COMMAND = " in script
        assert "INLINE = " not in script


class TestConvertHooks:
    """convert_hooks() is pure and numbers filter scripts deterministically."""

    def test_converts_fixture_document(self) -> None:
        result = convert_hooks(LEGACY_HOOKS)

        pre = result.hooks["PreToolUse"]
        assert [entry["matcher"] for entry in pre] == ["Bash", "Edit|Write"]
        assert pre[0]["hooks"][0]["command"] == (
            'node "$CLAUDE_PROJECT_DIR/.claude/scripts/hooks/check-bash.js"'
        )
        assert pre[1]["hooks"] == [{"type": "command", "command": "echo editing"}]

    def test_condition_wrapped_in_filter_script(self) -> None:
        result = convert_hooks(LEGACY_HOOKS)

        post = result.hooks["PostToolUse"][0]
        assert post["matcher"] == "Edit"
        hook = post["hooks"][0]
        assert hook["command"] == filter_command("hook-filter-0.py")
        assert hook["timeout"] == 30
        assert [script.name for script in result.filter_scripts] == ["hook-filter-0.py"]
        assert result.next_index == 1
        assert "npx prettier --write ." in result.filter_scripts[0].content

    def test_async_kept_and_falsy_options_dropped(self) -> None:
        document = {
            "hooks": {
                "Stop": [
                    {"matcher": "*", "hooks": [{"type": "command", "command": "a", "async": False, "timeout": 0}]},
                ],
            }
        }
        result = convert_hooks(document)
        assert result.hooks["Stop"][0]["hooks"][0] == {"type": "command", "command": "a"}

        async_result = convert_hooks(LEGACY_HOOKS)
        assert async_result.hooks["SessionStart"][0]["hooks"][0]["async"] is True

    def test_stdin_consuming_command_not_wrapped(self) -> None:
        document = {
            "hooks": {
                "PreToolUse": [
                    {
                        "matcher": 'tool == "Bash" && tool_input.command matches "git"',
                        "hooks": [{"type": "command", "command": "python3 -c \"import sys; sys.stdin.read()\""}],
                    }
                ]
            }
        }
        result = convert_hooks(document)
        assert result.filter_scripts == []
        assert result.hooks["PreToolUse"][0]["matcher"] == "Bash"
        assert "sys.stdin" in result.hooks["PreToolUse"][0]["hooks"][0]["command"]

    def test_start_index_and_interpreter(self) -> None:
        result = convert_hooks(LEGACY_HOOKS, start_index=7, interpreter="python3.12")

        hook = result.hooks["PostToolUse"][0]["hooks"][0]
        assert hook["command"].startswith('python3.12 "')
        assert hook["command"].endswith('/scripts/hooks/hook-filter-7.py"')
        assert result.next_index == 8

    def test_is_deterministic(self) -> None:
        first = convert_hooks(LEGACY_HOOKS)
        second = convert_hooks(LEGACY_HOOKS)
        assert first.hooks == second.hooks
        assert first.filter_scripts == second.filter_scripts

    def test_empty_document(self) -> None:
        result = convert_hooks({})
        assert result.hooks == {}
        assert result.next_index == 0

    @pytest.mark.parametrize(
        "document",
        [
            {"hooks": []},
            {"hooks": {"PreToolUse": {}}},
            {"hooks": {"PreToolUse": ["not-an-object"]}},
            {"hooks": {"PreToolUse": [{"matcher": "*", "hooks": ["echo"]}]}},
            {"hooks": {"Stop": [{"matcher": 5, "hooks": []}]}},
            {"hooks": {"Stop": [{"matcher": "*", "hooks": [{"type": "command", "command": 7}]}]}},
            {"hooks": {"Stop": [{"matcher": "*", "hooks": {"command": "a"}}]}},
        ],
    )
    def test_bad_shapes_raise(self, document) -> None:
        with pytest.raises(ValueError):
            convert_hooks(document)


class TestFilterScript:
    """Generated filter scripts run as standalone Python programs."""

    def _run(self, tmp_path: Path, script: str, payload: object) -> subprocess.CompletedProcess:
        path = tmp_path / "hook-filter-0.py"
        path.write_text(script, encoding="utf-8")
        raw = payload if isinstance(payload, str) else json.dumps(payload)
        return subprocess.run(
            [sys.executable, str(path)],
            input=raw,
            capture_output=True,
            text=True,
            timeout=30,
        )

    def test_matching_payload_runs_command_and_echoes(self, tmp_path: Path) -> None:
        script = render_filter_script("echo ran-hook >&2", "file_path", r"\.ts$")
        payload = {"tool_input": {"file_path": "src/app.ts"}}

        completed = self._run(tmp_path, script, payload)

        assert completed.returncode == 0
        assert "ran-hook" in completed.stderr
        assert json.loads(completed.stdout) == payload

    def test_non_matching_payload_only_echoes(self, tmp_path: Path) -> None:
        script = render_filter_script("echo ran-hook >&2", "file_path", r"\.ts$")
        payload = {"tool_input": {"file_path": "README.md"}}

        completed = self._run(tmp_path, script, payload)

        assert completed.returncode == 0
        assert "ran-hook" not in completed.stderr
        assert json.loads(completed.stdout) == payload

    def test_command_exit_code_propagates(self, tmp_path: Path) -> None:
        script = render_filter_script("exit 3", "command", "rm -rf")
        payload = {"tool_input": {"command": "rm -rf /tmp/x"}}

        completed = self._run(tmp_path, script, payload)

        assert completed.returncode == 3
        assert completed.stdout == ""

    def test_inline_snippet_runs_in_process(self, tmp_path: Path) -> None:
        script = render_filter_script(
            "python3 -c \"import sys; sys.stderr.write(payload['tool_input']['file_path'])\"",
            "file_path",
            r"\.py$",
        )
        payload = {"tool_input": {"file_path": "main.py"}}

        completed = self._run(tmp_path, script, payload)

        assert "INLINE = " in script
        assert completed.returncode == 0
        assert completed.stderr == "main.py"
        assert json.loads(completed.stdout) == payload

    def test_invalid_json_is_passed_through(self, tmp_path: Path) -> None:
        script = render_filter_script("echo ran-hook >&2", "file_path", ".*")

        completed = self._run(tmp_path, script, "not json")

        assert completed.returncode == 0
        assert completed.stdout == "not json"


class TestMergeHookEntries:
    def test_dedup_key_uses_matcher_and_command_prefix(self) -> None:
        command = "x" * 120
        key = hook_entry_key({"matcher": "Bash", "hooks": [{"command": command}]})
        assert key == "Bash::" + "x" * 80

    def test_adds_new_and_skips_known(self) -> None:
        settings = {
            "model": "opus",
            "hooks": {"PreToolUse": [{"matcher": "Bash", "hooks": [{"type": "command", "command": "a"}]}]},
        }
        converted = {
            "PreToolUse": [
                {"matcher": "Bash", "hooks": [{"type": "command", "command": "a"}]},
                {"matcher": "Edit", "hooks": [{"type": "command", "command": "b"}]},
            ],
            "Stop": [{"matcher": "*", "hooks": [{"type": "command", "command": "c"}]}],
        }

        added, skipped = merge_hook_entries(settings, converted)

        assert (added, skipped) == (2, 1)
        assert settings["model"] == "opus"
        assert [e["matcher"] for e in settings["hooks"]["PreToolUse"]] == ["Bash", "Edit"]
        assert settings["hooks"]["Stop"][0]["matcher"] == "*"

    def test_same_key_under_other_event_is_added(self) -> None:
        entry = {"matcher": "Bash", "hooks": [{"type": "command", "command": "a"}]}
        settings = {"hooks": {"PreToolUse": [dict(entry)]}}

        added, skipped = merge_hook_entries(settings, {"PostToolUse": [dict(entry)]})

        assert (added, skipped) == (1, 0)

    def test_bad_existing_shape_raises(self) -> None:
        with pytest.raises(ValueError):
            merge_hook_entries({"hooks": []}, {"Stop": []})
        with pytest.raises(ValueError):
            merge_hook_entries({"hooks": {"Stop": {}}}, {"Stop": []})

    def test_non_string_existing_command_raises(self) -> None:
        settings = {"hooks": {"Stop": [{"matcher": "*", "hooks": [{"type": "command", "command": 7}]}]}}
        with pytest.raises(ValueError, match="command must be a string"):
            merge_hook_entries(settings, {"Stop": [{"matcher": "*", "hooks": [{"command": "a"}]}]})


class TestMigrateHooks:
    """migrate_hooks() merges into .claude/settings.json and installs scripts."""

    def test_fresh_install(self, source_root: Path, target_dir: Path) -> None:
        report = migrate_hooks(source_root, target_dir)

        settings = json.loads((target_dir / ".claude" / "settings.json").read_text())
        assert set(settings["hooks"]) == {"PreToolUse", "PostToolUse", "SessionStart"}
        assert report.added == 4
        assert report.skipped == 0
        assert report.filter_scripts == ["hook-filter-0.py"]
        scripts = target_dir / ".claude" / "scripts"
        assert (scripts / "hooks" / "hook-filter-0.py").is_file()
        assert (scripts / "hooks" / "check-bash.js").is_file()
        assert (scripts / "lib" / "utils.js").is_file()

    def test_existing_settings_preserved(self, source_root: Path, target_dir: Path) -> None:
        settings_path = target_dir / ".claude" / "settings.json"
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text(json.dumps({"permissions": {"allow": ["Bash(ls)"]}}))

        migrate_hooks(source_root, target_dir)

        settings = json.loads(settings_path.read_text())
        assert settings["permissions"] == {"allow": ["Bash(ls)"]}
        assert "PreToolUse" in settings["hooks"]

    def test_second_run_is_a_no_op(self, source_root: Path, target_dir: Path) -> None:
        migrate_hooks(source_root, target_dir)
        before = snapshot(target_dir)

        report = migrate_hooks(source_root, target_dir)

        assert report.added == 0
        assert report.skipped == 4
        assert snapshot(target_dir) == before

    def test_dry_run_counts_without_writing(self, source_root: Path, target_dir: Path) -> None:
        report = migrate_hooks(source_root, target_dir, dry_run=True)

        assert report.added == 4
        assert report.filter_scripts == ["hook-filter-0.py"]
        assert report.scripts.copied == 2
        assert list(target_dir.iterdir()) == []

    def test_missing_descriptor_warns(self, tmp_path: Path, target_dir: Path) -> None:
        (tmp_path / "src").mkdir()

        report = migrate_hooks(tmp_path / "src", target_dir)

        assert report.warnings == ["No hooks.json found in source"]
        assert not (target_dir / ".claude").exists()

    def test_malformed_descriptor_raises(self, source_root: Path, target_dir: Path) -> None:
        (source_root / "hooks" / "hooks.json").write_text("{not json")

        with pytest.raises(MalformedDocumentError):
            migrate_hooks(source_root, target_dir)
        assert not (target_dir / ".claude" / "settings.json").exists()

    def test_malformed_settings_left_untouched(self, source_root: Path, target_dir: Path) -> None:
        settings_path = target_dir / ".claude" / "settings.json"
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text('{"hooks": [1, 2]}')

        with pytest.raises(MalformedDocumentError):
            migrate_hooks(source_root, target_dir)
        assert settings_path.read_text() == '{"hooks": [1, 2]}'

    def test_wrongly_typed_descriptor_is_malformed(self, source_root: Path, target_dir: Path) -> None:
        (source_root / "hooks" / "hooks.json").write_text(
            json.dumps({"hooks": {"Stop": [{"matcher": 5, "hooks": [{"type": "command", "command": 7}]}]}})
        )

        with pytest.raises(MalformedDocumentError, match="matcher must be a string"):
            migrate_hooks(source_root, target_dir)

    def test_user_file_with_filter_name_is_not_overwritten(self, source_root: Path, target_dir: Path) -> None:
        user_script = target_dir / ".claude" / "scripts" / "hooks" / "hook-filter-0.py"
        user_script.parent.mkdir(parents=True)
        user_script.write_text("print('mine')\n")

        with pytest.raises(MigrationError, match="Refusing to overwrite"):
            migrate_hooks(source_root, target_dir)
        assert user_script.read_text() == "print('mine')\n"
        assert not (target_dir / ".claude" / "settings.json").exists()

    def test_source_script_with_filter_name_clashes(self, source_root: Path, target_dir: Path) -> None:
        (source_root / "scripts" / "hooks" / "hook-filter-0.py").write_text("# upstream\n")

        with pytest.raises(MigrationError, match="clashes"):
            migrate_hooks(source_root, target_dir)
        assert not (target_dir / ".claude").exists()

    def test_previous_generated_filter_is_refreshed(self, source_root: Path, target_dir: Path) -> None:
        migrate_hooks(source_root, target_dir)
        script = target_dir / ".claude" / "scripts" / "hooks" / "hook-filter-0.py"
        generated = script.read_text(encoding="utf-8")
        script.write_text(generated + "# stale\n", encoding="utf-8")

        migrate_hooks(source_root, target_dir)

        assert script.read_text(encoding="utf-8") == generated
