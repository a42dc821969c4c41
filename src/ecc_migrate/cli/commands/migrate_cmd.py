"""CLI command for migrating configuration assets into a target project.

Usage:
    ecc-migrate migrate                          # Project scope, current directory, all components
    ecc-migrate migrate -s project -l typescript .
    ecc-migrate migrate -s user -l python -l golang
    ecc-migrate migrate --dry-run ~/my-project   # Preview without changes
    ecc-migrate migrate -r ./everything-claude-code .
    ecc-migrate migrate -L zh-CN -l typescript .

Existing files are never overwritten: markdown assets are merged file by
file, hooks are merged into ``.claude/settings.json`` and MCP servers into
``.mcp.json``, skipping entries that are already configured.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ecc_migrate.cli.ui import print_summary
from ecc_migrate.core.categories import ALL_CATEGORIES, AssetCategory, parse_categories, parse_languages
from ecc_migrate.core.config import MigrateConfig, find_config_file, load_migrate_config
from ecc_migrate.core.constants import KNOWN_LOCALES, RULE_LANGUAGES
from ecc_migrate.errors import MigrationError
from ecc_migrate.existing import backup_claude_dir, detect_existing_config, preview_diff
from ecc_migrate.migrate import MigrationPlan, MigrationSummary, execute_migration
from ecc_migrate.source import acquire_source

console = Console()

SCOPES = ("user", "project")


def _resolve_target(scope: str, target: Path | None) -> Path:
    if scope == "user":
        return Path.home()
    if target is not None:
        if not target.is_dir():
            console.print(f"[red]Target directory does not exist:[/red] {escape(str(target))}")
            raise typer.Exit(1)
        return target.resolve()
    return Path.cwd()


def _select_components(requested: list[str], config: MigrateConfig) -> list[AssetCategory]:
    tags = requested or config.components
    if not tags:
        return list(ALL_CATEGORIES)
    selected, unknown = parse_categories(tags)
    for tag in unknown:
        console.print(f"[yellow]Unknown component ignored:[/yellow] {escape(tag)}")
    return selected


def _select_languages(requested: list[str], config: MigrateConfig, components: list[AssetCategory]) -> list[str]:
    if AssetCategory.RULES not in components:
        return []
    tags = requested or config.languages
    if not tags:
        return list(RULE_LANGUAGES)
    selected, unknown = parse_languages(tags)
    for tag in unknown:
        console.print(f"[yellow]Unknown language ignored:[/yellow] {escape(tag)}")
    return selected


def _print_existing(target_dir: Path, source_root: Path) -> None:
    found = detect_existing_config(target_dir)
    console.print(f"[yellow]Existing Claude configuration detected in {escape(str(target_dir))}:[/yellow]")
    for item in found:
        console.print(f"  [yellow]-[/yellow] {item}")
    entries = preview_diff(source_root, target_dir)
    if entries:
        console.print()
        for entry in entries:
            console.print(
                f"  [bold]{entry.category}/[/bold]: {entry.existing} existing, "
                f"{entry.incoming} in source, {entry.new} new"
            )
    console.print()


def _should_backup(backup: Optional[bool], config: MigrateConfig, force: bool, dry_run: bool) -> bool:
    if backup is not None:
        return backup
    if config.backup is not None:
        return config.backup
    if force or dry_run:
        return True
    return typer.confirm("Back up existing .claude/ before migration?", default=True)


def _print_next_steps(summary: MigrationSummary, components: list[AssetCategory]) -> None:
    console.print("\n[bold cyan]Next Steps:[/bold cyan]\n")
    step = 1
    if AssetCategory.HOOKS in components:
        console.print(f"  {step}. Review hooks in [bold].claude/settings.json[/bold]")
        console.print("     Hooks use the settings matcher format (simple regex on tool name)")
        console.print("     Some hooks reference $CLAUDE_PROJECT_DIR - verify paths are correct")
        step += 1
    if AssetCategory.MCP_CONFIGS in components:
        console.print(f"  {step}. Edit [bold].mcp.json[/bold] - replace YOUR_*_HERE with actual API keys")
        console.print("     Disable unused MCP servers to preserve context window")
        step += 1
    console.print(f"  {step}. Verify installation: claude --version")
    console.print()


def migrate(
    target: Optional[Path] = typer.Argument(None, help="Target project directory (default: current directory)"),
    scope: str = typer.Option("project", "--scope", "-s", help="Installation scope: user or project"),
    lang: Optional[List[str]] = typer.Option(None, "--lang", "-l", help="Language rules to install (repeatable)"),
    component: Optional[List[str]] = typer.Option(None, "--component", "-c", help="Components to install (repeatable)"),
    repo: Optional[Path] = typer.Option(None, "--repo", "-r", help="Use a local repo instead of cloning"),
    locale: Optional[str] = typer.Option(None, "--locale", "-L", help="Use localized docs (e.g. zh-CN, zh-TW)"),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Show what would be done without changes"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip all confirmation prompts"),
    backup: Optional[bool] = typer.Option(None, "--backup/--no-backup", "-b", help="Force or skip the .claude/ backup"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Migration config file (YAML)"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Migrate agents, commands, skills, rules, hooks and MCP configs into a project.

    Markdown content is merged file by file (existing files are kept),
    hooks are converted to the settings format and merged into
    .claude/settings.json, and MCP servers are merged into .mcp.json.
    Running the command again with the same inputs changes nothing.

    Examples:
        ecc-migrate migrate --dry-run -s project ~/my-project
        ecc-migrate migrate -r ./everything-claude-code -L zh-CN .
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if scope not in SCOPES:
        console.print(f"[red]Invalid scope:[/red] {escape(scope)} (expected user or project)")
        raise typer.Exit(1)

    if dry_run:
        console.print("[yellow]DRY RUN MODE - no changes will be made[/yellow]\n")

    target_dir = _resolve_target(scope, target)

    try:
        config = load_migrate_config(find_config_file(target_dir, config_path))
    except MigrationError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    components = _select_components(component or [], config)
    languages = _select_languages(lang or [], config, components)
    active_locale = locale if locale is not None else config.locale
    if active_locale and active_locale not in KNOWN_LOCALES:
        console.print(
            f"[yellow]Locale {escape(active_locale)} is not a known locale; "
            "original-language files will be used where no translation exists[/yellow]"
        )

    if not components:
        console.print("[yellow]No valid components selected. Nothing to do.[/yellow]")
        raise typer.Exit(0)

    console.print("[bold]Step 1:[/bold] Source repository")
    try:
        with acquire_source(repo, config.repo_url) as checkout:
            console.print(f"  Using source: {escape(checkout.origin)}")

            console.print("[bold]Step 2:[/bold] Installation target")
            console.print(f"  Scope: {scope}")
            console.print(f"  Target: {escape(str(target_dir))}")

            console.print("[bold]Step 3:[/bold] Existing configuration check")
            if detect_existing_config(target_dir):
                _print_existing(target_dir, checkout.root)
                if not force and not dry_run:
                    if not typer.confirm("Continue with migration? (existing files are kept, new ones merged in)"):
                        raise typer.Abort()
                if _should_backup(backup, config, force, dry_run):
                    backup_dir = backup_claude_dir(target_dir, dry_run=dry_run)
                    if backup_dir is not None:
                        verb = "Would back up" if dry_run else "Backup created"
                        console.print(f"  [green]{verb}:[/green] {escape(str(backup_dir))}")
                else:
                    console.print("  [yellow]Skipping backup[/yellow]")
            else:
                console.print("  [green]No existing Claude configuration found - clean install[/green]")

            console.print("[bold]Step 4:[/bold] Component selection")
            console.print(f"  Components: {' '.join(c.value for c in components)}")
            if languages:
                console.print(f"  Languages: {' '.join(languages)}")
            if active_locale:
                console.print(f"  Locale: {escape(active_locale)} (with original-language fallback)")

            if not force and not dry_run:
                if not typer.confirm("Proceed with migration?", default=True):
                    raise typer.Abort()

            console.print("[bold]Step 5:[/bold] Migration")
            plan = MigrationPlan(
                source_root=checkout.root,
                target_dir=target_dir,
                categories=components,
                languages=languages,
                locale=active_locale,
                dry_run=dry_run,
                filter_interpreter=config.filter_interpreter,
            )
            summary = execute_migration(plan)
    except MigrationError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    console.print()
    print_summary(summary, console)

    if dry_run:
        console.print("\n[yellow]This was a dry run. No changes were made.[/yellow]")
    elif summary.has_failures:
        failed = ", ".join(o.category.value for o in summary.failed)
        console.print(f"\n[red]Migration finished with failures:[/red] {failed}")
    else:
        console.print("\n[green]Configuration migrated successfully.[/green]")
        _print_next_steps(summary, components)

    if summary.has_failures:
        raise typer.Exit(1)
