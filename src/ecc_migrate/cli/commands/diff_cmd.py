"""Top-level ``ecc-migrate diff`` command.

Compares the markdown categories of a target's ``.claude/`` directory
with the source repository without changing anything.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ecc_migrate.core.config import find_config_file, load_migrate_config
from ecc_migrate.errors import MigrationError
from ecc_migrate.existing import detect_existing_config, preview_diff
from ecc_migrate.source import acquire_source

console = Console()


def diff(
    target: Optional[Path] = typer.Argument(None, help="Target project directory (default: current directory)"),
    repo: Optional[Path] = typer.Option(None, "--repo", "-r", help="Use a local repo instead of cloning"),
) -> None:
    """Show how the source assets compare with an existing configuration."""
    target_dir = (target or Path.cwd()).resolve()
    if not target_dir.is_dir():
        console.print(f"[red]Target directory does not exist:[/red] {escape(str(target_dir))}")
        raise typer.Exit(1)

    found = detect_existing_config(target_dir)
    if not found:
        console.print("[green]No existing Claude configuration found - a migration would be a clean install[/green]")
        raise typer.Exit(0)

    try:
        config = load_migrate_config(find_config_file(target_dir))
        with acquire_source(repo, config.repo_url) as checkout:
            entries = preview_diff(checkout.root, target_dir)
    except MigrationError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    table = Table(title="Configuration Diff Preview", show_lines=False)
    table.add_column("Category", style="cyan")
    table.add_column("Existing", justify="right")
    table.add_column("In source", justify="right")
    table.add_column("New", justify="right", style="green")
    for entry in entries:
        table.add_row(f"{entry.category}/", str(entry.existing), str(entry.incoming), str(entry.new))

    console.print("Existing configuration: " + ", ".join(found))
    console.print(table)
