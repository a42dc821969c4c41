"""
ecc-migrate - install agents, commands, skills, rules, hooks and MCP
server configs from an Everything Claude Code checkout into a project.

Usage:
    ecc-migrate migrate [TARGET_DIR] [OPTIONS]
    ecc-migrate diff [TARGET_DIR] --repo PATH
"""

__version__ = "1.2.0"

import typer

from ecc_migrate.cli.commands import diff_cmd, migrate_cmd

app = typer.Typer(
    name="ecc-migrate",
    help="Migrate Claude Code configuration assets into a project without overwriting existing files",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"ecc-migrate v{__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Migrate Claude Code configuration assets into a project."""


app.command(name="migrate")(migrate_cmd.migrate)
app.command(name="diff")(diff_cmd.diff)


def main():
    app()


if __name__ == "__main__":
    main()
