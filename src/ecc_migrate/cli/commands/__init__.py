"""CLI command modules for ecc-migrate."""

from . import diff_cmd, migrate_cmd

__all__ = ["diff_cmd", "migrate_cmd"]
