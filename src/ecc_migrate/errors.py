"""Exception types raised by the migration engine."""

from __future__ import annotations

from pathlib import Path


class MigrationError(RuntimeError):
    """Base class for errors that fail a single migration step."""


class MalformedDocumentError(MigrationError):
    """Raised when a structured (JSON) document cannot be parsed or has the wrong shape."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed document {path}: {reason}")


class SourceRepoError(MigrationError):
    """Raised when the source repository cannot be located or cloned."""


class MigrateConfigError(MigrationError):
    """Raised when the migration config file cannot be parsed or validated."""


__all__ = [
    "MalformedDocumentError",
    "MigrateConfigError",
    "MigrationError",
    "SourceRepoError",
]
