"""Migration configuration helpers.

Defaults for a migration can be kept in a small YAML file so repeated runs
against the same project do not need the full set of command-line flags.
The file is optional; every key in it is optional too.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from ruamel.yaml import YAML

from ecc_migrate.core.constants import (
    CLAUDE_DIR,
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAME,
    DEFAULT_FILTER_INTERPRETER,
    DEFAULT_REPO_URL,
    REPO_URL_ENV_VAR,
)
from ecc_migrate.errors import MigrateConfigError

logger = logging.getLogger(__name__)


@dataclass
class MigrateConfig:
    """File-level defaults for a migration run.

    Attributes:
        repo_url: Repository cloned when no local repo is given.
        locale: Locale code for localized markdown ("" disables localization).
        components: Category tags to install (empty means all).
        languages: Rule languages to install (empty means all).
        backup: True/False to force or skip the backup, None to ask.
        filter_interpreter: Interpreter used to run generated hook filter scripts.
        source_path: Config file the values were read from, if any.
    """

    repo_url: str = DEFAULT_REPO_URL
    locale: str = ""
    components: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    backup: bool | None = None
    filter_interpreter: str = DEFAULT_FILTER_INTERPRETER
    source_path: Path | None = None


def find_config_file(target_dir: Path | None, explicit: Path | None = None) -> Path | None:
    """Locate the config file: explicit path, then $ECC_MIGRATE_CONFIG, then the target's .claude/."""
    if explicit is not None:
        if not explicit.is_file():
            raise MigrateConfigError(f"Config file not found: {explicit}")
        return explicit

    if env_path := os.environ.get(CONFIG_ENV_VAR):
        candidate = Path(env_path).expanduser()
        if not candidate.is_file():
            raise MigrateConfigError(f"{CONFIG_ENV_VAR} points to a missing file: {candidate}")
        return candidate

    if target_dir is not None:
        candidate = target_dir / CLAUDE_DIR / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def _string_list(data: dict, key: str, config_file: Path) -> list[str]:
    value = data.get(key, [])
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise MigrateConfigError(f"Invalid '{key}' in {config_file}: expected a list of strings")
    return list(value)


def _optional_string(data: dict, key: str, default: str, config_file: Path) -> str:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise MigrateConfigError(f"Invalid '{key}' in {config_file}: expected a string")
    return value


def load_migrate_config(config_file: Path | None) -> MigrateConfig:
    """Load migration defaults from *config_file* (None yields built-in defaults)."""
    repo_url = os.environ.get(REPO_URL_ENV_VAR) or DEFAULT_REPO_URL

    if config_file is None:
        return MigrateConfig(repo_url=repo_url)

    yaml = YAML()
    yaml.preserve_quotes = True

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.load(f) or {}
    except Exception as exc:
        logger.error("Failed to load config: %s", exc)
        raise MigrateConfigError(f"Invalid YAML in {config_file}: {exc}") from exc

    if not isinstance(data, dict):
        raise MigrateConfigError(f"Invalid config in {config_file}: expected a mapping at the top level")

    backup = data.get("backup")
    if backup is not None and not isinstance(backup, bool):
        raise MigrateConfigError(f"Invalid 'backup' in {config_file}: expected true or false")

    config = MigrateConfig(
        repo_url=_optional_string(data, "repo_url", repo_url, config_file),
        locale=_optional_string(data, "locale", "", config_file),
        components=_string_list(data, "components", config_file),
        languages=_string_list(data, "languages", config_file),
        backup=backup,
        filter_interpreter=_optional_string(
            data, "filter_interpreter", DEFAULT_FILTER_INTERPRETER, config_file
        ),
        source_path=config_file,
    )
    logger.info("Loaded migration config from %s", config_file)
    return config


__all__ = [
    "MigrateConfig",
    "find_config_file",
    "load_migrate_config",
]
