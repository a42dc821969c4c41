"""Locating the source repository: a local checkout or a shallow clone."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ecc_migrate.core.constants import REPO_NAME
from ecc_migrate.errors import SourceRepoError

logger = logging.getLogger(__name__)

CLONE_TIMEOUT_SECONDS = 300


@dataclass(frozen=True)
class SourceCheckout:
    """Resolved source tree for one run."""

    root: Path
    cloned: bool
    origin: str


def _clone(repo_url: str, parent: Path) -> Path:
    dest = parent / REPO_NAME
    try:
        completed = subprocess.run(
            ["git", "clone", "--depth", "1", repo_url, str(dest)],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=CLONE_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as exc:
        raise SourceRepoError("'git' is not installed. Please install it first.") from exc
    except subprocess.TimeoutExpired as exc:
        raise SourceRepoError(f"git clone timed out: {repo_url}") from exc

    if completed.returncode != 0:
        detail = (completed.stderr or completed.stdout or "").strip()
        raise SourceRepoError(f"Failed to clone repository {repo_url}: {detail}")
    return dest


@contextmanager
def acquire_source(local_repo: Path | None, repo_url: str) -> Iterator[SourceCheckout]:
    """Yield the source tree, cloning *repo_url* when no *local_repo* is given.

    A cloned tree lives in a temporary directory that is removed on exit;
    a local checkout is never touched.

    Raises:
        SourceRepoError: The local repo is missing or the clone failed.
    """
    if local_repo is not None:
        root = local_repo.expanduser()
        if not root.is_dir():
            raise SourceRepoError(f"Local repo not found: {local_repo}")
        root = root.resolve()
        logger.info("Using local repo: %s", root)
        yield SourceCheckout(root=root, cloned=False, origin=str(root))
        return

    parent = Path(tempfile.mkdtemp(prefix="ecc-migrate-"))
    try:
        logger.info("Cloning %s into %s", repo_url, parent)
        root = _clone(repo_url, parent)
        yield SourceCheckout(root=root, cloned=True, origin=repo_url)
    finally:
        shutil.rmtree(parent, ignore_errors=True)


__all__ = ["SourceCheckout", "acquire_source"]
