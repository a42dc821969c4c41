from __future__ import annotations

from pathlib import Path

import pytest

from tests.utils import build_source_repo


@pytest.fixture()
def source_root(tmp_path: Path) -> Path:
    """A miniature source repository with every asset category."""
    return build_source_repo(tmp_path / "everything-claude-code")


@pytest.fixture()
def target_dir(tmp_path: Path) -> Path:
    target = tmp_path / "project"
    target.mkdir()
    return target
