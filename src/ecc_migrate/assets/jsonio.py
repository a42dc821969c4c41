"""JSON document loading and atomic writing for the structured categories."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from ecc_migrate.errors import MalformedDocumentError


def load_json_object(path: Path, *, empty_ok: bool = False) -> dict[str, Any]:
    """Read *path* and return its top-level JSON object.

    Args:
        path: Document to read.
        empty_ok: Treat a blank file as an empty object instead of an error.

    Raises:
        MalformedDocumentError: Invalid JSON or UTF-8, or a top level that is not an object.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedDocumentError(path, "not valid UTF-8") from exc
    if empty_ok and not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedDocumentError(path, f"invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise MalformedDocumentError(path, "expected a JSON object at the top level")
    return data


def dump_json(data: dict[str, Any]) -> str:
    """Serialize *data* the way the written documents are formatted (2-space indent, trailing newline)."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Write *data* to *path* through a temp file and ``os.replace``."""
    text = dump_json(data)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(str(tmp_path), str(path))
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink()
        raise


__all__ = ["dump_json", "load_json_object", "write_json_atomic"]
