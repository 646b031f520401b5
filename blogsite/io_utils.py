"""Filesystem and JSON helpers for writing build output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

PathLike = Union[str, Path]


def ensure_dir(path: PathLike) -> Path:
    """Ensure that a directory exists and return the Path object."""

    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def write_text(path: PathLike, content: str, *, encoding: str = "utf-8") -> Path:
    """Write text to a file, creating parent directories as needed."""

    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding=encoding)
    return file_path


def stable_json_dumps(obj: object) -> str:
    """Serialize JSON with sorted keys and a trailing newline."""
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_json_stable(path: PathLike, data: Any) -> Path:
    return write_text(path, stable_json_dumps(data))


__all__ = ["ensure_dir", "stable_json_dumps", "write_json_stable", "write_text"]
