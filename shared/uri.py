"""
Namespace path rules.

Paths are absolute, '/'-separated strings. The canonical form collapses
repeated separators and drops a trailing separator; '.' and '..' segments and
control characters are rejected rather than resolved.
"""
from __future__ import annotations

from typing import List

from shared.exceptions import InvalidPathError

SEPARATOR = "/"
ROOT = SEPARATOR


def split_path(path: str) -> List[str]:
    return [part for part in path.split(SEPARATOR) if part]


def canonicalize(path: str) -> str:
    """
    Validate a namespace path and return its canonical form.

    Raises:
        InvalidPathError: path is empty, relative, or contains a forbidden component
    """
    if path is None or path == "":
        raise InvalidPathError(str(path), "path is empty")
    if not path.startswith(SEPARATOR):
        raise InvalidPathError(path, "path is not absolute")
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in path):
        raise InvalidPathError(path, "path contains control characters")

    parts = split_path(path)
    for part in parts:
        if part in (".", ".."):
            raise InvalidPathError(path, f"path component '{part}' is not allowed")
    return SEPARATOR + SEPARATOR.join(parts)


def get_name(path: str) -> str:
    """Final segment of a path; the root has an empty name"""
    parts = split_path(path)
    return parts[-1] if parts else ""


def get_parent(path: str) -> str | None:
    parts = split_path(path)
    if not parts:
        return None
    return SEPARATOR + SEPARATOR.join(parts[:-1])


def is_root(path: str) -> bool:
    return not split_path(path)
