"""
Path helpers for the virtual filesystem.

All functions are pure and work on plain strings. Paths are absolute,
'/'-separated and normalized: no empty segments, no '.' or '..', no
trailing slash except for the root itself.
"""

import re
from typing import List, Tuple

# Letters, digits, hyphen, underscore and dot only
FILENAME_PATTERN = re.compile(r"[A-Za-z0-9._-]+")


def split_segments(path: str) -> List[str]:
    return [part for part in path.split("/") if part]


def normalize_segments(parts: List[str]) -> List[str]:
    """
    Apply '.' and '..' to a list of segments.

    '..' pops one segment and is clamped at root.
    """
    resolved: List[str] = []
    for part in parts:
        if part == "..":
            if resolved:
                resolved.pop()
        elif part != ".":
            resolved.append(part)
    return resolved


def normalize_path(path: str) -> str:
    return "/" + "/".join(normalize_segments(split_segments(path)))


def resolve_path(base: str, target: str) -> str:
    """
    Resolve a target path against a base directory.

    Args:
        base: Absolute path of the directory to resolve from
        target: Absolute ("/etc") or relative ("../tmp") path

    Returns:
        Normalized absolute path
    """
    if target.startswith("/"):
        return normalize_path(target)
    return "/" + "/".join(normalize_segments(split_segments(base) + split_segments(target)))


def get_depth(path: str) -> int:
    """Number of segments below root (root = 0)"""
    return len(split_segments(path))


def join_path(parent: str, name: str) -> str:
    if parent == "/":
        return f"/{name}"
    return f"{parent}/{name}"


def split_path(path: str) -> Tuple[str, str]:
    """Split an absolute path into (parent path, last segment)"""
    parts = split_segments(path)
    if not parts:
        return "/", ""
    return "/" + "/".join(parts[:-1]), parts[-1]


def validate_filename(name: str) -> bool:
    """Check a single path segment against the allowed character set"""
    if not name or name in (".", ".."):
        return False
    return FILENAME_PATTERN.fullmatch(name) is not None


def is_within(path: str, ancestor: str) -> bool:
    """True when path equals ancestor or lies below it"""
    if ancestor == "/":
        return True
    return path == ancestor or path.startswith(ancestor + "/")
