"""
Field path helpers.
"""

from __future__ import annotations

PATH_SEPARATOR = "."


def join_path(prefix: str, field_name: str) -> str:
    """
    Append a field name to a dotted path.

    Examples:
        ("", "email") -> email
        ("authData", "email") -> authData.email
    """
    return f"{prefix}{PATH_SEPARATOR}{field_name}" if prefix else field_name


def path_depth(path: str) -> int:
    """Number of segments in a dotted path."""
    return len(path.split(PATH_SEPARATOR)) if path else 0
