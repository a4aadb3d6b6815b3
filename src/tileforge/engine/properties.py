"""Lenient readers for string-valued entity and state properties.

Authored property bags and variables are plain strings. These helpers
turn them into numbers, returning the documented fallback instead of
raising when a value is missing or malformed.
"""

from __future__ import annotations

from collections.abc import Mapping


def parse_int(value: str | None, default: int = 0) -> int:
    """Parse an integer string, or return ``default``.

    Example:
        >>> parse_int("12")
        12
        >>> parse_int("twelve", 3)
        3
    """
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def get_int(properties: Mapping[str, str], key: str, default: int = 0) -> int:
    """Read an integer property from a bag, or return ``default``."""
    return parse_int(properties.get(key), default)


def get_str(properties: Mapping[str, str], key: str) -> str | None:
    """Read a string property, treating empty strings as missing."""
    value = properties.get(key)
    return value if value else None


__all__ = [
    "get_int",
    "get_str",
    "parse_int",
]
