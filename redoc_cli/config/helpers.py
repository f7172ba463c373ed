"""Helpers for dot-path engine options shared by the loader and the CLI."""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ

from redoc_cli.errors import ConfigError

_INT_PATTERN = re.compile(r"-?\d+")
_FLOAT_PATTERN = re.compile(r"-?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?")


def coerce_option_value(raw: str) -> typ.Any:
    """Convert a command-line option string into a bool, number or string.

    ``"true"``/``"false"`` become booleans and numeric literals become
    ``int`` or ``float``; every other value is returned unchanged.

    Examples
    --------
    >>> coerce_option_value("true"), coerce_option_value("42")
    (True, 42)
    >>> coerce_option_value("1.5"), coerce_option_value("#32329f")
    (1.5, '#32329f')
    """
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_PATTERN.fullmatch(raw):
        return int(raw)
    if _FLOAT_PATTERN.fullmatch(raw):
        return float(raw)
    return raw


def set_dot_path(target: dict[str, typ.Any], path: str, value: typ.Any) -> None:
    """Assign ``value`` at ``path`` (``"a.b.c"``), creating mappings as needed.

    Intermediate scalars are replaced by mappings so later, deeper assignments
    win over earlier, shallower ones.
    """
    keys = path.split(".")
    if not keys or any(not key for key in keys):
        msg = f"Invalid option path '{path}'."
        raise ConfigError(msg)
    cursor = target
    for key in keys[:-1]:
        nested = cursor.get(key)
        if not isinstance(nested, dict):
            nested = {}
            cursor[key] = nested
        cursor = nested
    cursor[keys[-1]] = value


def get_dot_path(
    mapping: cabc.Mapping[str, typ.Any], path: str, default: typ.Any = None
) -> typ.Any:
    """Return the value stored at ``path`` or ``default`` when absent."""
    cursor: typ.Any = mapping
    for key in path.split("."):
        if not isinstance(cursor, cabc.Mapping) or key not in cursor:
            return default
        cursor = cursor[key]
    return cursor


def parse_option_assignments(
    assignments: cabc.Iterable[str],
) -> dict[str, typ.Any]:
    """Build a nested options mapping from ``path=value`` assignments.

    Parameters
    ----------
    assignments : Iterable[str]
        Strings such as ``"theme.colors.primary.main=#dd5522"``. A bare path
        without ``=`` is treated as a ``true`` flag.

    Returns
    -------
    dict[str, Any]
        Nested mapping with coerced leaf values.

    Raises
    ------
    ConfigError
        If an assignment has an empty path segment.

    Examples
    --------
    >>> parse_option_assignments(["a.b=1", "c", "d=x"])
    {'a': {'b': 1}, 'c': True, 'd': 'x'}
    """
    options: dict[str, typ.Any] = {}
    for assignment in assignments:
        path, sep, raw = assignment.partition("=")
        value = coerce_option_value(raw) if sep else True
        set_dot_path(options, path.strip(), value)
    return options


def merge_options(
    base: cabc.Mapping[str, typ.Any], override: cabc.Mapping[str, typ.Any]
) -> dict[str, typ.Any]:
    """Deep-merge ``override`` into a copy of ``base``."""
    merged: dict[str, typ.Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, cabc.Mapping) and isinstance(value, cabc.Mapping):
            merged[key] = merge_options(current, value)
        else:
            merged[key] = value
    return merged


__all__ = [
    "coerce_option_value",
    "get_dot_path",
    "merge_options",
    "parse_option_assignments",
    "set_dot_path",
]
