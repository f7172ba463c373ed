"""Render options and CLI configuration for redoc_cli.

This subpackage defines the immutable :class:`RenderOptions` consumed by the
page renderer, the ``serve``/``bundle`` settings dataclasses, the optional
``redoc.yaml`` loader and the dot-path helpers that turn
``--options.theme.colors.primary.main=#dd5522`` style flags into nested
engine options.

Examples
--------
>>> from redoc_cli.config import RenderOptions, parse_option_assignments
>>> options = RenderOptions(engine_options=parse_option_assignments(["a.b=1"]))
>>> options.engine_options
{'a': {'b': 1}}
"""

from .helpers import (
    coerce_option_value,
    get_dot_path,
    merge_options,
    parse_option_assignments,
    set_dot_path,
)
from .loader import load_cli_config
from .models import BundleSettings, CliConfig, RenderOptions, ServeSettings

__all__ = [
    "BundleSettings",
    "CliConfig",
    "RenderOptions",
    "ServeSettings",
    "coerce_option_value",
    "get_dot_path",
    "load_cli_config",
    "merge_options",
    "parse_option_assignments",
    "set_dot_path",
]
