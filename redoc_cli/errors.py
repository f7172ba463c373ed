"""Exception hierarchy shared by the redoc_cli pipeline.

Every failure the CLI knows how to report derives from
:class:`RedocCliError`, so the command entry point can log a single message
and exit non-zero without catching unrelated programming errors.
"""

from __future__ import annotations


class RedocCliError(RuntimeError):
    """Base class for errors surfaced to the command line."""


class SpecLoadError(RedocCliError):
    """Raised when an API description cannot be fetched, parsed or bundled."""


class RenderError(RedocCliError):
    """Raised when the page template or the rendering engine fails."""


class BundleError(RedocCliError):
    """Raised when a static bundle cannot be produced."""


class BundleWriteError(BundleError):
    """Raised when the bundle output path is not writable."""


class ListenError(RedocCliError):
    """Raised when the live server cannot bind its listening socket."""


class ConfigError(RedocCliError, ValueError):
    """Raised when the CLI configuration file or an option value is invalid."""


__all__ = [
    "BundleError",
    "BundleWriteError",
    "ConfigError",
    "ListenError",
    "RedocCliError",
    "RenderError",
    "SpecLoadError",
]
