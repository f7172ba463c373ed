"""Render OpenAPI descriptions into ReDoc documentation pages.

This package exposes the CLI entry points used by the ``redoc-cli`` console
script to serve a live, auto-reloading documentation page or to bundle a
standalone HTML file.

Exports
-------
- ``app``: Cyclopts application with the ``serve`` and ``bundle`` commands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from redoc_cli import main
>>> main(["bundle", "openapi.yaml"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
