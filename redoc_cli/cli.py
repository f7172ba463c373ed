"""Cyclopts CLI entrypoint for serving and bundling API documentation.

The ``redoc-cli`` console script defined here exposes two commands.
``serve`` renders an OpenAPI / Swagger description and serves it on a local
HTTP port, optionally watching the file and re-rendering on change. ``bundle``
writes a zero-dependency HTML page. Engine options are passed with dot
notation, for example ``--options.theme.colors.primary.main=#dd5522``.
Defaults may come from a ``redoc.yaml`` file and ``REDOC_*`` environment
variables.

Examples
--------
Serve a spec with server-side rendering and live reload:

>>> from redoc_cli.cli import main
>>> main(["serve", "openapi.yaml", "--ssr", "--watch"])  # doctest: +SKIP

Bundle a spec into a standalone page:

>>> main(["bundle", "openapi.yaml", "-o", "docs/index.html"])  # doctest: +SKIP
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from . import bundler
from .config import (
    CliConfig,
    RenderOptions,
    load_cli_config,
    merge_options,
    parse_option_assignments,
)
from .errors import RedocCliError
from .server import LiveServer

logger = logging.getLogger(__name__)

OPTIONS_PREFIX = "--options."
VERBOSE_FLAGS = frozenset({"-v", "--verbose"})

app = App(
    name="redoc-cli",
    help="Render OpenAPI descriptions into ReDoc documentation pages.",
    config=cyclopts.config.Env("REDOC_", command=False),  # type: ignore[unknown-argument]
)


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _render_options(
    cli_config: CliConfig,
    *,
    ssr: bool | None = None,
    cdn: bool | None = None,
    title: str | None = None,
    template: Path | None = None,
    option: list[str] | None = None,
) -> RenderOptions:
    """Layer command-line values over the configuration file defaults."""
    defaults = cli_config.defaults
    engine_options = merge_options(
        defaults.engine_options, parse_option_assignments(option or [])
    )
    return defaults.with_overrides(
        server_side_render=defaults.server_side_render if ssr is None else ssr,
        use_cdn=defaults.use_cdn if cdn is None else cdn,
        page_title=title or defaults.page_title,
        template_path=template or defaults.template_path,
        engine_options=engine_options,
    )


@app.command(help="Start a server that renders and serves the docs.")
def serve(
    spec: typ.Annotated[str, Parameter(help="Path or URL to your spec")],
    *,
    ssr: typ.Annotated[
        bool | None,
        Parameter(name=("--ssr", "-s"), help="Enable server-side rendering"),
    ] = None,
    port: typ.Annotated[
        int | None, Parameter(name=("--port", "-p"), help="Port to listen on")
    ] = None,
    host: typ.Annotated[
        str | None, Parameter(help="Interface to bind the server to")
    ] = None,
    watch: typ.Annotated[
        bool | None,
        Parameter(name=("--watch", "-w"), help="Re-render when the spec changes"),
    ] = None,
    template: typ.Annotated[
        Path | None,
        Parameter(name=("--template", "-t"), help="Path to a Jinja page template"),
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to a redoc.yaml configuration file")
    ] = None,
    option: typ.Annotated[
        list[str] | None,
        Parameter(help="Engine option as dot.path=value (repeatable)"),
    ] = None,
) -> None:
    """Serve the documentation page for ``spec`` until interrupted.

    Parameters
    ----------
    spec : str
        Path or URL of the OpenAPI / Swagger description.
    ssr : bool or None, optional
        Pre-render the page on the server; defaults to the config value.
    port : int or None, optional
        Listening port, ``8080`` unless configured otherwise.
    host : str or None, optional
        Listening interface, ``127.0.0.1`` unless configured otherwise.
    watch : bool or None, optional
        Watch a local spec file and re-render on change.
    template : Path or None, optional
        Custom page template.
    config : Path or None, optional
        Configuration file; ``redoc.yaml`` is used when present.
    option : list[str] or None, optional
        Engine options in ``dot.path=value`` form.

    Raises
    ------
    SpecLoadError, RenderError
        If the initial render fails.
    ListenError
        If the port cannot be bound.
    """
    cli_config = load_cli_config(config)
    options = _render_options(cli_config, ssr=ssr, template=template, option=option)
    settings = dc.replace(
        cli_config.serve,
        port=cli_config.serve.port if port is None else port,
        host=host or cli_config.serve.host,
        watch=cli_config.serve.watch if watch is None else watch,
    )
    server = LiveServer(spec, options, settings)
    server.start()
    print(f"Server started: {server.url}")
    server.serve_forever()


@app.command(help="Bundle a spec into a zero-dependency HTML file.")
def bundle(
    spec: typ.Annotated[str, Parameter(help="Path or URL to your spec")],
    *,
    output: typ.Annotated[
        Path | None, Parameter(name=("--output", "-o"), help="Output file")
    ] = None,
    title: typ.Annotated[str | None, Parameter(help="Page title")] = None,
    cdn: typ.Annotated[
        bool | None,
        Parameter(help="Reference the runtime script from a CDN instead of inlining it"),
    ] = None,
    template: typ.Annotated[
        Path | None,
        Parameter(name=("--template", "-t"), help="Path to a Jinja page template"),
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to a redoc.yaml configuration file")
    ] = None,
    option: typ.Annotated[
        list[str] | None,
        Parameter(help="Engine option as dot.path=value (repeatable)"),
    ] = None,
) -> None:
    """Write a pre-rendered page for ``spec`` and report its size.

    Raises
    ------
    BundleError
        If loading or rendering fails.
    BundleWriteError
        If the output file cannot be written.
    """
    cli_config = load_cli_config(config)
    options = _render_options(
        cli_config, cdn=cdn, title=title, template=template, option=option
    )
    result = bundler.bundle(spec, options, output or cli_config.bundle.output)
    print(
        f"bundled successfully in: {_format_path(result.path)} "
        f"({result.size_kib} KiB) [{result.elapsed_seconds:.3f}s]"
    )


def expand_option_flags(tokens: cabc.Sequence[str]) -> list[str]:
    """Rewrite ``--options.<path>[=value]`` tokens into ``--option=path=value``.

    A dotted flag without ``=`` takes the following token as its value unless
    that token is another flag, in which case it is a ``true`` switch.

    Examples
    --------
    >>> expand_option_flags(["serve", "api.yaml", "--options.a.b=1"])
    ['serve', 'api.yaml', '--option=a.b=1']
    >>> expand_option_flags(["--options.nativeScrollbars", "--ssr"])
    ['--option=nativeScrollbars', '--ssr']
    >>> expand_option_flags(["--options.theme.spacing.unit", "4"])
    ['--option=theme.spacing.unit=4']
    """
    expanded: list[str] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if not token.startswith(OPTIONS_PREFIX):
            expanded.append(token)
            continue
        assignment = token[len(OPTIONS_PREFIX) :]
        if "=" not in assignment and index < len(tokens):
            following = tokens[index]
            if not following.startswith("-"):
                assignment = f"{assignment}={following}"
                index += 1
        expanded.append(f"--option={assignment}")
    return expanded


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: cabc.Sequence[str] | None = None) -> None:
    """Invoke the Cyclopts application that powers the ``redoc-cli`` command.

    Parameters
    ----------
    argv : Sequence[str] or None, optional
        Arguments without the program name; ``sys.argv[1:]`` when ``None``.

    Raises
    ------
    SystemExit
        With status ``1`` when a command fails with a :class:`RedocCliError`;
        the error is logged first.

    Examples
    --------
    >>> main(["bundle", "openapi.yaml"])  # doctest: +SKIP
    """
    raw = list(sys.argv[1:] if argv is None else argv)
    verbose = any(token in VERBOSE_FLAGS for token in raw)
    tokens = expand_option_flags([token for token in raw if token not in VERBOSE_FLAGS])
    _configure_logging(verbose)
    try:
        app(tokens)
    except RedocCliError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
