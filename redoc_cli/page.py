"""Assemble complete documentation pages from a loaded specification.

A render cycle has two halves. :func:`build_page_content` decides the page
variant: :class:`PreRendered` runs the engine and captures its markup, styles,
serialized state and (unless a CDN is used) the runtime script source, while
:class:`ShellOnly` defers all work to the browser. :func:`assemble_page` then
fills the Jinja page template's ``redoc_head``, ``redoc_html`` and ``title``
slots for either variant. :func:`render_page` chains both halves and is what
the live server and the bundler call.

Example
-------
>>> from redoc_cli.config import RenderOptions
>>> from redoc_cli.page import render_page
>>> spec = {"openapi": "3.0.0", "info": {"title": "Demo"}, "paths": {}}
>>> page = render_page(spec, "openapi.yaml", RenderOptions())
>>> "Redoc.init" in page.html
True
"""

from __future__ import annotations

import dataclasses as dc
import json
import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, Template, TemplateError
from markupsafe import Markup

from redoc_cli._constants import (
    BUNDLES_DIR,
    CDN_BUNDLE_URL,
    DEFAULT_TEMPLATE_NAME,
    SPEC_ENDPOINT,
    STANDALONE_BUNDLE,
    TEMPLATES_DIR,
)
from redoc_cli.engine import create_render_store, render_markup, serialize_state
from redoc_cli.errors import RenderError
from redoc_cli.spec_loader import is_url

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from redoc_cli.config import RenderOptions

logger = logging.getLogger(__name__)

PRE_RENDERED = "pre-rendered"
SHELL = "shell"


@dc.dataclass(frozen=True, slots=True)
class PreRendered:
    """Engine output for a page that hydrates server-computed state."""

    markup: str
    styles: str
    state: dict[str, typ.Any]
    runtime_script: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ShellOnly:
    """A page that initializes itself from ``spec.json`` in the browser."""

    engine_options: cabc.Mapping[str, typ.Any]


PageContent = PreRendered | ShellOnly


@dc.dataclass(frozen=True, slots=True)
class RenderedPage:
    """A complete HTML document, immutable until the next render cycle.

    Attributes
    ----------
    html : str
        The document text.
    mode : str
        ``"pre-rendered"`` or ``"shell"``.
    encoded : bytes
        UTF-8 encoding of ``html``, computed once at construction.
    """

    html: str
    mode: str
    encoded: bytes = dc.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "encoded", self.html.encode("utf-8"))


def effective_spec_url(
    source_location: str | None, engine_options: cabc.Mapping[str, typ.Any]
) -> str | None:
    """Return the URL the client should treat as the spec's origin.

    ``engine_options["specUrl"]`` wins; otherwise the source location is used
    when it is a URL; local paths yield ``None``.

    Examples
    --------
    >>> effective_spec_url("https://example.com/api.yaml", {})
    'https://example.com/api.yaml'
    >>> effective_spec_url("api.yaml", {}) is None
    True
    >>> effective_spec_url("api.yaml", {"specUrl": "/api.yaml"})
    '/api.yaml'
    """
    override = engine_options.get("specUrl")
    if override:
        return str(override)
    if source_location and is_url(source_location):
        return source_location
    return None


def build_page_content(
    spec: cabc.Mapping[str, typ.Any],
    source_location: str | None,
    options: RenderOptions,
    *,
    bundles_dir: Path | None = None,
) -> PageContent:
    """Choose and compute the page variant described by ``options``.

    Raises
    ------
    RenderError
        If the engine fails or the runtime script cannot be read.
    """
    if not options.server_side_render:
        return ShellOnly(engine_options=dict(options.engine_options))

    logger.info("Prerendering docs")
    spec_url = effective_spec_url(source_location, options.engine_options)
    try:
        store = create_render_store(spec, spec_url, options.engine_options)
        rendered = render_markup(store)
        state = serialize_state(store)
    except Exception as exc:
        msg = f"Rendering engine failed: {exc}"
        raise RenderError(msg) from exc

    runtime_script = None
    if not options.use_cdn:
        runtime_script = read_runtime_script(bundles_dir)
    return PreRendered(
        markup=rendered.markup,
        styles=rendered.styles,
        state=state,
        runtime_script=runtime_script,
    )


def read_runtime_script(bundles_dir: Path | None = None) -> str:
    """Return the standalone runtime script source for inline embedding."""
    path = runtime_script_path(bundles_dir)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read runtime script '{path}': {exc.strerror or exc}"
        raise RenderError(msg) from exc
    except UnicodeDecodeError as exc:
        msg = f"Runtime script '{path}' is not valid UTF-8: {exc.reason}"
        raise RenderError(msg) from exc


def runtime_script_path(bundles_dir: Path | None = None) -> Path:
    """Return the location of ``redoc.standalone.js``."""
    return (bundles_dir or BUNDLES_DIR) / STANDALONE_BUNDLE


def assemble_page(content: PageContent, options: RenderOptions) -> RenderedPage:
    """Fill the page template slots for ``content``.

    The ``redoc_head`` and ``redoc_html`` slots are inserted verbatim; only
    ``title`` is escaped.

    Raises
    ------
    RenderError
        If the template cannot be read, compiled or rendered.
    """
    match content:
        case PreRendered():
            if content.runtime_script is None:
                head = f'<script src="{CDN_BUNDLE_URL}"></script>'
            else:
                head = f"<script>{content.runtime_script}</script>"
            head += content.styles
            body = _container_html(
                content.markup,
                f"const __redoc_state = {_script_json(content.state)};",
                "hydrate(__redoc_state, container)",
            )
            mode = PRE_RENDERED
        case ShellOnly():
            head = f'<script src="{STANDALONE_BUNDLE}"></script>'
            body = _container_html(
                "",
                "",
                f'init("{SPEC_ENDPOINT}", '
                f"{_script_json(dict(content.engine_options))}, container)",
            )
            mode = SHELL

    template = _load_template(options.template_path)
    try:
        html = template.render(
            redoc_head=Markup(head),
            redoc_html=Markup(body),
            title=options.page_title,
        )
    except TemplateError as exc:
        msg = f"Failed to render page template: {exc}"
        raise RenderError(msg) from exc
    return RenderedPage(html=html, mode=mode)


def render_page(
    spec: cabc.Mapping[str, typ.Any],
    source_location: str | None,
    options: RenderOptions,
    *,
    bundles_dir: Path | None = None,
) -> RenderedPage:
    """Run one render cycle for an already loaded ``spec``.

    Parameters
    ----------
    spec : Mapping[str, Any]
        Bundled API description.
    source_location : str or None
        Path or URL the spec was loaded from; URLs become the spec URL.
    options : RenderOptions
        Render mode, CDN usage, title, template and engine options.
    bundles_dir : Path, optional
        Directory holding ``redoc.standalone.js``; defaults to the packaged
        bundles.

    Returns
    -------
    RenderedPage
        The complete HTML document.

    Raises
    ------
    RenderError
        If the engine or the template fails.
    """
    content = build_page_content(
        spec, source_location, options, bundles_dir=bundles_dir
    )
    return assemble_page(content, options)


def _container_html(markup: str, state_script: str, call: str) -> str:
    return f"""
    <div id="redoc">{markup}</div>
    <script>
    {state_script}

    var container = document.getElementById('redoc');
    Redoc.{call};

    </script>"""


def _script_json(value: typ.Any) -> str:
    """Serialize ``value`` for embedding inside an inline ``<script>``."""
    text = json.dumps(value, ensure_ascii=False, default=str)
    return (
        text.replace("<", "\\u003c")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _load_template(template_path: Path | None) -> Template:
    if template_path is None:
        directory, name = TEMPLATES_DIR, DEFAULT_TEMPLATE_NAME
    else:
        directory, name = template_path.parent, template_path.name
    env = Environment(
        loader=FileSystemLoader(str(directory)),
        autoescape=True,
        cache_size=0,
    )
    try:
        return env.get_template(name)
    except TemplateError as exc:
        msg = f"Cannot load page template '{directory / name}': {exc}"
        raise RenderError(msg) from exc
    except OSError as exc:
        msg = f"Cannot read page template '{directory / name}': {exc}"
        raise RenderError(msg) from exc
    except UnicodeDecodeError as exc:
        msg = f"Page template '{directory / name}' is not valid UTF-8: {exc.reason}"
        raise RenderError(msg) from exc


__all__ = [
    "PRE_RENDERED",
    "SHELL",
    "PageContent",
    "PreRendered",
    "RenderedPage",
    "ShellOnly",
    "assemble_page",
    "build_page_content",
    "effective_spec_url",
    "read_runtime_script",
    "render_page",
    "runtime_script_path",
]
