"""Render a :class:`RenderStore` into documentation markup and styles."""

from __future__ import annotations

import typing as typ

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from redoc_cli._constants import TEMPLATES_DIR
from redoc_cli.config.helpers import get_dot_path

from .models import RenderedMarkup, RenderStore
from .renderer import DescriptionRenderer

DEFAULT_PRIMARY_COLOR = "#32329f"
DEFAULT_CODE_SAMPLE_STYLE = "monokai"

_ENV = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR / "engine")),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_markup(store: RenderStore) -> RenderedMarkup:
    """Render the documentation body and the stylesheet it depends on.

    Parameters
    ----------
    store : RenderStore
        Store produced by :func:`create_render_store`.

    Returns
    -------
    RenderedMarkup
        ``markup`` is the HTML placed inside the ``#redoc`` container;
        ``styles`` is a complete ``<style>`` element.
    """
    style_name = str(
        store.options.get("codeSampleStyle") or DEFAULT_CODE_SAMPLE_STYLE
    )
    renderer = DescriptionRenderer(style_name)
    context = {
        "store": store,
        "description_html": Markup(renderer.markdown(store.description)),
        "download_url": _download_url(store),
        "render_markdown": lambda text: Markup(renderer.markdown(text)),
        "render_inline": lambda text: Markup(renderer.markdown_inline(text)),
        "render_code": lambda code, lang: Markup(renderer.code_block(code, lang)),
    }
    markup = _ENV.get_template("docs.html.jinja").render(**context)
    css = _ENV.get_template("styles.css.jinja").render(
        primary_color=get_dot_path(
            store.options, "theme.colors.primary.main", DEFAULT_PRIMARY_COLOR
        ),
    )
    styles = f"<style data-styled>{css}\n{renderer.stylesheet}</style>"
    return RenderedMarkup(markup=markup, styles=styles)


def _download_url(store: RenderStore) -> str | None:
    hidden: typ.Any = store.options.get("hideDownloadButton", False)
    if hidden:
        return None
    return store.spec_url


__all__ = ["render_markup"]
