"""Server-side documentation rendering engine.

The engine turns a bundled API description into the markup, stylesheet and
serialized state of a documentation page. It is invoked in three steps that
mirror the client runtime's own lifecycle:

>>> from redoc_cli.engine import create_render_store, render_markup, serialize_state
>>> store = create_render_store({"openapi": "3.0.0", "info": {"title": "Demo"}}, None, {})
>>> rendered = render_markup(store)
>>> "Demo" in rendered.markup
True
>>> serialize_state(store)["spec"]["url"] is None
True
"""

from .markup import render_markup
from .models import RenderedMarkup, RenderStore
from .store import create_render_store, serialize_state

__all__ = [
    "RenderStore",
    "RenderedMarkup",
    "create_render_store",
    "render_markup",
    "serialize_state",
]
