"""Typed dataclasses describing render options and CLI settings."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from redoc_cli._constants import (
    DEBOUNCE_SECONDS,
    DEFAULT_ENCODINGS,
    DEFAULT_HOST,
    DEFAULT_OUTPUT,
    DEFAULT_PORT,
    DEFAULT_TITLE,
    POLL_INTERVAL_SECONDS,
)


@dc.dataclass(frozen=True, slots=True)
class RenderOptions:
    """Options controlling a single page render cycle.

    Attributes
    ----------
    server_side_render : bool
        Pre-render markup and embed the serialized state when ``True``;
        emit a client-side shell otherwise.
    use_cdn : bool
        Reference the runtime script from the CDN instead of inlining it.
        Only consulted for pre-rendered pages.
    page_title : str
        Text placed in the template's ``title`` slot.
    template_path : Path or None
        Custom Jinja page template; the packaged template is used when
        ``None``.
    engine_options : Mapping[str, Any]
        Opaque options handed to the rendering engine and the client
        runtime. Nested keys are addressed with dot paths on the CLI.
    """

    server_side_render: bool = False
    use_cdn: bool = False
    page_title: str = DEFAULT_TITLE
    template_path: Path | None = None
    engine_options: typ.Mapping[str, typ.Any] = dc.field(default_factory=dict)

    def with_overrides(self, **changes: typ.Any) -> RenderOptions:
        """Return a copy with ``changes`` applied."""
        return dc.replace(self, **changes)


@dc.dataclass(frozen=True, slots=True)
class ServeSettings:
    """Listener, watcher and compression settings for ``serve``."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    watch: bool = False
    debounce_seconds: float = DEBOUNCE_SECONDS
    poll_interval: float = POLL_INTERVAL_SECONDS
    encodings: tuple[str, ...] = DEFAULT_ENCODINGS


@dc.dataclass(frozen=True, slots=True)
class BundleSettings:
    """Output settings for ``bundle``."""

    output: Path = Path(DEFAULT_OUTPUT)


@dc.dataclass(frozen=True, slots=True)
class CliConfig:
    """Parsed contents of an optional ``redoc.yaml`` configuration file."""

    defaults: RenderOptions = dc.field(default_factory=RenderOptions)
    serve: ServeSettings = dc.field(default_factory=ServeSettings)
    bundle: BundleSettings = dc.field(default_factory=BundleSettings)


__all__ = ["BundleSettings", "CliConfig", "RenderOptions", "ServeSettings"]
