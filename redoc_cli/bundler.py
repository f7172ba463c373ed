"""Render an API description once into a self-contained HTML file.

The bundler always pre-renders: the written page embeds the engine markup,
styles and serialized state, plus either the inlined runtime script or, when
``use_cdn`` is set, a CDN ``<script src>`` reference.

Example
-------
>>> from pathlib import Path
>>> from redoc_cli.bundler import bundle
>>> from redoc_cli.config import RenderOptions
>>> result = bundle("openapi.yaml", RenderOptions(), Path("redoc-static.html"))  # doctest: +SKIP
>>> result.size_kib  # doctest: +SKIP
412
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import math
import time
import typing as typ
from pathlib import Path

from redoc_cli.errors import BundleError, BundleWriteError, RenderError, SpecLoadError
from redoc_cli.page import render_page
from redoc_cli.spec_loader import load_and_bundle_spec

if typ.TYPE_CHECKING:
    from redoc_cli.config import RenderOptions

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class BundleResult:
    """Summary of a written bundle.

    Attributes
    ----------
    path : Path
        File the page was written to.
    size_kib : int
        Size of the UTF-8 encoded page, rounded up to whole KiB.
    elapsed_seconds : float
        Wall-clock time of the load, render and write cycle.
    """

    path: Path
    size_kib: int
    elapsed_seconds: float


def bundle(
    source: str,
    options: RenderOptions,
    output: Path,
    *,
    loader: cabc.Callable[[str], cabc.Mapping[str, typ.Any]] = load_and_bundle_spec,
    bundles_dir: Path | None = None,
) -> BundleResult:
    """Load ``source``, pre-render it and write the page to ``output``.

    Parameters
    ----------
    source : str
        Path or URL of the API description.
    options : RenderOptions
        Render options; ``server_side_render`` is forced to ``True``.
    output : Path
        Destination HTML file. Missing parent directories are created.
    loader : Callable[[str], Mapping], optional
        Spec loader; :func:`load_and_bundle_spec` by default.
    bundles_dir : Path, optional
        Directory holding ``redoc.standalone.js``.

    Returns
    -------
    BundleResult
        Output path, size and timing.

    Raises
    ------
    BundleError
        If the spec cannot be loaded or the page cannot be rendered.
    BundleWriteError
        If ``output`` cannot be written.
    """
    started = time.perf_counter()
    try:
        spec = loader(source)
        page = render_page(
            spec,
            source,
            options.with_overrides(server_side_render=True),
            bundles_dir=bundles_dir,
        )
    except (SpecLoadError, RenderError) as exc:
        msg = f"Failed to bundle '{source}': {exc}"
        raise BundleError(msg) from exc

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(page.encoded)
    except OSError as exc:
        msg = f"Cannot write bundle to '{output}': {exc.strerror or exc}"
        raise BundleWriteError(msg) from exc

    result = BundleResult(
        path=output,
        size_kib=math.ceil(len(page.encoded) / 1024),
        elapsed_seconds=time.perf_counter() - started,
    )
    logger.debug("Bundled %s into %s", source, output)
    return result


__all__ = ["BundleResult", "bundle"]
