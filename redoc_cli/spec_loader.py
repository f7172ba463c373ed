"""Load OpenAPI / Swagger descriptions from disk or HTTP and bundle their refs.

The loader is the first step of every render cycle. It accepts a local path or
an ``http(s)://`` URL, parses JSON or YAML with ``ruamel.yaml`` and inlines
external ``$ref`` targets (``common.yaml#/components/schemas/Pet``) so the
result is a single self-contained mapping that can be serialized to
``spec.json`` or embedded in a pre-rendered page. References that point into
the root document (``#/...``) are left untouched. A recursive external schema
is inlined once; its self-references become internal refs to the place it was
inlined at.

Example
-------
>>> from redoc_cli.spec_loader import load_and_bundle_spec
>>> spec = load_and_bundle_spec("petstore.yaml")  # doctest: +SKIP
>>> spec["info"]["title"]  # doctest: +SKIP
'Swagger Petstore'
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import re
import typing as typ
from io import StringIO
from pathlib import Path
from urllib.parse import unquote, urljoin

import requests
from requests.adapters import HTTPAdapter
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from urllib3.util.retry import Retry

from redoc_cli.errors import SpecLoadError

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(r"^(https?:)//", re.MULTILINE)
FETCH_TIMEOUT_SECONDS = 30


def is_url(value: str) -> bool:
    """Return ``True`` when ``value`` looks like an HTTP(S) URL.

    Examples
    --------
    >>> is_url("https://example.com/openapi.yaml"), is_url("openapi.yaml")
    (True, False)
    """
    return bool(_URL_PATTERN.search(value))


def load_and_bundle_spec(
    source: str | Path, *, session: requests.Session | None = None
) -> dict[str, typ.Any]:
    """Load the API description at ``source`` and inline its external refs.

    Parameters
    ----------
    source : str or Path
        Local filesystem path or HTTP(S) URL of the root document.
    session : requests.Session, optional
        Session used for URL fetches; a retrying session is created (and
        closed afterwards) when omitted.

    Returns
    -------
    dict[str, Any]
        Plain JSON-compatible mapping describing the API.

    Raises
    ------
    SpecLoadError
        If a document cannot be read, decoded or parsed, a ref target is
        missing, or the root is not an OpenAPI / Swagger document.
    """
    owns_session = session is None
    http = session or _build_session()
    try:
        bundler = _RefBundler(http)
        document = bundler.bundle(str(source))
    finally:
        if owns_session:
            http.close()

    if not isinstance(document, dict):
        msg = f"'{source}' does not contain a mapping at the top level."
        raise SpecLoadError(msg)
    if "openapi" not in document and "swagger" not in document:
        msg = f"'{source}' is not an OpenAPI or Swagger document."
        raise SpecLoadError(msg)
    return document


def _build_session() -> requests.Session:
    """Return a session that retries transient failures on idempotent verbs."""
    session = requests.Session()
    retry = Retry(
        total=5,
        read=5,
        connect=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class _RefBundler:
    """Resolve external ``$ref`` pointers across files and URLs."""

    def __init__(self, session: requests.Session) -> None:
        self._session = session
        self._documents: dict[str, typ.Any] = {}
        self._yaml = YAML(typ="safe")
        self._yaml.version = (1, 2)

    def bundle(self, location: str) -> typ.Any:
        root = self._document(location)
        return self._inline(root, location, is_root=True, path=(), stack={})

    def _document(self, location: str) -> typ.Any:
        if location not in self._documents:
            text = self._read(location)
            try:
                self._documents[location] = self._yaml.load(StringIO(text))
            except YAMLError as exc:
                msg = f"Failed to parse '{location}': {exc}"
                raise SpecLoadError(msg) from exc
        return self._documents[location]

    def _read(self, location: str) -> str:
        if is_url(location):
            logger.debug("Fetching %s", location)
            try:
                resp = self._session.get(location, timeout=FETCH_TIMEOUT_SECONDS)
                resp.raise_for_status()
            except requests.RequestException as exc:
                msg = f"Failed to fetch '{location}': {exc}"
                raise SpecLoadError(msg) from exc
            return resp.text
        path = Path(location)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to read '{location}': {exc.strerror or exc}"
            raise SpecLoadError(msg) from exc
        except UnicodeDecodeError as exc:
            msg = f"'{location}' is not valid UTF-8: {exc.reason} at byte {exc.start}"
            raise SpecLoadError(msg) from exc

    def _inline(
        self,
        node: typ.Any,
        location: str,
        *,
        is_root: bool,
        path: tuple[str, ...],
        stack: cabc.Mapping[tuple[str, str], str],
    ) -> typ.Any:
        """Return ``node`` with external refs replaced by their targets.

        ``path`` is the position of ``node`` in the bundled output and
        ``stack`` maps every fragment currently being inlined to the output
        pointer it was inlined at. A ref back to one of those fragments is a
        recursive schema; it becomes an internal ``$ref`` to that pointer.
        """
        if isinstance(node, list):
            return [
                self._inline(
                    item,
                    location,
                    is_root=is_root,
                    path=(*path, str(index)),
                    stack=stack,
                )
                for index, item in enumerate(node)
            ]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str) and not (is_root and ref.startswith("#")):
            target_location, pointer = self._split_ref(ref, location)
            key = (target_location, pointer)
            if key in stack:
                logger.debug("Recursive reference '%s' in %s", ref, location)
                return {"$ref": f"#{stack[key]}"}
            fragment = _resolve_pointer(
                self._document(target_location), pointer, ref
            )
            return self._inline(
                fragment,
                target_location,
                is_root=False,
                path=path,
                stack={**stack, key: _json_pointer(path)},
            )

        return {
            key: self._inline(
                value, location, is_root=is_root, path=(*path, str(key)), stack=stack
            )
            for key, value in node.items()
        }

    @staticmethod
    def _split_ref(ref: str, location: str) -> tuple[str, str]:
        """Return the absolute document location and JSON pointer for ``ref``."""
        target, _, pointer = ref.partition("#")
        if not target:
            return location, pointer
        if is_url(target):
            return target, pointer
        if is_url(location):
            return urljoin(location, target), pointer
        return str(Path(location).parent / target), pointer


def _json_pointer(path: cabc.Sequence[str]) -> str:
    """Encode ``path`` as an RFC 6901 pointer (``""`` for the document root).

    Examples
    --------
    >>> _json_pointer(("components", "schemas", "a/b"))
    '/components/schemas/a~1b'
    """
    return "".join(
        "/" + token.replace("~", "~0").replace("/", "~1") for token in path
    )


def _resolve_pointer(document: typ.Any, pointer: str, ref: str) -> typ.Any:
    """Follow an RFC 6901 JSON pointer through ``document``."""
    if pointer in ("", "/"):
        return document
    cursor = document
    for raw in pointer.lstrip("/").split("/"):
        token = unquote(raw).replace("~1", "/").replace("~0", "~")
        if isinstance(cursor, cabc.Mapping) and token in cursor:
            cursor = cursor[token]
        elif isinstance(cursor, list) and token.isdigit() and int(token) < len(cursor):
            cursor = cursor[int(token)]
        else:
            msg = f"Unresolvable reference '{ref}'."
            raise SpecLoadError(msg)
    return cursor


__all__ = ["is_url", "load_and_bundle_spec"]
