"""Negotiate ``deflate``/``gzip`` response compression for the live server.

:func:`respond` writes exactly one HTTP response through a
``BaseHTTPRequestHandler``. The encoding is picked from the request's
``Accept-Encoding`` header by whole-token, case-insensitive matching against a
priority list (``deflate`` before ``gzip`` by default); quality values are not
interpreted. Content may be text, bytes or a binary file object, and is
streamed through a ``zlib`` compressor in chunks so large runtime bundles are
never held in memory twice.

Example
-------
>>> choose_encoding("gzip, deflate, br")
'deflate'
>>> choose_encoding("GZIP"), choose_encoding("identity") is None
('gzip', True)
"""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ
import zlib

from redoc_cli._constants import DEFAULT_ENCODINGS

if typ.TYPE_CHECKING:
    from http.server import BaseHTTPRequestHandler

CHUNK_SIZE = 64 * 1024

# zlib window bits: 15 selects the zlib container HTTP calls "deflate",
# 16 + 15 selects the gzip container.
_WBITS = {"deflate": 15, "gzip": 31}

Content = str | bytes | typ.BinaryIO


def choose_encoding(
    accept_encoding: str | None,
    encodings: cabc.Sequence[str] = DEFAULT_ENCODINGS,
) -> str | None:
    """Return the first of ``encodings`` named in ``accept_encoding``."""
    value = accept_encoding or ""
    for name in encodings:
        if re.search(rf"\b{re.escape(name)}\b", value, re.IGNORECASE):
            return name
    return None


def make_compressor(encoding: str) -> typ.Any:
    """Return a streaming ``zlib`` compressor for ``encoding``.

    Raises
    ------
    ValueError
        If ``encoding`` is neither ``deflate`` nor ``gzip``.
    """
    try:
        wbits = _WBITS[encoding]
    except KeyError:
        msg = f"Unsupported content encoding '{encoding}'."
        raise ValueError(msg) from None
    return zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, wbits)


def respond(
    handler: BaseHTTPRequestHandler,
    content: Content,
    headers: cabc.Mapping[str, str] | None = None,
    *,
    status: int = 200,
    encodings: cabc.Sequence[str] = DEFAULT_ENCODINGS,
) -> str | None:
    """Write ``content`` as one negotiated response.

    Parameters
    ----------
    handler : BaseHTTPRequestHandler
        Handler of the request being answered.
    content : str, bytes or binary file object
        Body to send. File objects are read in chunks and closed afterwards.
    headers : Mapping[str, str], optional
        Caller headers. A ``content-encoding`` header is added when an
        encoding is negotiated; otherwise the headers are sent unmodified.
    status : int, optional
        HTTP status code, ``200`` by default.
    encodings : Sequence[str], optional
        Encodings in priority order.

    Returns
    -------
    str or None
        The negotiated encoding, ``None`` for an identity response.
    """
    encoding = choose_encoding(handler.headers.get("Accept-Encoding"), encodings)
    response_headers = dict(headers or {})
    if encoding is not None:
        response_headers["content-encoding"] = encoding

    handler.send_response(status)
    for name, value in response_headers.items():
        handler.send_header(name, value)
    handler.end_headers()

    try:
        if encoding is None:
            for chunk in _iter_chunks(content):
                handler.wfile.write(chunk)
        else:
            compressor = make_compressor(encoding)
            for chunk in _iter_chunks(content):
                data = compressor.compress(chunk)
                if data:
                    handler.wfile.write(data)
            handler.wfile.write(compressor.flush())
        handler.wfile.flush()
    finally:
        if not isinstance(content, (str, bytes)):
            content.close()
        handler.close_connection = True
    return encoding


def _iter_chunks(content: Content) -> cabc.Iterator[bytes]:
    if isinstance(content, str):
        yield content.encode("utf-8")
    elif isinstance(content, bytes):
        yield content
    else:
        while chunk := content.read(CHUNK_SIZE):
            yield chunk


__all__ = ["CHUNK_SIZE", "choose_encoding", "make_compressor", "respond"]
