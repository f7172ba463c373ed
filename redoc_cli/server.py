"""Serve a rendered documentation page over HTTP and re-render on change.

:class:`LiveServer` renders the page once before binding its listener, then
answers three routes from an immutable :class:`PageSnapshot`:

* ``GET /`` returns the cached page,
* ``GET /redoc.standalone.js`` streams the runtime bundle,
* ``GET /spec.json`` returns the current spec as indented JSON.

Everything else gets ``404 Not found``. When watching, each debounced change
to the spec file schedules a reload on a worker thread. A reload loads and
renders a complete new snapshot and publishes it through
:class:`ServerState`, which swaps a single reference. Every reload takes a
sequence number and a snapshot is only published if its sequence is newer
than the one being served, so a slow, older reload can never replace the
result of a newer one. Failed reloads are logged and the last good snapshot
keeps being served.

Example
-------
>>> from redoc_cli.config import RenderOptions, ServeSettings
>>> from redoc_cli.server import LiveServer
>>> server = LiveServer("openapi.yaml", RenderOptions(), ServeSettings(port=0))  # doctest: +SKIP
>>> server.start()  # doctest: +SKIP
>>> server.url  # doctest: +SKIP
'http://127.0.0.1:54321'
>>> server.stop()  # doctest: +SKIP
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import itertools
import json
import logging
import threading
import time
import typing as typ
from concurrent.futures import Future, ThreadPoolExecutor
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from redoc_cli._constants import SPEC_ENDPOINT, STANDALONE_BUNDLE
from redoc_cli.compression import respond
from redoc_cli.config import ServeSettings
from redoc_cli.errors import ListenError, RedocCliError
from redoc_cli.page import RenderedPage, render_page, runtime_script_path
from redoc_cli.spec_loader import is_url, load_and_bundle_spec
from redoc_cli.watcher import ChangeWatcher

if typ.TYPE_CHECKING:
    from redoc_cli.config import RenderOptions

logger = logging.getLogger(__name__)

SpecLoader = cabc.Callable[[str], cabc.Mapping[str, typ.Any]]

PAGE_ROUTE = "/"
BUNDLE_ROUTE = f"/{STANDALONE_BUNDLE}"
SPEC_ROUTE = f"/{SPEC_ENDPOINT}"
NOT_FOUND_BODY = b"Not found"


class ServerStatus(enum.Enum):
    """Lifecycle states of a :class:`LiveServer`."""

    STARTING = "starting"
    LISTENING = "listening"
    RELOADING = "reloading"
    STOPPED = "stopped"


@dc.dataclass(frozen=True, slots=True)
class PageSnapshot:
    """One self-consistent render result: the spec and the page built from it."""

    sequence: int
    spec: cabc.Mapping[str, typ.Any]
    page: RenderedPage
    spec_json: bytes

    @classmethod
    def build(
        cls, sequence: int, spec: cabc.Mapping[str, typ.Any], page: RenderedPage
    ) -> PageSnapshot:
        """Create a snapshot, serializing ``spec`` once for ``/spec.json``."""
        text = json.dumps(spec, indent=2, ensure_ascii=False, default=str)
        return cls(
            sequence=sequence, spec=spec, page=page, spec_json=text.encode("utf-8")
        )


class ServerState:
    """Holder of the snapshot currently being served.

    Readers take :attr:`current` once per request and use that reference for
    the whole response. Writers publish complete snapshots; nothing is ever
    mutated in place.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._current: PageSnapshot | None = None

    @property
    def current(self) -> PageSnapshot:
        """Return the snapshot being served.

        Raises
        ------
        RuntimeError
            If nothing has been published yet.
        """
        snapshot = self._current
        if snapshot is None:
            msg = "No page has been rendered yet."
            raise RuntimeError(msg)
        return snapshot

    def next_sequence(self) -> int:
        """Return a new, strictly increasing reload sequence number."""
        with self._lock:
            return next(self._sequence)

    def publish(self, snapshot: PageSnapshot) -> bool:
        """Swap in ``snapshot`` unless a newer one is already being served.

        Returns
        -------
        bool
            ``True`` when the snapshot replaced the current one.
        """
        with self._lock:
            current = self._current
            if current is not None and current.sequence >= snapshot.sequence:
                return False
            self._current = snapshot
            return True


class _DocsHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_port = False

    def __init__(self, address: tuple[str, int], app: LiveServer) -> None:
        self.app = app
        super().__init__(address, DocsRequestHandler)


class DocsRequestHandler(BaseHTTPRequestHandler):
    """Route requests to the owning :class:`LiveServer`."""

    server_version = "redoc-cli"
    server: _DocsHTTPServer

    def do_GET(self) -> None:  # noqa: N802 - http.server signature
        started = time.perf_counter()
        try:
            self.server.app.handle_get(self)
        except (BrokenPipeError, ConnectionResetError) as exc:
            logger.debug("Connection dropped while answering %s: %s", self.path, exc)
            self.close_connection = True
        finally:
            elapsed = (time.perf_counter() - started) * 1000
            logger.debug("GET %s: %.3fms", self.path, elapsed)

    def do_HEAD(self) -> None:  # noqa: N802 - http.server signature
        self.send_response(404)
        self.send_header("Content-Type", "text/plain")
        self.end_headers()

    def do_POST(self) -> None:  # noqa: N802 - http.server signature
        send_not_found(self)

    do_PUT = do_PATCH = do_DELETE = do_OPTIONS = do_POST

    def log_message(self, format: str, *args: typ.Any) -> None:  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)


def send_not_found(handler: BaseHTTPRequestHandler) -> None:
    """Write the fixed plain-text 404 response."""
    handler.send_response(404)
    handler.send_header("Content-Type", "text/plain")
    handler.send_header("Content-Length", str(len(NOT_FOUND_BODY)))
    handler.end_headers()
    handler.wfile.write(NOT_FOUND_BODY)
    handler.close_connection = True


class LiveServer:
    """Render, serve and optionally watch one API description.

    Parameters
    ----------
    source : str
        Path or URL of the spec.
    options : RenderOptions
        Options for every render cycle.
    settings : ServeSettings, optional
        Listener address, watch flag, debounce and compression settings.
    loader : Callable[[str], Mapping], optional
        Spec loader; :func:`load_and_bundle_spec` by default.
    bundles_dir : Path, optional
        Directory holding ``redoc.standalone.js``.
    """

    def __init__(
        self,
        source: str,
        options: RenderOptions,
        settings: ServeSettings | None = None,
        *,
        loader: SpecLoader = load_and_bundle_spec,
        bundles_dir: Path | None = None,
    ) -> None:
        self.source = source
        self.options = options
        self.settings = settings or ServeSettings()
        self.state = ServerState()
        self._loader = loader
        self._bundles_dir = bundles_dir
        self._status = ServerStatus.STOPPED
        self._status_lock = threading.Lock()
        self._reloads_in_flight = 0
        self._httpd: _DocsHTTPServer | None = None
        self._thread: threading.Thread | None = None
        self._watcher: ChangeWatcher | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._stopped = threading.Event()

    @property
    def status(self) -> ServerStatus:
        return self._status

    @property
    def address(self) -> tuple[str, int]:
        """Return the bound ``(host, port)``; valid once started."""
        if self._httpd is None:
            msg = "Server is not listening."
            raise RuntimeError(msg)
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    @property
    def url(self) -> str:
        host, port = self.address
        return f"http://{host}:{port}"

    @property
    def watching(self) -> bool:
        return self._watcher is not None

    def render_snapshot(self, sequence: int) -> PageSnapshot:
        """Run one load + render cycle and wrap it in a snapshot.

        Raises
        ------
        SpecLoadError
            If the spec cannot be loaded.
        RenderError
            If rendering fails.
        """
        spec = self._loader(self.source)
        page = render_page(
            spec, self.source, self.options, bundles_dir=self._bundles_dir
        )
        return PageSnapshot.build(sequence, spec, page)

    def start(self) -> None:
        """Render the first page, bind the listener and begin serving.

        Raises
        ------
        SpecLoadError, RenderError
            If the initial render cycle fails; nothing is bound in that case.
        ListenError
            If the listening socket cannot be bound.
        """
        self._set_status(ServerStatus.STARTING)
        try:
            self.state.publish(self.render_snapshot(self.state.next_sequence()))
            try:
                self._httpd = _DocsHTTPServer(
                    (self.settings.host, self.settings.port), self
                )
            except OSError as exc:
                msg = (
                    f"Cannot listen on {self.settings.host}:{self.settings.port}: "
                    f"{exc.strerror or exc}"
                )
                raise ListenError(msg) from exc
        except Exception:
            self._set_status(ServerStatus.STOPPED)
            raise

        self._stopped.clear()
        self._executor = ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="redoc-reload"
        )
        self._thread = threading.Thread(
            target=self._httpd.serve_forever, name="redoc-http", daemon=True
        )
        self._thread.start()
        self._set_status(ServerStatus.LISTENING)
        if self.settings.watch:
            self._start_watcher()

    def serve_forever(self) -> None:
        """Start if needed and block until :meth:`stop` or Ctrl+C."""
        if self._httpd is None:
            self.start()
        try:
            self._stopped.wait()
        except KeyboardInterrupt:
            logger.info("Shutting down server")
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop the watcher, reload workers and listener."""
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._httpd is not None:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        self._set_status(ServerStatus.STOPPED)
        self._stopped.set()

    def reload(self) -> Future[bool]:
        """Schedule a reload on a worker thread.

        Returns
        -------
        Future[bool]
            Resolves to ``True`` when the new snapshot was published,
            ``False`` when the reload failed or was superseded.
        """
        if self._executor is None:
            msg = "Server is not running."
            raise RuntimeError(msg)
        sequence = self.state.next_sequence()
        return self._executor.submit(self._reload, sequence)

    def handle_get(self, handler: BaseHTTPRequestHandler) -> None:
        """Answer a GET request from the snapshot current at request start."""
        snapshot = self.state.current
        encodings = self.settings.encodings
        if handler.path == PAGE_ROUTE:
            respond(
                handler,
                snapshot.page.encoded,
                {"Content-Type": "text/html"},
                encodings=encodings,
            )
        elif handler.path == BUNDLE_ROUTE:
            bundle_path = runtime_script_path(self._bundles_dir)
            try:
                stream = bundle_path.open("rb")
            except OSError as exc:
                logger.error("Cannot open %s: %s", bundle_path, exc)
                send_not_found(handler)
                return
            respond(
                handler,
                stream,
                {"Content-Type": "application/javascript"},
                encodings=encodings,
            )
        elif handler.path == SPEC_ROUTE:
            respond(
                handler,
                snapshot.spec_json,
                {"Content-Type": "application/json"},
                encodings=encodings,
            )
        else:
            send_not_found(handler)

    def _reload(self, sequence: int) -> bool:
        self._track_reload(1)
        try:
            snapshot = self.render_snapshot(sequence)
        except RedocCliError as exc:
            logger.error("Error while updating: %s", exc)
            return False
        except Exception:
            logger.exception("Unexpected error while updating %s", self.source)
            return False
        finally:
            self._track_reload(-1)

        if self.state.publish(snapshot):
            logger.info("Updated successfully")
            return True
        logger.debug("Discarded reload #%d: a newer page is already served", sequence)
        return False

    def _start_watcher(self) -> None:
        if is_url(self.source) or not Path(self.source).exists():
            logger.warning("Not watching %s: not a local file", self.source)
            return
        self._watcher = ChangeWatcher(
            Path(self.source),
            self._on_source_change,
            debounce=self.settings.debounce_seconds,
            poll_interval=self.settings.poll_interval,
        )
        self._watcher.start()
        logger.info("Watching %s for changes...", self.source)

    def _on_source_change(self, event: str, path: Path) -> None:
        logger.info("%s changed (%s), updating docs", path, event)
        if self._executor is not None:
            self.reload()

    def _track_reload(self, delta: int) -> None:
        with self._status_lock:
            self._reloads_in_flight += delta
            if self._status in (ServerStatus.LISTENING, ServerStatus.RELOADING):
                self._status = (
                    ServerStatus.RELOADING
                    if self._reloads_in_flight
                    else ServerStatus.LISTENING
                )

    def _set_status(self, status: ServerStatus) -> None:
        with self._status_lock:
            self._status = status


__all__ = [
    "DocsRequestHandler",
    "LiveServer",
    "PageSnapshot",
    "ServerState",
    "ServerStatus",
    "send_not_found",
]
