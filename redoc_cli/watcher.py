"""Watch a local spec file and report debounced change events.

:class:`ChangeWatcher` polls the file's ``stat`` signature from a daemon
thread. A new modification time or size is reported as a ``change`` event; a
vanished file or a new inode (editors that save by writing a temporary file
and renaming it over the original) is reported as ``rename``. Events pass
through a :class:`DebouncedScheduler`, so a burst of events inside the
debounce window produces one callback carrying only the most recent event.

Example
-------
>>> from pathlib import Path
>>> def on_change(event: str, path: Path) -> None:
...     print(event, path)
>>> with ChangeWatcher(Path("openapi.yaml"), on_change):  # doctest: +SKIP
...     input("Edit the file, then press enter")
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import os
import threading
import typing as typ
from pathlib import Path

from redoc_cli._constants import DEBOUNCE_SECONDS, POLL_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

CHANGE = "change"
RENAME = "rename"

_Signature = tuple[int, int, int]


class DebouncedScheduler:
    """Single-slot timer that runs ``callback`` once a burst of calls settles.

    Each :meth:`schedule` cancels the pending timer, if any, and arms a new
    one with the latest arguments, so at most one callback is ever pending.
    """

    def __init__(self, delay: float, callback: cabc.Callable[..., typ.Any]) -> None:
        self.delay = delay
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        """Return ``True`` while a callback is scheduled but has not fired."""
        with self._lock:
            return self._timer is not None

    def schedule(self, *args: typ.Any) -> None:
        """Replace any pending call with one for ``args``."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = threading.Timer(
                self.delay, self._fire, args=(self._generation, args)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    def _fire(self, generation: int, args: tuple[typ.Any, ...]) -> None:
        # A timer that lost the race against cancel() must not fire.
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        self._callback(*args)


class ChangeWatcher:
    """Poll ``path`` and invoke ``on_change(event, path)`` after a debounce.

    Parameters
    ----------
    path : Path
        Local file to observe. URLs are never watched.
    on_change : Callable[[str, Path], Any]
        Called with ``"change"`` or ``"rename"`` and the watched path.
        Exceptions it raises are logged; the watcher keeps running.
    debounce : float, optional
        Debounce window in seconds.
    poll_interval : float, optional
        Seconds between ``stat`` calls.
    """

    def __init__(
        self,
        path: Path,
        on_change: cabc.Callable[[str, Path], typ.Any],
        *,
        debounce: float = DEBOUNCE_SECONDS,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self.path = Path(path)
        self.poll_interval = poll_interval
        self._on_change = on_change
        self._scheduler = DebouncedScheduler(debounce, self.dispatch)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._signature: _Signature | None = None

    def __enter__(self) -> ChangeWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Record the current file signature and start polling."""
        if self.running:
            return
        self._stop.clear()
        self._signature = self._stat()
        self._thread = threading.Thread(
            target=self._poll, name=f"watch:{self.path.name}", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop polling and drop any pending debounced event."""
        self._stop.set()
        self._scheduler.cancel()
        if self._thread is not None:
            self._thread.join(timeout=max(self.poll_interval * 2, 1.0))
            self._thread = None

    def notify(self, event: str) -> None:
        """Feed a raw filesystem event into the debounce window."""
        self._scheduler.schedule(event, self.path)

    def dispatch(self, event: str, path: Path) -> bool:
        """Apply the trigger policy and call ``on_change``.

        ``change`` always triggers; ``rename`` only triggers when ``path``
        still exists, which filters out deletions.

        Returns
        -------
        bool
            ``True`` when ``on_change`` was invoked.
        """
        if event == RENAME and not path.exists():
            logger.debug("Ignoring %s of %s: file no longer exists", event, path)
            return False
        if event not in (CHANGE, RENAME):
            return False
        try:
            self._on_change(event, path)
        except Exception:
            logger.exception("Change handler failed for %s", path)
        return True

    def _poll(self) -> None:
        while not self._stop.wait(self.poll_interval):
            current = self._stat()
            previous, self._signature = self._signature, current
            event = _classify(previous, current)
            if event is not None:
                logger.debug("Detected %s of %s", event, self.path)
                self.notify(event)

    def _stat(self) -> _Signature | None:
        try:
            stat = os.stat(self.path)
        except OSError:
            return None
        return (stat.st_ino, stat.st_mtime_ns, stat.st_size)


def _classify(previous: _Signature | None, current: _Signature | None) -> str | None:
    """Translate two consecutive signatures into an event name."""
    if previous == current:
        return None
    if previous is None or current is None or previous[0] != current[0]:
        return RENAME
    return CHANGE


__all__ = ["CHANGE", "RENAME", "ChangeWatcher", "DebouncedScheduler"]
