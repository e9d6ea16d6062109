"""File system watcher for Preview Unblock.

Uses the watchdog library to monitor one folder for new, modified or
renamed PDFs.  The watchdog handler only pushes paths onto a queue; a
single dispatcher thread drains it and starts one worker per event, so
the notification thread is never blocked by file processing.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from collections.abc import Callable
from typing import Any

from watchdog.events import (
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from preview_unblock.errors import NotificationError
from preview_unblock.unblocker import is_pdf

logger = logging.getLogger(__name__)

_CLOSE = object()  # queue sentinel
_HEALTH_INTERVAL = 1.0  # seconds between observer liveness checks


class DedupGate:
    """Short-lived set of paths that were just handed to a worker.

    A path stays in the set for *window_seconds* after it enters,
    regardless of how its processing ends.
    """

    def __init__(self, window_seconds: float = 5.0):
        self._window = window_seconds
        # path -> expiry timer
        self._pending: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def try_enter(self, path: str) -> bool:
        """Add *path* and return True, or return False if already present."""
        with self._lock:
            if path in self._pending:
                return False
            timer = threading.Timer(self._window, lambda: self._expire(path, timer))
            timer.daemon = True
            self._pending[path] = timer
        timer.start()
        return True

    def clear(self) -> None:
        """Forget every pending path and cancel their expiry timers."""
        with self._lock:
            timers = list(self._pending.values())
            self._pending.clear()
        for timer in timers:
            timer.cancel()

    def _expire(self, path: str, timer: threading.Timer) -> None:
        with self._lock:
            # A cleared and re-entered path owns a newer timer.
            if self._pending.get(path) is timer:
                del self._pending[path]

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._pending

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


class PdfEventHandler(FileSystemEventHandler):
    """Watchdog handler that forwards PDF paths from create/modify/move events."""

    def __init__(self, on_path: Callable[[str], None]):
        """Initialise the handler with the callback that receives paths."""
        super().__init__()
        self._on_path = on_path

    def _forward(self, path: str | bytes) -> None:
        path = os.fsdecode(path)
        if is_pdf(path):
            self._on_path(path)

    def on_created(self, event: FileCreatedEvent) -> None:  # type: ignore[override]
        """Handle a new file creation event."""
        if not event.is_directory:
            self._forward(event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:  # type: ignore[override]
        """Handle a file modification event."""
        if not event.is_directory:
            self._forward(event.src_path)

    def on_moved(self, event: FileMovedEvent) -> None:  # type: ignore[override]
        """Treat a rename as the creation of the new name."""
        if not event.is_directory:
            self._forward(event.dest_path)


class FolderWatcher:
    """Live subscription to change notifications for one folder.

    Usage:
        watcher = FolderWatcher(folder, on_file_event, on_error)
        watcher.start()
        ...
        watcher.stop()

    *on_file_event* runs on its own daemon thread per event.  *on_error*
    receives a :class:`NotificationError` when the observer dies.
    """

    def __init__(
        self,
        folder: str,
        on_file_event: Callable[[str], None],
        on_error: Callable[[NotificationError], None] | None = None,
    ):
        """Create a watcher for *folder* (not started)."""
        self.folder = folder
        self._on_file_event = on_file_event
        self._on_error = on_error
        self._events: queue.Queue[Any] = queue.Queue()
        self._handler = PdfEventHandler(self._events.put)
        self._closed = threading.Event()
        self._observer: Any | None = None
        self._dispatcher: threading.Thread | None = None

    # ---- lifecycle ----

    def start(self) -> None:
        """Subscribe to notifications and start the dispatcher."""
        observer = Observer()
        observer.schedule(self._handler, self.folder, recursive=False)
        observer.start()
        self._observer = observer
        self._dispatcher = threading.Thread(
            target=self._dispatch, daemon=True, name="EventDispatcher"
        )
        self._dispatcher.start()
        logger.info("Watching '%s'", self.folder)

    def stop(self) -> None:
        """Unsubscribe and close the event channel.

        Workers that were already started are left to finish.
        """
        self._closed.set()
        self._events.put(_CLOSE)
        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        if self._dispatcher and self._dispatcher is not threading.current_thread():
            self._dispatcher.join(timeout=5)
        self._dispatcher = None
        logger.info("Watcher stopped for '%s'.", self.folder)

    @property
    def is_running(self) -> bool:
        """Return whether the subscription is active."""
        return (
            not self._closed.is_set()
            and self._observer is not None
            and self._observer.is_alive()
        )

    # ---- dispatch ----

    def _dispatch(self) -> None:
        """Drain the event queue until it is closed."""
        reported = False
        while True:
            try:
                item = self._events.get(timeout=_HEALTH_INTERVAL)
            except queue.Empty:
                if not reported and self._observer_died():
                    reported = True
                    self._report(
                        NotificationError(
                            "Change notifications stopped unexpectedly."
                        )
                    )
                continue
            if item is _CLOSE or self._closed.is_set():
                break
            threading.Thread(
                target=self._run_worker,
                args=(item,),
                daemon=True,
                name=f"Unblock-{os.path.basename(item)}",
            ).start()

    def _observer_died(self) -> bool:
        observer = self._observer
        return (
            not self._closed.is_set()
            and observer is not None
            and not observer.is_alive()
        )

    def _run_worker(self, path: str) -> None:
        try:
            self._on_file_event(path)
        except Exception:
            logger.exception("Error handling change event for %s", path)

    def _report(self, error: NotificationError) -> None:
        logger.warning("Watcher error on '%s': %s", self.folder, error)
        if self._on_error:
            try:
                self._on_error(error)
            except Exception:
                logger.exception("Error in on_error callback")
