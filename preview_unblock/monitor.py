"""
Monitoring session for Preview Unblock.

Ties together folder validation, the start-up scan, the live watcher,
duplicate suppression, the readiness check and marker removal.  This is
the only object the UI talks to.

Usage:
    session = MonitorSession(on_log=print, on_status_change=show_status)
    session.start("/home/me/Downloads")
    ...
    session.stop()
"""

from __future__ import annotations

import functools
import logging
import os
import threading
from collections.abc import Callable
from enum import Enum

from preview_unblock.activity import (
    MARK_CLEAN,
    MARK_FAILED,
    MARK_UNBLOCKED,
    ActivityLog,
)
from preview_unblock.config import Config
from preview_unblock.errors import NotificationError
from preview_unblock.readiness import await_ready
from preview_unblock.scanner import DirectoryScanner
from preview_unblock.unblocker import FileOutcome, MarkerStripper, StatsCounter
from preview_unblock.validation import check_folder
from preview_unblock.watcher import DedupGate, FolderWatcher

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    STOPPED = "Stopped"
    RUNNING = "Running"


def format_status(processed: int, failed: int, running: bool) -> str:
    """Return the one-line summary shown in the status label."""
    if running:
        return f"Monitoring active \u2014 {processed} unblocked, {failed} failed"
    if processed or failed:
        return f"Monitoring stopped \u2014 {processed} unblocked, {failed} failed"
    return "Ready to start monitoring"


class MonitorSession:
    """Watches one folder at a time and unblocks the PDFs that appear in it.

    Parameters
    ----------
    on_log : callable, optional
        Receives each timestamped activity line.
    on_status_change : callable, optional
        Receives ``(processed, failed, running)`` after every counter
        change and every start/stop.
    config : Config, optional
        Timing and parallelism settings.
    """

    def __init__(
        self,
        on_log: Callable[[str], None] | None = None,
        on_status_change: Callable[[int, int, bool], None] | None = None,
        config: Config | None = None,
    ):
        self.config = config or Config()
        self.activity = ActivityLog(on_log, max_lines=self.config.max_log_lines)
        self.stats = StatsCounter(on_change=self._on_counts_changed)
        self.stripper = MarkerStripper(self.stats, on_result=self._log_outcome)
        self.dedup = DedupGate(self.config.debounce_seconds)
        self._on_status_change = on_status_change
        self._state = SessionState.STOPPED
        self._folder: str | None = None
        self._watcher: FolderWatcher | None = None
        # Bumped on every stop so events from an old watcher are dropped.
        self._generation = 0
        self._lifecycle = threading.RLock()

    # ---- state ----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def running(self) -> bool:
        """Return whether a folder is being monitored."""
        return self._state is SessionState.RUNNING

    @property
    def folder(self) -> str | None:
        """Return the current (or last) monitored folder."""
        return self._folder

    def status_text(self) -> str:
        """Return the one-line summary shown in the status label."""
        processed, failed = self.stats.snapshot()
        return format_status(processed, failed, self.running)

    # ---- lifecycle ----

    def start(self, folder: str) -> None:
        """Scan *folder* once, then watch it for new PDFs.

        Raises :class:`~preview_unblock.errors.ValidationError` before any
        side effect if *folder* is unusable.  Starting while running
        switches to the new folder.
        """
        with self._lifecycle:
            check_folder(folder)
            if self.running:
                self._stop_locked()

            self._folder = folder
            self._state = SessionState.RUNNING
            self.stats.reset()
            self.activity.write("Started monitoring.")
            logger.info("Monitoring '%s'", folder)

            scanner = DirectoryScanner(
                self._process_existing, self.activity, self.config.scan_workers
            )
            scanner.scan(folder)

            watcher = FolderWatcher(
                folder,
                functools.partial(self._on_file_event, self._generation),
                on_error=self._on_watcher_error,
            )
            try:
                watcher.start()
            except OSError as exc:
                watcher.stop()
                self._on_watcher_error(
                    NotificationError(f"Could not watch folder: {exc}")
                )
            else:
                self._watcher = watcher

    def stop(self) -> None:
        """Stop watching.  Does nothing when already stopped."""
        with self._lifecycle:
            if not self.running:
                return
            self._stop_locked()

    def change_folder(self, folder: str) -> None:
        """Switch to *folder*, restarting the watch if one is running.

        The new folder is validated first, so a bad choice leaves the
        current session untouched.
        """
        with self._lifecycle:
            check_folder(folder)
            if self.running:
                self.start(folder)
            else:
                self._folder = folder

    def _stop_locked(self) -> None:
        self._state = SessionState.STOPPED
        self._generation += 1
        if self._watcher:
            self._watcher.stop()
            self._watcher = None
        self.dedup.clear()
        self.activity.write("Stopped monitoring.")
        logger.info("Monitoring stopped for '%s'", self._folder)
        self._notify_status()

    # ---- pipeline ----

    def _process_existing(self, path: str) -> None:
        """Start-up scan: files are first-seen, so no debounce.

        Files already on disk are usually complete, so the first probe
        runs without the settling delay.
        """
        if await_ready(
            path,
            self.config.ready_attempts,
            self.config.ready_delay_ms,
            settle_first=False,
        ):
            self.stripper.strip(path)

    def _on_file_event(self, generation: int, path: str) -> None:
        """Runs on a worker thread for each create/change/rename."""
        if generation != self._generation:
            logger.debug("Dropping event from a previous session: %s", path)
            return
        if not self.dedup.try_enter(path):
            logger.debug("Duplicate event ignored: %s", path)
            return
        if not await_ready(path, self.config.ready_attempts, self.config.ready_delay_ms):
            return
        # The session may have been stopped or restarted during the wait.
        if generation != self._generation:
            logger.debug("Session changed while waiting, dropping: %s", path)
            return
        self.stripper.strip(path)

    def _on_watcher_error(self, error: NotificationError) -> None:
        self.activity.warning(f"Watcher error: {error}")
        self.activity.write(
            "Some file events may have been missed. "
            "Consider monitoring a smaller folder."
        )

    # ---- reporting ----

    def _log_outcome(self, path: str, outcome: FileOutcome, detail: str) -> None:
        name = os.path.basename(path)
        if outcome is FileOutcome.UNBLOCKED:
            self.activity.write(f"{MARK_UNBLOCKED} Unblocked: {name}")
        elif outcome is FileOutcome.ALREADY_CLEAN:
            self.activity.write(f"{MARK_CLEAN} Already unblocked: {name}")
        elif outcome is FileOutcome.ACCESS_DENIED:
            self.activity.write(f"{MARK_FAILED} Access denied: {name}", logging.WARNING)
        elif outcome is FileOutcome.FAILED:
            self.activity.write(f"{MARK_FAILED} Failed: {name} ({detail})", logging.ERROR)
        else:
            logger.debug("Skipped %s: %s", path, detail)

    def _on_counts_changed(self, processed: int, failed: int) -> None:
        self._emit_status(processed, failed)

    def _notify_status(self) -> None:
        self._emit_status(*self.stats.snapshot())

    def _emit_status(self, processed: int, failed: int) -> None:
        if self._on_status_change is None:
            return
        try:
            self._on_status_change(processed, failed, self.running)
        except Exception:
            logger.exception("Error in on_status_change callback")
