"""
Main application controller for Preview Unblock.

Ties together configuration, the monitoring session and the accessible
wxPython window.  Session callbacks arrive on worker threads and are
marshalled to the UI thread with ``wx.CallAfter``.
"""

import logging
import logging.handlers
import sys
import threading

import wx

from preview_unblock import __app_name__, __version__
from preview_unblock.config import Config
from preview_unblock.errors import ValidationError
from preview_unblock.monitor import MonitorSession, format_status
from preview_unblock.platform_utils import get_default_folder, get_log_path
from preview_unblock.ui import MainWindow
from preview_unblock.validation import check_folder, is_valid_folder

logger = logging.getLogger(__name__)


class App:
    """Central orchestrator between the window and the monitoring session."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        self.folder = get_default_folder()
        self._wx_app = wx.App(False)
        self.session = MonitorSession(
            on_log=self._on_log,
            on_status_change=self._on_status_change,
            config=self.config,
        )
        self._window = MainWindow(self)
        self._closing = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Show the main window and enter the wx main loop."""
        self._setup_logging()
        logger.info("%s %s starting.", __app_name__, __version__)
        self._window.show()
        self._wx_app.MainLoop()

    def on_quit(self) -> None:
        """Stop monitoring off the UI thread, then close the window.

        A start-up scan can hold the session for a while, so the window is
        destroyed only once the stop has finished.
        """
        logger.info("Shutting down\u2026")
        self._closing = True
        self._in_background(self._shutdown, "SessionShutdown")

    def _shutdown(self) -> None:
        try:
            self.session.stop()
        finally:
            wx.CallAfter(self._window.destroy)

    def confirm_exit(self) -> bool:
        """Ask before exiting while a folder is being monitored."""
        if not self.session.running:
            return True
        return self._window.confirm(
            "Monitoring is running. Are you sure you want to exit?",
            "Confirm Exit",
        )

    # ------------------------------------------------------------------
    # Monitoring control
    # ------------------------------------------------------------------

    def on_toggle_monitoring(self) -> None:
        """Start or stop monitoring depending on the current state."""
        if self.session.running:
            self._in_background(self.session.stop, "SessionStop")
            return
        folder = self.folder
        try:
            check_folder(folder)
        except ValidationError as exc:
            self._window.show_error(str(exc))
            return
        self._in_background(lambda: self._start(folder), "SessionStart")

    def on_change_folder(self, folder: str) -> None:
        """Adopt *folder*, restarting the watch if one is running."""
        if not is_valid_folder(folder):
            self._window.show_error("Invalid folder path selected.")
            return
        self.folder = folder
        self._window.set_folder(folder)
        if self.session.running:
            self._in_background(lambda: self._change_folder(folder), "SessionRestart")

    def _start(self, folder: str) -> None:
        try:
            self.session.start(folder)
        except ValidationError as exc:
            wx.CallAfter(self._window.show_error, str(exc))

    def _change_folder(self, folder: str) -> None:
        try:
            self.session.change_folder(folder)
        except ValidationError as exc:
            wx.CallAfter(self._window.show_error, str(exc))

    def _in_background(self, target, name: str) -> None:
        """Run *target* off the UI thread; scans and joins can take a while."""

        def _run():
            try:
                target()
            except Exception:
                logger.exception("Background task %s failed.", name)

        threading.Thread(target=_run, daemon=True, name=name).start()

    # ------------------------------------------------------------------
    # Session callbacks (worker threads)
    # ------------------------------------------------------------------

    def _on_log(self, line: str) -> None:
        if not self._closing:
            wx.CallAfter(self._window.append_log, line)

    def _on_status_change(self, processed: int, failed: int, running: bool) -> None:
        if not self._closing:
            wx.CallAfter(
                self._window.set_status,
                format_status(processed, failed, running),
                running,
            )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _setup_logging(self) -> None:
        """Configure rotating file log and stderr handler."""
        log_path = get_log_path()
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

        # Rotating file handler
        max_bytes = self.config.max_log_size_mb * 1024 * 1024
        fh = logging.handlers.RotatingFileHandler(
            str(log_path),
            maxBytes=max_bytes,
            backupCount=self.config.log_backup_count,
            encoding="utf-8",
        )
        fh.setLevel(level)
        fh.setFormatter(fmt)
        root_logger.addHandler(fh)

        # Stderr handler (for development)
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(level)
        sh.setFormatter(fmt)
        root_logger.addHandler(sh)
