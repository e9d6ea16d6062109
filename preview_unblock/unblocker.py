"""
Marker removal engine for Preview Unblock.

Deletes the ``Zone.Identifier`` marker attached to a PDF and classifies
what happened.  Counters are shared by every worker thread, so all
updates go through :class:`StatsCounter`.
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from preview_unblock.config import PDF_SUFFIX
from preview_unblock.platform_utils import marker_path

logger = logging.getLogger(__name__)


class FileOutcome(str, Enum):
    """Result of one attempt to unblock a file."""

    UNBLOCKED = "Unblocked"
    ALREADY_CLEAN = "AlreadyClean"
    ACCESS_DENIED = "AccessDenied"
    FAILED = "Failed"
    SKIPPED = "Skipped"


@dataclass
class StatsCounter:
    """Processed/failed totals for the current session.

    *on_change* runs while the lock is held, so listeners see every
    snapshot in the order the counters changed.  It may read the counter
    back but must not block.
    """
    processed: int = 0
    failed: int = 0
    on_change: Callable[[int, int], None] | None = field(default=None, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def increment_processed(self) -> None:
        with self._lock:
            self.processed += 1
            self._notify()

    def increment_failed(self) -> None:
        with self._lock:
            self.failed += 1
            self._notify()

    def reset(self) -> None:
        """Zero both counters (called at session start)."""
        with self._lock:
            self.processed = 0
            self.failed = 0
            self._notify()

    def snapshot(self) -> tuple[int, int]:
        """Return ``(processed, failed)`` read under the lock."""
        with self._lock:
            return self.processed, self.failed

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self.processed, self.failed)
        except Exception:
            logger.exception("Error in stats on_change callback")


def is_pdf(path: str) -> bool:
    """Return True if *path* ends with ``.pdf`` in any letter case."""
    return path.lower().endswith(PDF_SUFFIX)


class MarkerStripper:
    """
    Removes the download marker from one PDF at a time.

    Parameters
    ----------
    stats : StatsCounter
        Counters updated for ``Unblocked``, ``AccessDenied`` and ``Failed``.
    on_result : callable, optional
        Invoked after each attempt with ``(path, outcome, detail)`` where
        *detail* carries the error text for failures.
    """

    def __init__(
        self,
        stats: StatsCounter,
        on_result: Callable[[str, FileOutcome, str], None] | None = None,
    ):
        self.stats = stats
        self._on_result = on_result

    def strip(self, path: str) -> FileOutcome:
        """Delete the marker of *path* and return the classified outcome.

        Never raises; every failure is reported as an outcome.
        """
        detail = ""
        try:
            outcome, detail = self._do_strip(path)
        except Exception as exc:
            logger.exception("Unexpected error unblocking %s", path)
            outcome, detail = FileOutcome.FAILED, str(exc)
            self.stats.increment_failed()

        if self._on_result:
            try:
                self._on_result(path, outcome, detail)
            except Exception:
                logger.exception("Error in on_result callback")
        return outcome

    def _do_strip(self, path: str) -> tuple[FileOutcome, str]:
        if not is_pdf(path):
            return FileOutcome.SKIPPED, "not a PDF"
        # Time may have passed since the path was observed.
        if not os.path.isfile(path):
            logger.debug("File vanished before unblock: %s", path)
            return FileOutcome.SKIPPED, "file no longer exists"

        try:
            os.remove(marker_path(path))
        except FileNotFoundError:
            logger.debug("No marker on %s", path)
            return FileOutcome.ALREADY_CLEAN, ""
        except PermissionError as exc:
            self.stats.increment_failed()
            logger.warning("Access denied removing marker from %s: %s", path, exc)
            return FileOutcome.ACCESS_DENIED, exc.strerror or str(exc)
        except OSError as exc:
            self.stats.increment_failed()
            logger.error("Failed to remove marker from %s: %s", path, exc)
            return FileOutcome.FAILED, exc.strerror or str(exc)

        self.stats.increment_processed()
        logger.info("Removed marker from %s", path)
        return FileOutcome.UNBLOCKED, ""
