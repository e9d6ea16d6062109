"""User-facing activity log.

Every line is stamped and handed to the UI sink under one lock, so lines
from concurrent workers arrive in a single serial order.  The last lines
are kept so a viewer opened later can replay them.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from datetime import datetime

logger = logging.getLogger(__name__)

# Classification markers shown in front of each message
MARK_UNBLOCKED = "\u2713"  # check mark
MARK_CLEAN = "\u2192"  # right arrow
MARK_FAILED = "\u2717"  # ballot x
MARK_WARNING = "\u26a0\ufe0f"  # warning sign

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ActivityLog:
    """Serialised, timestamped log sink with bounded history."""

    def __init__(
        self,
        on_log: Callable[[str], None] | None = None,
        max_lines: int = 1000,
    ):
        self._on_log = on_log
        self._lines: deque[str] = deque(maxlen=max_lines)
        self._lock = threading.Lock()

    def write(self, message: str, level: int = logging.INFO) -> str:
        """Stamp *message*, record it and forward it to the sink."""
        with self._lock:
            line = f"[{datetime.now().strftime(_TIME_FORMAT)}] {message}"
            self._lines.append(line)
            logger.log(level, "%s", message)
            if self._on_log:
                try:
                    self._on_log(line)
                except Exception:
                    logger.exception("Error in on_log callback")
        return line

    def warning(self, message: str) -> str:
        return self.write(f"{MARK_WARNING} {message}", logging.WARNING)

    @property
    def lines(self) -> list[str]:
        """Return a copy of the retained lines, oldest first."""
        with self._lock:
            return list(self._lines)
