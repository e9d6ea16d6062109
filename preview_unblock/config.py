"""Runtime settings for Preview Unblock.

Settings live in memory only; every run starts from the defaults below,
optionally overridden by keyword arguments.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"

DEFAULT_CONFIG: dict[str, Any] = {
    # ---- debounce ----
    "debounce_seconds": 5.0,  # duplicate events for one path are ignored this long
    # ---- readiness ----
    "ready_attempts": 3,  # exclusive-open attempts before giving up
    "ready_delay_ms": 500,  # pause before each attempt
    # ---- initial scan ----
    "scan_workers": 4,  # files processed in parallel at start-up
    # ---- activity log ----
    "max_log_lines": 1000,  # lines kept for the log viewport
    # ---- diagnostic log ----
    "log_level": "INFO",
    "max_log_size_mb": 5,
    "log_backup_count": 3,
}


class Config:
    """In-memory settings with clamped, typed accessors."""

    def __init__(self, **overrides: Any):
        """Start from the defaults and apply *overrides* for known keys."""
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        for key, value in overrides.items():
            if key not in DEFAULT_CONFIG:
                raise KeyError(f"Unknown setting: {key}")
            setattr(self, key, value)

    # ---- debounce ----

    @property
    def debounce_seconds(self) -> float:
        """Return how long a path stays in the debounce window."""
        return float(self._data["debounce_seconds"])

    @debounce_seconds.setter
    def debounce_seconds(self, value: float) -> None:
        """Set the debounce window (minimum 0 s)."""
        self._data["debounce_seconds"] = max(0.0, float(value))

    # ---- readiness ----

    @property
    def ready_attempts(self) -> int:
        """Return the number of exclusive-open attempts."""
        return int(self._data["ready_attempts"])

    @ready_attempts.setter
    def ready_attempts(self, value: int) -> None:
        """Set the number of exclusive-open attempts (minimum 1)."""
        self._data["ready_attempts"] = max(1, int(value))

    @property
    def ready_delay_ms(self) -> int:
        """Return the pause before each readiness attempt in milliseconds."""
        return int(self._data["ready_delay_ms"])

    @ready_delay_ms.setter
    def ready_delay_ms(self, value: int) -> None:
        """Set the readiness pause (minimum 0 ms)."""
        self._data["ready_delay_ms"] = max(0, int(value))

    # ---- initial scan ----

    @property
    def scan_workers(self) -> int:
        """Return the parallelism cap for the initial scan."""
        return int(self._data["scan_workers"])

    @scan_workers.setter
    def scan_workers(self, value: int) -> None:
        """Set the parallelism cap for the initial scan (minimum 1)."""
        self._data["scan_workers"] = max(1, int(value))

    # ---- activity log ----

    @property
    def max_log_lines(self) -> int:
        """Return the number of activity lines kept in history."""
        return int(self._data["max_log_lines"])

    @max_log_lines.setter
    def max_log_lines(self, value: int) -> None:
        """Set the activity history size (minimum 1)."""
        self._data["max_log_lines"] = max(1, int(value))

    # ---- diagnostic log ----

    @property
    def log_level(self) -> str:
        """Return the current logging level name."""
        return self._data.get("log_level", "INFO")

    @log_level.setter
    def log_level(self, value: str) -> None:
        """Set the logging level name."""
        self._data["log_level"] = str(value).upper()

    @property
    def max_log_size_mb(self) -> int:
        """Return the maximum log file size in MB before rotation."""
        return int(self._data.get("max_log_size_mb", 5))

    @max_log_size_mb.setter
    def max_log_size_mb(self, value: int) -> None:
        """Set the maximum log file size in MB (minimum 1)."""
        self._data["max_log_size_mb"] = max(1, int(value))

    @property
    def log_backup_count(self) -> int:
        """Return the number of rotated log backups to keep."""
        return int(self._data.get("log_backup_count", 3))

    @log_backup_count.setter
    def log_backup_count(self, value: int) -> None:
        """Set the number of rotated log backups to keep."""
        self._data["log_backup_count"] = max(0, int(value))
