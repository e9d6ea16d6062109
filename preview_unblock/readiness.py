"""Write-completion check for files that just triggered a change event.

Change notifications fire while the writer may still be flushing, so a
file is only handed on once it can be opened with no sharing at all.
"""

from __future__ import annotations

import logging
import time

from preview_unblock.platform_utils import IS_WINDOWS

if IS_WINDOWS:
    import pywintypes  # type: ignore[import-untyped]
    import win32file  # type: ignore[import-untyped]
else:
    import fcntl

logger = logging.getLogger(__name__)

_ERROR_SHARING_VIOLATION = 32
_ERROR_LOCK_VIOLATION = 33


class FileBusy(Exception):
    """Another process still holds the file."""


def _probe_exclusive(path: str) -> None:
    """Open *path* exclusively and release it at once.

    Raises :class:`FileBusy` when another handle prevents exclusive
    access, or :class:`OSError` for anything else.
    """
    if IS_WINDOWS:
        try:
            handle = win32file.CreateFile(
                path,
                win32file.GENERIC_READ,
                0,  # no sharing
                None,
                win32file.OPEN_EXISTING,
                win32file.FILE_ATTRIBUTE_NORMAL,
                None,
            )
        except pywintypes.error as exc:
            if exc.winerror in (_ERROR_SHARING_VIOLATION, _ERROR_LOCK_VIOLATION):
                raise FileBusy(path) from exc
            raise OSError(exc.winerror, exc.strerror, path) from exc
        handle.Close()
        return

    with open(path, "rb") as fh:
        try:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as exc:
            raise FileBusy(path) from exc
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)


def await_ready(
    path: str,
    max_attempts: int = 3,
    delay_ms: int = 500,
    settle_first: bool = True,
) -> bool:
    """Return True once *path* can be opened exclusively.

    With *settle_first* every attempt waits *delay_ms* first, which gives a
    writer that has only just created the file time to take its lock.
    Without it the first probe is immediate and only retries wait.  Either
    way the whole call is bounded by ``max_attempts * delay_ms``.  A
    failure unrelated to locking (the file vanished, permissions) gives up
    immediately.
    """
    for attempt in range(1, max_attempts + 1):
        if delay_ms and (settle_first or attempt > 1):
            time.sleep(delay_ms / 1000)
        try:
            _probe_exclusive(path)
        except FileBusy:
            logger.debug(
                "File still in use (attempt %d/%d): %s", attempt, max_attempts, path
            )
            continue
        except OSError as exc:
            logger.debug("Readiness check failed for %s: %s", path, exc)
            return False
        return True

    logger.info("Gave up waiting for %s after %d attempts", path, max_attempts)
    return False
