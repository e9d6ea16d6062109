"""Start-up pass over PDFs that were already in the folder."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed

from preview_unblock.activity import ActivityLog
from preview_unblock.errors import EnumerationError
from preview_unblock.unblocker import is_pdf

logger = logging.getLogger(__name__)


def iter_pdfs(folder: str) -> Iterator[str]:
    """Yield PDFs directly inside *folder* (no recursion).

    Raises :class:`EnumerationError` if the listing itself fails; entries
    yielded before the failure remain valid.
    """
    try:
        with os.scandir(folder) as entries:
            for entry in entries:
                if not is_pdf(entry.name):
                    continue
                try:
                    if not entry.is_file():
                        continue
                except OSError as exc:
                    logger.debug("Cannot stat %s: %s", entry.path, exc)
                    continue
                yield entry.path
    except OSError as exc:
        raise EnumerationError(f"Error scanning folder: {exc}") from exc


class DirectoryScanner:
    """Runs every existing PDF through *process* with bounded parallelism."""

    def __init__(
        self,
        process: Callable[[str], None],
        activity: ActivityLog,
        max_workers: int = 4,
    ):
        self._process = process
        self._activity = activity
        self.max_workers = max_workers

    def scan(self, folder: str) -> None:
        files: list[str] = []
        try:
            for path in iter_pdfs(folder):
                files.append(path)
        except EnumerationError as exc:
            self._activity.warning(str(exc))

        if not files:
            self._activity.write("No existing PDF files found.")
            return

        self._activity.write(f"Scanning {len(files)} existing PDF files...")
        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="Scan"
        ) as executor:
            future_map = {executor.submit(self._process, path): path for path in files}
            for future in as_completed(future_map):
                try:
                    future.result()
                except Exception:
                    logger.exception("Error processing %s during scan", future_map[future])
        self._activity.write("Initial scan complete.")
