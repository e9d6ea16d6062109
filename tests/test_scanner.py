import threading
import time
from pathlib import Path

from conftest import make_pdf
from preview_unblock.activity import ActivityLog
from preview_unblock.scanner import DirectoryScanner, iter_pdfs


class _Tracker:
    """Fake per-file processor that records concurrency."""

    def __init__(self, delay: float = 0.05) -> None:
        self.seen: list[str] = []
        self.active = 0
        self.peak = 0
        self._delay = delay
        self._lock = threading.Lock()

    def __call__(self, path: str) -> None:
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        time.sleep(self._delay)
        with self._lock:
            self.active -= 1
            self.seen.append(path)


def test_iter_pdfs_is_flat_and_case_insensitive(tmp_path: Path) -> None:
    make_pdf(tmp_path, "a.pdf", marked=False)
    make_pdf(tmp_path, "B.PDF", marked=False)
    make_pdf(tmp_path, "notes.txt", marked=False)
    (tmp_path / "folder.pdf").mkdir()
    nested = tmp_path / "nested"
    nested.mkdir()
    make_pdf(nested, "deep.pdf", marked=False)

    names = sorted(Path(p).name for p in iter_pdfs(str(tmp_path)))

    assert names == ["B.PDF", "a.pdf"]


def test_every_file_is_processed_within_the_cap(tmp_path: Path) -> None:
    for i in range(12):
        make_pdf(tmp_path, f"doc{i}.pdf", marked=False)
    tracker = _Tracker()
    activity = ActivityLog()

    DirectoryScanner(tracker, activity, max_workers=2).scan(str(tmp_path))

    assert len(tracker.seen) == 12
    assert len(set(tracker.seen)) == 12
    assert tracker.peak <= 2
    assert any("Scanning 12 existing PDF files..." in line for line in activity.lines)
    assert activity.lines[-1].endswith("Initial scan complete.")


def test_empty_folder_is_reported(tmp_path: Path) -> None:
    activity = ActivityLog()
    tracker = _Tracker()

    DirectoryScanner(tracker, activity).scan(str(tmp_path))

    assert tracker.seen == []
    assert activity.lines[-1].endswith("No existing PDF files found.")


def test_missing_folder_is_logged_not_raised(tmp_path: Path) -> None:
    activity = ActivityLog()

    DirectoryScanner(_Tracker(), activity).scan(str(tmp_path / "removed"))

    assert any("Error scanning folder" in line for line in activity.lines)


def test_failing_file_does_not_stop_the_scan(tmp_path: Path) -> None:
    for name in ("a.pdf", "b.pdf", "c.pdf"):
        make_pdf(tmp_path, name, marked=False)
    done: list[str] = []

    def process(path: str) -> None:
        if path.endswith("b.pdf"):
            raise RuntimeError("corrupt")
        done.append(Path(path).name)

    activity = ActivityLog()
    DirectoryScanner(process, activity).scan(str(tmp_path))

    assert sorted(done) == ["a.pdf", "c.pdf"]
    assert activity.lines[-1].endswith("Initial scan complete.")
