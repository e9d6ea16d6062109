import time
from pathlib import Path

from watchdog.events import FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from conftest import wait_for
from preview_unblock.errors import NotificationError
from preview_unblock.watcher import FolderWatcher, PdfEventHandler


def test_handler_forwards_only_pdf_files() -> None:
    seen: list[str] = []
    handler = PdfEventHandler(seen.append)

    handler.dispatch(FileCreatedEvent("/in/a.pdf"))
    handler.dispatch(FileModifiedEvent("/in/A.PDF"))
    handler.dispatch(FileCreatedEvent("/in/notes.txt"))
    handler.dispatch(FileCreatedEvent("/in/a.pdf:Zone.Identifier"))

    assert seen == ["/in/a.pdf", "/in/A.PDF"]


def test_handler_uses_new_name_on_rename() -> None:
    seen: list[str] = []
    handler = PdfEventHandler(seen.append)

    handler.dispatch(FileMovedEvent("/in/a.pdf.part", "/in/a.pdf"))
    handler.dispatch(FileMovedEvent("/in/b.pdf", "/in/b.bak"))

    assert seen == ["/in/a.pdf"]


def test_watcher_dispatches_new_files(tmp_path: Path) -> None:
    seen: list[str] = []
    watcher = FolderWatcher(str(tmp_path), seen.append)
    watcher.start()
    try:
        assert watcher.is_running
        (tmp_path / "fresh.pdf").write_bytes(b"%PDF")
        assert wait_for(lambda: str(tmp_path / "fresh.pdf") in seen)
    finally:
        watcher.stop()
    assert not watcher.is_running


def test_watcher_ignores_subfolders(tmp_path: Path) -> None:
    nested = tmp_path / "nested"
    nested.mkdir()
    seen: list[str] = []
    watcher = FolderWatcher(str(tmp_path), seen.append)
    watcher.start()
    try:
        (nested / "deep.pdf").write_bytes(b"%PDF")
        time.sleep(0.5)
    finally:
        watcher.stop()
    assert seen == []


def test_nothing_is_dispatched_after_stop(tmp_path: Path) -> None:
    seen: list[str] = []
    watcher = FolderWatcher(str(tmp_path), seen.append)
    watcher.start()
    watcher.stop()

    (tmp_path / "late.pdf").write_bytes(b"%PDF")
    time.sleep(0.5)

    assert seen == []


def test_dead_observer_is_reported_once(tmp_path: Path) -> None:
    errors: list[NotificationError] = []
    watcher = FolderWatcher(str(tmp_path), lambda path: None, on_error=errors.append)
    watcher.start()
    try:
        watcher._observer.stop()
        watcher._observer.join(timeout=5)
        assert wait_for(lambda: len(errors) == 1, timeout=5)
        time.sleep(1.5)
        assert len(errors) == 1
    finally:
        watcher.stop()


def test_worker_errors_are_contained(tmp_path: Path) -> None:
    calls: list[str] = []

    def flaky(path: str) -> None:
        calls.append(path)
        raise RuntimeError("worker blew up")

    watcher = FolderWatcher(str(tmp_path), flaky)
    watcher.start()
    try:
        (tmp_path / "one.pdf").write_bytes(b"%PDF")
        assert wait_for(lambda: len(calls) >= 1)
        (tmp_path / "two.pdf").write_bytes(b"%PDF")
        assert wait_for(lambda: str(tmp_path / "two.pdf") in calls)
    finally:
        watcher.stop()
