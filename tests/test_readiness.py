import sys
import threading
import time
from pathlib import Path

import pytest

from preview_unblock.readiness import await_ready

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="lock holder below uses fcntl"
)


def _hold_exclusive(path: Path, seconds: float) -> threading.Event:
    """Lock *path* like a writer would; return an event set once locked."""
    import fcntl

    locked = threading.Event()

    def holder() -> None:
        with open(path, "ab") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            locked.set()
            time.sleep(seconds)
            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    threading.Thread(target=holder, daemon=True).start()
    assert locked.wait(2)
    return locked


def test_idle_file_is_ready(tmp_path: Path) -> None:
    pdf = tmp_path / "a.pdf"
    pdf.write_bytes(b"%PDF")
    assert await_ready(str(pdf), max_attempts=3, delay_ms=10) is True


def test_missing_file_gives_up_immediately(tmp_path: Path) -> None:
    started = time.monotonic()
    assert await_ready(str(tmp_path / "gone.pdf"), max_attempts=3, delay_ms=200) is False
    # Only the first pause elapses; no retries for a vanished file.
    assert time.monotonic() - started < 0.5


def test_file_released_within_budget_becomes_ready(tmp_path: Path) -> None:
    pdf = tmp_path / "d.pdf"
    pdf.write_bytes(b"%PDF")
    _hold_exclusive(pdf, 1.2)

    started = time.monotonic()
    assert await_ready(str(pdf)) is True
    elapsed = time.monotonic() - started
    assert 1.0 <= elapsed <= 2.0


def test_file_held_too_long_is_not_ready(tmp_path: Path) -> None:
    pdf = tmp_path / "busy.pdf"
    pdf.write_bytes(b"%PDF")
    _hold_exclusive(pdf, 2.0)

    started = time.monotonic()
    assert await_ready(str(pdf), max_attempts=3, delay_ms=50) is False
    assert time.monotonic() - started < 1.0


def test_idle_file_without_settling_is_ready_at_once(tmp_path: Path) -> None:
    pdf = tmp_path / "a.pdf"
    pdf.write_bytes(b"%PDF")

    started = time.monotonic()
    assert await_ready(str(pdf), max_attempts=3, delay_ms=500, settle_first=False) is True
    assert time.monotonic() - started < 0.3


def test_busy_file_without_settling_still_retries(tmp_path: Path) -> None:
    pdf = tmp_path / "d.pdf"
    pdf.write_bytes(b"%PDF")
    _hold_exclusive(pdf, 0.5)

    started = time.monotonic()
    assert await_ready(str(pdf), max_attempts=3, delay_ms=400, settle_first=False) is True
    assert 0.3 <= time.monotonic() - started <= 1.2
