import time
from pathlib import Path
from typing import Callable

import pytest

from preview_unblock.config import Config
from preview_unblock.monitor import MonitorSession
from preview_unblock.platform_utils import marker_path


def make_pdf(folder: Path, name: str, marked: bool = True) -> Path:
    """Create *name* in *folder*, writing the marker first when *marked*."""
    path = folder / name
    if marked:
        Path(marker_path(str(path))).write_text(
            "[ZoneTransfer]\nZoneId=3\n", encoding="utf-8"
        )
    path.write_bytes(b"%PDF-1.7\n%%EOF\n")
    return path


def has_marker(path: Path) -> bool:
    return Path(marker_path(str(path))).exists()


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


class Recorder:
    """Collects what the session reports to its UI callbacks."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.statuses: list[tuple[int, int, bool]] = []

    def on_log(self, line: str) -> None:
        self.lines.append(line)

    def on_status_change(self, processed: int, failed: int, running: bool) -> None:
        self.statuses.append((processed, failed, running))

    def lines_about(self, name: str) -> list[str]:
        return [line for line in self.lines if f": {name}" in line]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def session(recorder: Recorder):
    sess = MonitorSession(
        on_log=recorder.on_log,
        on_status_change=recorder.on_status_change,
        config=Config(ready_delay_ms=20),
    )
    yield sess
    sess.stop()
