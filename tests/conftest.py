"""Pytest configuration and shared fixtures."""

import io
import threading

import pytest

from fyi.progress.state import ProgressState


@pytest.fixture(autouse=True)
def terminal_env(monkeypatch):
    """Pin the environment variables Rich reads for terminal detection.

    Without this, a CI runner exporting FORCE_COLOR or NO_COLOR would change
    which tests see colors.
    """
    for name in ("FORCE_COLOR", "NO_COLOR", "TTY_COMPATIBLE", "TTY_INTERACTIVE", "COLUMNS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            return self.now

    def advance(self, seconds: float) -> None:
        with self._lock:
            self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_state(clock: FakeClock):
    """Build a ProgressState driven by the fake clock."""

    def factory(total: int = 0, title=None) -> ProgressState:
        return ProgressState(total, title=title, clock=clock)

    return factory


class RecordingStream(io.StringIO):
    """StringIO that also keeps every individual write."""

    def __init__(self):
        super().__init__()
        self.writes: list[str] = []
        self._lock = threading.Lock()

    def write(self, text: str) -> int:
        with self._lock:
            self.writes.append(text)
            return super().write(text)


@pytest.fixture
def stream() -> RecordingStream:
    return RecordingStream()
