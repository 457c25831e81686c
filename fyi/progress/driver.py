"""Background thread that redraws a progress bar at a steady tick."""

import os
import sys
import threading
from typing import IO, Optional

from ..errors import TerminalUnavailableError, WriteFailureError
from ..utils.colors import Ansi
from .state import ProgressPhase, ProgressState

TICK_INTERVAL = 0.1
ABORT_TIMEOUT = 0.5


def measure_width(stream: IO[str]) -> int:
    """Return the width of the terminal behind a stream.

    Raises:
        TerminalUnavailableError: If the stream is not attached to a terminal
    """
    try:
        columns = os.get_terminal_size(stream.fileno()).columns
    except (AttributeError, ValueError, OSError) as e:
        raise TerminalUnavailableError(f"Cannot measure terminal width: {e}") from e
    if columns <= 0:
        raise TerminalUnavailableError("Terminal reported a width of 0 columns")
    return columns


def write_text(stream: IO[str], text: str) -> None:
    """Write and flush, converting stream failures to WriteFailureError."""
    try:
        stream.write(text)
        stream.flush()
    except (OSError, ValueError) as e:
        raise WriteFailureError(f"Unable to write progress output: {e}") from e


class ProgressDriver:
    """Owns the redraw thread for one ProgressState.

    The thread wakes every tick, applies any pending resize or interrupt
    notification, and writes a new frame if it differs from the last one.
    Once the state is done (or stop() is called) it draws the final frame
    exactly once, restores the cursor and exits.
    """

    def __init__(
        self,
        state: ProgressState,
        stream: Optional[IO[str]] = None,
        tick_interval: float = TICK_INTERVAL,
        width: Optional[int] = None,
        ansi: bool = True,
    ):
        """Initialize the driver.

        Args:
            state: State to draw
            stream: Output stream (defaults to stderr)
            tick_interval: Seconds between redraws
            width: Fixed width; None measures the terminal
            ansi: Whether frames are colored
        """
        self.state = state
        self.stream = stream or sys.stderr
        self.tick_interval = tick_interval
        self.fixed_width = width
        self.ansi = ansi

        self._stop = threading.Event()
        self._resized = threading.Event()
        self._interrupted = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[WriteFailureError] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the redraw thread (no-op if already running)."""
        if self.is_running:
            return
        self._stop.clear()
        self._error = None
        self._thread = threading.Thread(target=self._main_loop, name="fyi-progress", daemon=True)
        self._thread.start()

    def notify_resize(self) -> None:
        """Mark the terminal width as stale. Safe to call from a signal handler."""
        self._resized.set()

    def notify_interrupt(self) -> None:
        """Mark an interrupt. Safe to call from a signal handler."""
        self._interrupted.set()

    def stop(self) -> None:
        """Stop the thread after its final redraw and wait for it.

        Raises:
            WriteFailureError: If the thread could not write to the stream
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._error is not None:
            error, self._error = self._error, None
            raise error

    def abort(self, timeout: float = ABORT_TIMEOUT) -> None:
        """Stop without waiting longer than timeout.

        If the thread does not exit in time, the cursor is restored and the
        line ended from the calling thread instead. Write failures are not
        raised here; the caller is already unwinding.
        """
        self._stop.set()
        thread = self._thread
        if thread is None:
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            try:
                write_text(self.stream, Ansi.CURSOR_SHOW + "\n")
            except WriteFailureError:
                pass
        else:
            self._thread = None
        self._error = None

    # =========================================================================
    # Thread body
    # =========================================================================

    def _width(self) -> int:
        if self.fixed_width is not None:
            return self.fixed_width
        return self.state.terminal_width(lambda: measure_width(self.stream))

    def tick(self, final: bool = False) -> None:
        """Apply pending notifications and write one frame if needed."""
        if self._resized.is_set():
            self._resized.clear()
            self.state.invalidate_width()
        if self._interrupted.is_set():
            self._interrupted.clear()
            self.state.interrupt()

        frame = self.state.redraw(self._width(), self.ansi, final=final)
        if frame:
            write_text(self.stream, frame)

    def _main_loop(self) -> None:
        try:
            write_text(self.stream, Ansi.CURSOR_HIDE)
            while not self._stop.wait(self.tick_interval):
                if self.state.phase is ProgressPhase.DONE:
                    break
                self.tick()
            self.tick(final=True)
        except WriteFailureError as e:
            self._error = e
        finally:
            try:
                write_text(self.stream, Ansi.CURSOR_SHOW)
            except WriteFailureError as e:
                self._error = self._error or e
