"""The Progress handle: a thread-safe progress bar for the terminal."""

import sys
from typing import IO, Optional, Union

from ..errors import InterruptedWhileRendering
from ..msg.kind import MsgKind
from ..msg.message import Message
from ..utils.colors import is_terminal, supports_color
from ..utils.numbers import nice_elapsed, nice_int
from .driver import ABORT_TIMEOUT, TICK_INTERVAL, ProgressDriver
from .signals import SignalBridge
from .state import ProgressPhase, ProgressState

SPLINES_COLOR = 199
SPLINES_BODY = "Reticulating splines…"


class TaskGuard:
    """Context manager tracking one in-flight task.

    The label is registered on creation and completed on exit, whether the
    block finished normally or not. Call cancel() to drop the label without
    counting it as done.
    """

    def __init__(self, progress: "Progress", label: str):
        self.progress = progress
        self.label = label
        self.active = progress.add_task(label)

    def cancel(self) -> None:
        if self.active:
            self.progress.cancel_task(self.label)
            self.active = False

    def __enter__(self) -> "TaskGuard":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.active:
            self.progress.complete_task(self.label)
            self.active = False


class Progress:
    """A progress bar shared by any number of worker threads.

    Rendering happens on a background thread that only draws when the stream
    is a terminal; counters and labels are tracked either way, so summary()
    works in pipelines too.

    Usage:
        with Progress.new(len(files)) as progress:
            for path in files:
                with progress.task(path.name):
                    crunch(path)
        progress.summary(BuiltInKind.CRUNCHED, "file", "files").print()
    """

    def __init__(
        self,
        total: int = 0,
        title: Union[Message, str, None] = None,
        stream: Optional[IO[str]] = None,
        width: Optional[int] = None,
        tick_interval: float = TICK_INTERVAL,
        force_terminal: Optional[bool] = None,
        color: Optional[bool] = None,
        install_signals: bool = True,
    ):
        """Initialize the bar without starting it.

        Args:
            total: Number of tasks expected (0 starts idle)
            title: Optional title shown above the bar
            stream: Output stream (defaults to stderr)
            width: Fixed width; None measures the terminal
            tick_interval: Seconds between redraws
            force_terminal: Override terminal detection
            color: Override color detection
            install_signals: Whether to bridge SIGWINCH/SIGINT while running

        Raises:
            ProgressError: If total is negative
        """
        self.stream = stream or sys.stderr
        self.state = ProgressState(total, title=title)
        self.enabled = is_terminal(self.stream, force_terminal)
        if color is None:
            color = supports_color(self.stream, force_terminal)
        self.driver = ProgressDriver(
            self.state,
            stream=self.stream,
            tick_interval=tick_interval,
            width=width,
            ansi=color,
        )
        self.signals = SignalBridge(self.driver) if install_signals else None

    @classmethod
    def new(cls, total: int = 0, **kwargs) -> "Progress":
        """Create a bar and start drawing it."""
        progress = cls(total, **kwargs)
        progress.start()
        return progress

    def start(self) -> None:
        if not self.enabled or self.state.phase is ProgressPhase.DONE:
            return
        if self.signals is not None:
            self.signals.install()
        self.driver.start()

    # =========================================================================
    # Reporting
    # =========================================================================

    def add_task(self, label: str) -> bool:
        return self.state.add_task(label)

    def complete_task(self, label: str) -> bool:
        return self.state.complete_task(label)

    def cancel_task(self, label: str) -> bool:
        return self.state.cancel_task(label)

    def increment(self, amount: int = 1) -> None:
        self.state.increment(amount)

    def set_done(self, done: int) -> None:
        self.state.set_done(done)

    def set_title(self, title: Union[Message, str, None]) -> None:
        self.state.set_title(title)

    def set_reticulating_splines(self, app: str) -> None:
        """Set a whimsical "<app>: Reticulating splines..." title."""
        self.state.set_title(Message.custom(app, SPLINES_COLOR, SPLINES_BODY))

    def task(self, label: str) -> TaskGuard:
        """Track a task for the duration of a with block."""
        return TaskGuard(self, label)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def phase(self) -> ProgressPhase:
        return self.state.phase

    @property
    def total(self) -> int:
        return self.state.total

    @property
    def completed(self) -> int:
        return self.state.done

    @property
    def elapsed(self) -> float:
        return self.state.elapsed

    @property
    def is_done(self) -> bool:
        return self.state.phase is ProgressPhase.DONE

    # =========================================================================
    # Shutdown
    # =========================================================================

    def finish(self) -> None:
        """Mark everything done, draw the final frame and stop the thread.

        Raises:
            WriteFailureError: If the bar could not be written
        """
        self.state.finish()
        try:
            self.driver.stop()
        finally:
            if self.signals is not None:
                self.signals.uninstall()

    def abort(self, timeout: float = ABORT_TIMEOUT) -> None:
        """Stop drawing without finishing, waiting at most timeout seconds."""
        self.driver.notify_interrupt()
        try:
            self.driver.abort(timeout)
        finally:
            if self.signals is not None:
                self.signals.uninstall()

    def summary(self, kind: MsgKind, singular: str, plural: str) -> Message:
        """Describe the work done, e.g. "Crunched: 3 files in 2 seconds."."""
        done = self.completed
        noun = singular if done == 1 else plural
        return Message(kind=kind, body=f"{nice_int(done)} {noun} in {nice_elapsed(self.elapsed)}.")

    def done_message(self) -> Message:
        """A "Done: Finished in ..." message."""
        return Message.done(f"Finished in {nice_elapsed(self.elapsed)}.")

    def __enter__(self) -> "Progress":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.finish()
            return
        self.abort()
        if issubclass(exc_type, KeyboardInterrupt) and not isinstance(exc, InterruptedWhileRendering):
            raise InterruptedWhileRendering("Interrupted while drawing progress.") from exc
