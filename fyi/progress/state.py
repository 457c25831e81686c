"""Shared progress state and frame composition.

State machine:
- IDLE: nothing registered yet (total is 0); nothing is drawn
- RUNNING: total > 0 and not everything is done
- DONE: done == total, or finish() was called; terminal, no further changes

Every mutation takes the state lock for the duration of the update only.
Redrawing takes a snapshot under the lock and composes the frame outside it,
so a slow terminal never blocks the workers reporting progress.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional, Union

from ..errors import ProgressError, TerminalUnavailableError
from ..msg.message import Message
from ..utils.colors import Ansi, Style, StyledSpan
from ..utils.numbers import format_clock, nice_int, nice_percent
from ..utils.width import fitted_width
from .task import ProgressTask

DEFAULT_WIDTH = 80
MAX_VISIBLE_TASKS = 3
MIN_BAR_WIDTH = 10
MIN_DRAW_WIDTH = 40
MIN_LABEL_WIDTH = 6

BAR_DONE = "#"
BAR_UNDONE = "-"
TASK_MARK = "↳ "
LABEL_SEP = ", "
PIECE_SEP = "  "

INTERRUPT_TITLE = "Early shutdown in progress."


class ProgressPhase(Enum):
    """Progress lifecycle phase."""
    IDLE = auto()
    RUNNING = auto()
    DONE = auto()


@dataclass(frozen=True)
class ProgressSnapshot:
    """Consistent copy of the progress state at one instant."""
    phase: ProgressPhase
    total: int
    done: int
    labels: tuple[str, ...]
    elapsed: float
    title: Optional[Message] = None

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.done / self.total

    @property
    def eta(self) -> Optional[float]:
        """Estimated seconds remaining, or None while it cannot be known."""
        if self.done <= 0 or self.elapsed < 0.001:
            return None
        if self.done >= self.total:
            return 0.0
        return (self.total - self.done) * self.elapsed / self.done


class ProgressState:
    """Thread-safe counters, in-flight labels and render bookkeeping.

    Any number of threads may call the mutators. Rendering (redraw) must only
    be called from a single writer at a time, normally the progress driver.
    """

    def __init__(
        self,
        total: int = 0,
        title: Union[Message, str, None] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the state.

        Args:
            total: Number of tasks expected (0 starts idle)
            title: Optional title shown above the bar
            clock: Monotonic time source

        Raises:
            ProgressError: If total is negative
        """
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            raise ProgressError(f"Total must be a non-negative integer, got {total!r}")

        self.lock = threading.Lock()
        self._clock = clock
        self._total = total
        self._done = 0
        self._tasks: dict[str, ProgressTask] = {}
        self._title = _as_title(title)
        self._finished = False
        self._interrupted = False
        self._started = clock()
        self._stopped_at: Optional[float] = None
        self._width: Optional[int] = None

        # Render bookkeeping, owned by the single writer
        self.last_output: Optional[str] = None
        self._last_lines = 0
        self.frames_drawn = 0
        self.final_redraws = 0

    # =========================================================================
    # Queries
    # =========================================================================

    def _phase_locked(self) -> ProgressPhase:
        if self._finished:
            return ProgressPhase.DONE
        if self._total == 0:
            return ProgressPhase.IDLE
        return ProgressPhase.RUNNING

    @property
    def phase(self) -> ProgressPhase:
        with self.lock:
            return self._phase_locked()

    @property
    def total(self) -> int:
        with self.lock:
            return self._total

    @property
    def done(self) -> int:
        with self.lock:
            return self._done

    @property
    def elapsed(self) -> float:
        with self.lock:
            end = self._stopped_at if self._stopped_at is not None else self._clock()
            return end - self._started

    @property
    def labels(self) -> list[str]:
        with self.lock:
            return [task.label for task in self._tasks.values()]

    def snapshot(self) -> ProgressSnapshot:
        """Copy everything a frame needs while holding the lock."""
        with self.lock:
            end = self._stopped_at if self._stopped_at is not None else self._clock()
            return ProgressSnapshot(
                phase=self._phase_locked(),
                total=self._total,
                done=self._done,
                labels=tuple(task.text for task in self._tasks.values()),
                elapsed=end - self._started,
                title=self._title,
            )

    # =========================================================================
    # Mutators
    # =========================================================================

    def add_task(self, label: str) -> bool:
        """Register an in-flight task label.

        If the registered tasks would outgrow the total, the total grows to
        fit; this is how an idle bar (total 0) starts running.

        Returns:
            False if the label is already in flight or the bar is done

        Raises:
            ProgressError: If the label is empty
        """
        task = ProgressTask.new(label)
        with self.lock:
            if self._finished or label in self._tasks:
                return False
            self._tasks[label] = task
            needed = self._done + len(self._tasks)
            if needed > self._total:
                self._total = needed
            return True

    def complete_task(self, label: str) -> bool:
        """Remove a label and count it as done.

        Returns:
            False if the label is not in flight (nothing changes)
        """
        with self.lock:
            task = None if self._finished else self._tasks.pop(label, None)
            if task is None:
                return False
            task.done = True
            self._advance_locked(self._done + 1)
            return True

    def cancel_task(self, label: str) -> bool:
        """Remove a label without counting it as done."""
        with self.lock:
            if self._finished:
                return False
            return self._tasks.pop(label, None) is not None

    def increment(self, amount: int = 1) -> None:
        """Count work as done without touching the labels."""
        with self.lock:
            if not self._finished:
                self._advance_locked(self._done + amount)

    def set_done(self, done: int) -> None:
        """Set the done count directly (clamped to 0..total)."""
        with self.lock:
            if not self._finished:
                self._advance_locked(done)

    def set_title(self, title: Union[Message, str, None]) -> None:
        """Replace the title; None or "" removes it."""
        with self.lock:
            if not self._finished:
                self._title = _as_title(title)

    def interrupt(self) -> None:
        """Flag an early shutdown by swapping in a warning title."""
        with self.lock:
            if self._finished or self._interrupted:
                return
            self._interrupted = True
            self._title = _as_title(Message.warning(INTERRUPT_TITLE))

    def finish(self) -> None:
        """Jump straight to done, whatever the counters say."""
        with self.lock:
            if not self._finished:
                self._finish_locked()

    def _advance_locked(self, done: int) -> None:
        done = min(max(done, 0), self._total)
        self._done = done
        if self._total > 0 and done == self._total:
            self._finish_locked()

    def _finish_locked(self) -> None:
        self._finished = True
        self._done = self._total
        self._tasks.clear()
        self._stopped_at = self._clock()

    # =========================================================================
    # Terminal width
    # =========================================================================

    def terminal_width(self, measure: Callable[[], int]) -> int:
        """Return the cached width, measuring it first if needed.

        Args:
            measure: Width probe; may raise TerminalUnavailableError

        Returns:
            Terminal width in columns (DEFAULT_WIDTH if it cannot be measured)
        """
        with self.lock:
            if self._width is not None:
                return self._width

        try:
            width = measure()
        except TerminalUnavailableError:
            width = DEFAULT_WIDTH

        with self.lock:
            self._width = width
        return width

    def invalidate_width(self) -> None:
        """Forget the cached width so the next frame measures again."""
        with self.lock:
            self._width = None

    # =========================================================================
    # Rendering
    # =========================================================================

    def redraw(self, width: int, ansi: bool = True, final: bool = False) -> Optional[str]:
        """Compose the next frame, or None if there is nothing new to draw.

        Non-final frames are skipped while idle, once done, and when identical
        to the previous frame. The final frame is always emitted once the bar
        has left the idle phase and ends with a newline.

        Args:
            width: Terminal width in columns
            ansi: Whether to color the frame
            final: Whether this is the closing redraw

        Returns:
            Text to write (clear sequence plus frame), or None
        """
        snap = self.snapshot()
        if snap.total == 0:
            # Idle, or finished without ever having work
            return None
        if snap.phase is ProgressPhase.DONE and not final:
            return None

        frame = "\n".join(compose_frame(snap, width, ansi))
        if not final and frame == self.last_output:
            return None

        output = self._clear_sequence() + frame
        if final:
            if frame:
                output += "\n"
            self._last_lines = 0
            self.final_redraws += 1
        else:
            self._last_lines = frame.count("\n") + 1
        self.last_output = frame
        self.frames_drawn += 1
        return output

    def _clear_sequence(self) -> str:
        if self._last_lines == 0:
            return Ansi.LINE_START + Ansi.CLEAR_LINE
        up = (Ansi.CURSOR_UP + Ansi.LINE_START + Ansi.CLEAR_LINE) * (self._last_lines - 1)
        return Ansi.LINE_START + Ansi.CLEAR_LINE + up


def _as_title(title: Union[Message, str, None]) -> Optional[Message]:
    if title is None or title == "":
        return None
    if isinstance(title, str):
        title = Message.plain(title)
    return title.with_newline(False)


def _cols(pieces: list[tuple[str, str]]) -> int:
    if not pieces:
        return 0
    return sum(fitted_width(plain) for plain, _ in pieces) + len(PIECE_SEP) * (len(pieces) - 1)


def fit_labels(labels: tuple[str, ...], budget: int) -> str:
    """Fit in-flight labels into budget columns.

    Up to MAX_VISIBLE_TASKS labels are shown, each shortened as needed, with
    a "(+K more)" note when some are left out.
    """
    if not labels or budget <= 0:
        return ""

    tasks = [ProgressTask.new(label) for label in labels]
    for count in range(min(len(tasks), MAX_VISIBLE_TASKS), 0, -1):
        hidden = len(tasks) - count
        more = f" (+{hidden} more)" if hidden else ""
        room = budget - fitted_width(TASK_MARK) - len(more) - len(LABEL_SEP) * (count - 1)
        each = room // count
        if each >= MIN_LABEL_WIDTH or (count == 1 and each > 0):
            shown = LABEL_SEP.join(task.fit(each) for task in tasks[:count])
            return TASK_MARK + shown + more

    more = f"(+{len(tasks)} more)"
    return more if len(more) <= budget else ""


def compose_bar(done: int, total: int, columns: int, ansi: bool = True) -> tuple[str, str]:
    """Return the (plain, styled) bar, columns wide including brackets."""
    inner = columns - 2
    filled = inner if total <= 0 or done >= total else inner * done // total
    done_part = BAR_DONE * filled
    undone_part = BAR_UNDONE * (inner - filled)
    plain = f"[{done_part}{undone_part}]"
    if not ansi:
        return plain, plain
    styled = (
        f"{Ansi.DIM}[{Ansi.RESET}"
        f"{Ansi.BRIGHT_CYAN}{done_part}{Ansi.RESET}"
        f"{Ansi.BLUE}{undone_part}{Ansi.RESET}"
        f"{Ansi.DIM}]{Ansi.RESET}"
    )
    return plain, styled


def compose_line(snap: ProgressSnapshot, width: int, ansi: bool = True) -> str:
    """Compose the one-line bar for a snapshot.

    Layout (pieces dropped from the right when space runs out):

        [elapsed]  [####----]  done/total  percent  ETA hh:mm:ss  ↳ labels
    """
    usable = width - 1

    def piece(text: str, style: Union[int, Style, None] = None) -> tuple[str, str]:
        if style is None:
            return text, text
        return text, StyledSpan(style, text).render(ansi)

    eta = f"ETA {format_clock(snap.eta)}"
    pieces = [
        piece(f"[{format_clock(snap.elapsed)}]", Style.DIM),
        piece(f"{nice_int(snap.done)}/{nice_int(snap.total)}", Style.BOLD),
        piece(nice_percent(snap.fraction), Style.BOLD),
        piece(eta, Style.DIM),
    ]
    while len(pieces) > 1 and _cols(pieces) > usable:
        pieces.pop()

    spare = usable - _cols(pieces) - len(PIECE_SEP)
    bar_columns = spare // 2 if snap.labels else spare
    if bar_columns >= MIN_BAR_WIDTH:
        pieces.insert(1, compose_bar(snap.done, snap.total, bar_columns, ansi))

    labels = fit_labels(snap.labels, usable - _cols(pieces) - len(PIECE_SEP))
    if labels:
        pieces.append(piece(labels, 199))

    return PIECE_SEP.join(styled for _, styled in pieces)


def compose_frame(snap: ProgressSnapshot, width: int, ansi: bool = True) -> list[str]:
    """Compose every line of a frame: title line(s), then the bar.

    Returns an empty list when the terminal is narrower than MIN_DRAW_WIDTH.
    """
    if width < MIN_DRAW_WIDTH:
        return []

    lines = []
    if snap.title is not None:
        title = snap.title.fitted(width - 1, ansi).decode("utf-8", errors="replace")
        lines.extend(line for line in title.split("\n") if line)
    lines.append(compose_line(snap, width, ansi))
    return lines
