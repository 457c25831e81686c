"""Tests for the progress driver thread, the Progress handle and signal bridging."""

import io
import signal
import threading
import time
from unittest.mock import MagicMock, PropertyMock, patch

import pytest

from fyi.errors import InterruptedWhileRendering, TerminalUnavailableError, WriteFailureError
from fyi.msg.kind import BuiltInKind, CustomKind
from fyi.progress import Progress, ProgressDriver, ProgressPhase, SignalBridge
from fyi.progress.driver import measure_width
from fyi.progress.state import INTERRUPT_TITLE
from fyi.utils.colors import Ansi


def make_progress(total, stream, **kwargs) -> Progress:
    """Progress drawn to a fake terminal with fast ticks and a fixed width."""
    options = {
        "stream": stream,
        "force_terminal": True,
        "color": False,
        "width": 80,
        "tick_interval": 0.01,
        "install_signals": False,
    }
    options.update(kwargs)
    return Progress(total, **options)


def wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class BrokenStream(io.StringIO):
    def write(self, text: str) -> int:
        raise BrokenPipeError("Broken pipe")


class StuckStream(io.StringIO):
    """Stream that blocks the progress thread until released."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def write(self, text: str) -> int:
        if threading.current_thread().name == "fyi-progress":
            self.release.wait(5)
        return super().write(text)


class TestMeasureWidth:
    def test_non_terminal_stream(self):
        with pytest.raises(TerminalUnavailableError):
            measure_width(io.StringIO())


class TestProgressDriver:
    """Tests for ProgressDriver ticks (driven by hand, no thread)."""

    def test_tick_writes_frame(self, make_state, stream):
        driver = ProgressDriver(make_state(2), stream=stream, width=80, ansi=False)
        driver.tick()
        assert "0/2" in stream.getvalue()

    def test_tick_skips_identical_frames(self, make_state, stream):
        driver = ProgressDriver(make_state(2), stream=stream, width=80, ansi=False)
        driver.tick()
        driver.tick()
        assert len(stream.writes) == 1

    def test_resize_remeasures(self, make_state, stream):
        """The width is measured once, then again only after a resize."""
        driver = ProgressDriver(make_state(2), stream=stream, ansi=False)
        with patch("fyi.progress.driver.measure_width", side_effect=[100, 60]) as mock_measure:
            driver.tick()
            driver.tick()
            assert mock_measure.call_count == 1

            driver.notify_resize()
            driver.tick()
            assert mock_measure.call_count == 2

    def test_unmeasurable_terminal_uses_fallback(self, make_state, stream):
        state = make_state(2)
        driver = ProgressDriver(state, stream=stream, ansi=False)
        driver.tick()
        assert state.terminal_width(lambda: 1) == 80

    def test_interrupt_sets_warning_title(self, make_state, stream):
        driver = ProgressDriver(make_state(2), stream=stream, width=80, ansi=False)
        driver.notify_interrupt()
        driver.tick()
        assert f"Warning: {INTERRUPT_TITLE}" in stream.getvalue()

    def test_stop_without_start(self, make_state, stream):
        driver = ProgressDriver(make_state(2), stream=stream)
        driver.stop()
        driver.abort()
        assert stream.getvalue() == ""


class TestProgressLifecycle:
    """Tests for a running Progress with its background thread."""

    def test_three_tasks_exactly_one_final_redraw(self, stream):
        progress = make_progress(3, stream)
        progress.start()
        for label in ("a", "b", "c"):
            progress.add_task(label)
        progress.complete_task("a")
        progress.complete_task("b")

        assert progress.phase is ProgressPhase.RUNNING
        assert wait_for(lambda: "2/3" in stream.getvalue())

        progress.complete_task("c")
        assert progress.is_done
        progress.finish()
        progress.finish()

        output = stream.getvalue()
        assert progress.state.final_redraws == 1
        assert output.startswith(Ansi.CURSOR_HIDE)
        assert output.endswith("\n" + Ansi.CURSOR_SHOW)
        assert "3/3" in output
        assert "100.00%" in output
        assert not progress.driver.is_running

    def test_thread_stops_on_its_own_when_done(self, stream):
        progress = make_progress(1, stream)
        progress.start()
        progress.increment()
        assert wait_for(lambda: not progress.driver.is_running)
        assert progress.state.final_redraws == 1
        progress.finish()
        assert progress.state.final_redraws == 1

    def test_many_threads(self, stream):
        """Workers on several threads drive the bar to completion."""
        progress = make_progress(40, stream)
        progress.start()

        def worker(worker_id: int) -> None:
            for n in range(10):
                with progress.task(f"job-{worker_id}-{n}"):
                    time.sleep(0.001)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        progress.finish()

        assert progress.completed == 40
        assert progress.state.final_redraws == 1
        assert "40/40" in stream.getvalue()

    def test_non_terminal_stream_is_not_drawn(self):
        """Counters still work when output is piped; nothing is written."""
        stream = io.StringIO()
        progress = Progress.new(2, stream=stream, install_signals=False)
        assert progress.enabled is False
        progress.add_task("a")
        progress.complete_task("a")
        progress.increment()
        progress.finish()

        assert progress.completed == 2
        assert stream.getvalue() == ""

    def test_write_failure_raised_on_finish(self):
        progress = make_progress(2, BrokenStream())
        progress.start()
        with pytest.raises(WriteFailureError):
            progress.finish()

    def test_context_manager_finishes(self, stream):
        with make_progress(2, stream) as progress:
            progress.increment(2)
        assert progress.state.final_redraws == 1
        assert stream.getvalue().endswith(Ansi.CURSOR_SHOW)

    def test_keyboard_interrupt_becomes_interrupted_while_rendering(self, stream):
        with pytest.raises(InterruptedWhileRendering) as exc_info:
            with make_progress(5, stream) as progress:
                progress.increment()
                raise KeyboardInterrupt

        assert isinstance(exc_info.value, KeyboardInterrupt)
        assert not progress.driver.is_running
        assert not progress.is_done
        output = stream.getvalue()
        assert INTERRUPT_TITLE in output
        assert output.endswith("\n" + Ansi.CURSOR_SHOW)

    def test_other_errors_propagate(self, stream):
        with pytest.raises(RuntimeError):
            with make_progress(5, stream) as progress:
                raise RuntimeError("boom")
        assert not progress.driver.is_running

    def test_abort_does_not_wait_for_stuck_thread(self):
        """If the drawing thread is stuck, abort restores the terminal itself."""
        stream = StuckStream()
        progress = make_progress(2, stream)
        progress.start()

        started = time.monotonic()
        progress.abort(timeout=0.05)
        assert time.monotonic() - started < 1.0
        assert stream.getvalue() == Ansi.CURSOR_SHOW + "\n"

        stream.release.set()
        assert wait_for(lambda: not progress.driver.is_running)


class TestProgressHelpers:
    """Tests for guards, titles and summaries."""

    def test_task_guard_completes(self):
        progress = Progress(2, stream=io.StringIO(), install_signals=False)
        with progress.task("build") as guard:
            assert progress.state.labels == ["build"]
            assert guard.active
        assert progress.completed == 1
        assert progress.state.labels == []

    def test_task_guard_completes_on_error(self):
        progress = Progress(2, stream=io.StringIO(), install_signals=False)
        with pytest.raises(ValueError):
            with progress.task("build"):
                raise ValueError("bad input")
        assert progress.completed == 1

    def test_task_guard_cancel(self):
        progress = Progress(2, stream=io.StringIO(), install_signals=False)
        with progress.task("build") as guard:
            guard.cancel()
        assert progress.completed == 0
        assert progress.state.labels == []

    def test_set_reticulating_splines(self):
        progress = Progress(2, stream=io.StringIO(), install_signals=False)
        progress.set_reticulating_splines("MyApp")
        title = progress.state.snapshot().title
        assert title.kind == CustomKind("MyApp", 199)
        assert title.body == "Reticulating splines…"

    def test_summary(self):
        progress = Progress(3, stream=io.StringIO(), install_signals=False)
        progress.set_done(3)
        with patch.object(Progress, "elapsed", new_callable=PropertyMock, return_value=2.0):
            message = progress.summary(BuiltInKind.CRUNCHED, "file", "files")
        assert str(message) == "Crunched: 3 files in 2 seconds.\n"

    def test_summary_singular(self):
        progress = Progress(1, stream=io.StringIO(), install_signals=False)
        progress.increment()
        with patch.object(Progress, "elapsed", new_callable=PropertyMock, return_value=61.0):
            message = progress.summary(BuiltInKind.DONE, "file", "files")
        assert str(message) == "Done: 1 file in 1 minute and 1 second.\n"

    def test_done_message(self):
        progress = Progress(1, stream=io.StringIO(), install_signals=False)
        with patch.object(Progress, "elapsed", new_callable=PropertyMock, return_value=2.0):
            assert str(progress.done_message()) == "Done: Finished in 2 seconds.\n"


class TestSignalBridge:
    """Tests for SignalBridge."""

    def test_interrupt_notifies_and_chains(self):
        driver = MagicMock()
        previous = MagicMock()
        original = signal.signal(signal.SIGINT, previous)
        try:
            bridge = SignalBridge(driver)
            assert bridge.install() is True
            assert signal.getsignal(signal.SIGINT) == bridge._on_interrupt

            bridge._on_interrupt(signal.SIGINT, None)
            driver.notify_interrupt.assert_called_once()
            previous.assert_called_once_with(signal.SIGINT, None)

            bridge.uninstall()
            assert signal.getsignal(signal.SIGINT) is previous
        finally:
            signal.signal(signal.SIGINT, original)

    def test_default_handler_still_raises(self):
        driver = MagicMock()
        original = signal.signal(signal.SIGINT, signal.default_int_handler)
        bridge = SignalBridge(driver)
        try:
            bridge.install()
            with pytest.raises(KeyboardInterrupt):
                bridge._on_interrupt(signal.SIGINT, None)
            driver.notify_interrupt.assert_called_once()
        finally:
            bridge.uninstall()
            signal.signal(signal.SIGINT, original)

    @pytest.mark.skipif(not hasattr(signal, "SIGWINCH"), reason="No SIGWINCH on this platform")
    def test_resize_notifies(self):
        driver = MagicMock()
        bridge = SignalBridge(driver)
        try:
            bridge.install()
            bridge._on_resize(signal.SIGWINCH, None)
            driver.notify_resize.assert_called_once()
        finally:
            bridge.uninstall()

    def test_install_outside_main_thread(self):
        bridge = SignalBridge(MagicMock())
        results = []
        thread = threading.Thread(target=lambda: results.append(bridge.install()))
        thread.start()
        thread.join()
        assert results == [False]
        assert not bridge.installed
