"""Forward terminal resize and interrupt signals to a progress driver."""

import signal
import threading
from typing import Any, Callable, Union

from .driver import ProgressDriver

Handler = Union[Callable[[int, Any], Any], int, None]


class SignalBridge:
    """Install SIGWINCH/SIGINT handlers that notify a driver.

    The handlers only flip the driver's flags, then hand the signal to
    whatever handler was installed before, so Python's default SIGINT
    behavior (KeyboardInterrupt in the main thread) is kept.

    Signal handlers can only be changed from the main thread; elsewhere
    install() does nothing and returns False.
    """

    def __init__(self, driver: ProgressDriver):
        self.driver = driver
        self._previous: dict[int, Handler] = {}

    @property
    def installed(self) -> bool:
        return bool(self._previous)

    def install(self) -> bool:
        if self.installed:
            return True
        if threading.current_thread() is not threading.main_thread():
            return False

        sigwinch = getattr(signal, "SIGWINCH", None)
        if sigwinch is not None:
            self._previous[sigwinch] = signal.signal(sigwinch, self._on_resize)
        self._previous[signal.SIGINT] = signal.signal(signal.SIGINT, self._on_interrupt)
        return True

    def uninstall(self) -> None:
        if not self.installed or threading.current_thread() is not threading.main_thread():
            return
        for signum, handler in self._previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
        self._previous.clear()

    def _on_resize(self, signum: int, frame: Any) -> None:
        self.driver.notify_resize()
        self._chain(signum, frame)

    def _on_interrupt(self, signum: int, frame: Any) -> None:
        self.driver.notify_interrupt()
        self._chain(signum, frame)

    def _chain(self, signum: int, frame: Any) -> None:
        previous = self._previous.get(signum)
        if callable(previous):
            previous(signum, frame)
        elif previous == signal.SIG_DFL and signum == signal.SIGINT:
            raise KeyboardInterrupt
