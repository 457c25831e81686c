"""Progress package: a thread-safe terminal progress bar.

The main entry point is `Progress`, which owns the shared state and the
background thread that draws it.

Usage:
    with Progress.new(total=3) as progress:
        with progress.task("alpha"):
            ...
"""

from .driver import ProgressDriver
from .progress import Progress, TaskGuard
from .signals import SignalBridge
from .state import ProgressPhase, ProgressSnapshot, ProgressState
from .task import ProgressTask

__all__ = [
    "Progress",
    "ProgressDriver",
    "ProgressPhase",
    "ProgressSnapshot",
    "ProgressState",
    "ProgressTask",
    "SignalBridge",
    "TaskGuard",
]
