"""fyi: status messages and progress bars for the terminal."""

from .errors import (
    FyiError,
    InterruptedWhileRendering,
    InvalidColorError,
    ProgressError,
    TerminalUnavailableError,
    WriteFailureError,
)
from .msg import BuiltInKind, CustomKind, Message, MsgBuffer, TargetStream, build_message
from .progress import Progress, ProgressPhase

__version__ = "0.1.0"

__all__ = [
    "BuiltInKind",
    "CustomKind",
    "FyiError",
    "InterruptedWhileRendering",
    "InvalidColorError",
    "Message",
    "MsgBuffer",
    "Progress",
    "ProgressError",
    "ProgressPhase",
    "TargetStream",
    "TerminalUnavailableError",
    "WriteFailureError",
    "build_message",
]
