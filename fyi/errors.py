"""Exceptions raised by fyi."""


class FyiError(Exception):
    """Base exception class for all fyi errors."""


class InvalidColorError(FyiError, ValueError):
    """Raised when a custom prefix color is outside the 1-255 range.

    Color 0 is the terminal's "reset" slot, so it cannot be used to paint a
    prefix. The value is rejected rather than clamped.

    Attributes:
        color: The rejected color index.
    """

    def __init__(self, color: int) -> None:
        self.color = color
        super().__init__(f"Invalid prefix color {color!r}: expected a number between 1 and 255.")


class TerminalUnavailableError(FyiError):
    """Raised when the terminal width cannot be determined (e.g. piped output)."""


class WriteFailureError(FyiError):
    """Raised when an output stream rejects a write (e.g. a broken pipe)."""


class ProgressError(FyiError, ValueError):
    """Raised when a progress bar is given an empty task label or a bad total."""


class InterruptedWhileRendering(KeyboardInterrupt):
    """Raised when the user interrupts the process while a progress bar is drawn.

    This stays a KeyboardInterrupt so callers (and the interpreter) still treat
    it as an interrupt; the terminal has already been restored by the time it
    is raised.
    """
