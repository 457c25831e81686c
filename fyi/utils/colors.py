"""ANSI escape codes and terminal color support detection."""

from dataclasses import dataclass
from enum import Enum
from typing import IO, Optional, Union

from rich.console import Console

from ..errors import InvalidColorError


class Ansi:
    """Terminal escape sequences."""

    # Attributes
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    ITALIC = "\033[3m"
    UNDERLINE = "\033[4m"
    BLINK = "\033[5m"
    REVERSE = "\033[7m"
    STRIKE = "\033[9m"

    # Regular colors
    BLACK = "\033[30m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Bright colors
    BRIGHT_BLACK = "\033[90m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_BLUE = "\033[94m"
    BRIGHT_MAGENTA = "\033[95m"
    BRIGHT_CYAN = "\033[96m"
    BRIGHT_WHITE = "\033[97m"

    # Cursor and line control
    LINE_START = "\r"
    CLEAR_LINE = "\033[2K"
    CURSOR_UP = "\033[1A"
    CURSOR_HIDE = "\033[?25l"
    CURSOR_SHOW = "\033[?25h"


class Style(Enum):
    """Named text attributes usable as a span style."""

    BOLD = Ansi.BOLD
    DIM = Ansi.DIM
    ITALIC = Ansi.ITALIC
    UNDERLINE = Ansi.UNDERLINE
    BLINK = Ansi.BLINK
    REVERSE = Ansi.REVERSE
    STRIKE = Ansi.STRIKE

    @property
    def code(self) -> str:
        return self.value


def color_code(color: int, minimum: int = 1) -> str:
    """Return the bold 256-color foreground sequence for a color index.

    Args:
        color: Color index between minimum and 255
        minimum: Lowest accepted index (prefixes reserve 0, plain spans allow it)

    Returns:
        Escape sequence, e.g. "\\033[1;38;5;199m"

    Raises:
        InvalidColorError: If the index is outside minimum-255
    """
    if isinstance(color, bool) or not isinstance(color, int) or not minimum <= color <= 255:
        raise InvalidColorError(color)
    return f"\033[1;38;5;{color}m"


@dataclass(frozen=True)
class StyledSpan:
    """A piece of text wrapped in a single style.

    The style is either a 256-color index or a named Style. When rendered with
    ANSI enabled, the output always opens with an escape sequence and closes
    with a reset, so no state leaks into whatever follows.
    """

    style: Union[int, Style]
    text: str

    def __post_init__(self) -> None:
        if not isinstance(self.style, Style):
            color_code(self.style, minimum=0)

    @property
    def open_code(self) -> str:
        if isinstance(self.style, Style):
            return self.style.code
        return color_code(self.style, minimum=0)

    def render(self, ansi: bool = True) -> str:
        if not ansi:
            return self.text
        return f"{self.open_code}{self.text}{Ansi.RESET}"


def is_terminal(stream: Optional[IO[str]], force_terminal: Optional[bool] = None) -> bool:
    """Check if a stream is an interactive terminal (cursor control works)."""
    return Console(file=stream, force_terminal=force_terminal).is_terminal


def supports_color(stream: Optional[IO[str]], force_terminal: Optional[bool] = None) -> bool:
    """Check if a stream should receive ANSI escape codes.

    Delegates the terminal checks to Rich, which honors NO_COLOR, FORCE_COLOR
    and TERM=dumb in addition to isatty().

    Args:
        stream: Output stream (None means stdout)
        force_terminal: Override terminal detection

    Returns:
        True if colors should be emitted
    """
    console = Console(file=stream, force_terminal=force_terminal)
    if not console.is_terminal:
        return False
    if console.is_dumb_terminal:
        return False
    return not console.no_color
