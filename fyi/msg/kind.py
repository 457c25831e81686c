"""Message kinds: the built-in prefixes and caller-defined custom ones."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..utils.colors import color_code


class TargetStream(Enum):
    """Where a message is written."""
    STDOUT = "stdout"
    STDERR = "stderr"


class BuiltInKind(Enum):
    """Built-in message prefix."""
    CONFIRM = "confirm"
    CRUNCHED = "crunched"
    DEBUG = "debug"
    DONE = "done"
    ERROR = "error"
    INFO = "info"
    NOTICE = "notice"
    SUCCESS = "success"
    TASK = "task"
    WARNING = "warning"

    @property
    def label(self) -> str:
        return BUILTIN_DISPLAY[self][0]

    @property
    def open_code(self) -> str:
        return BUILTIN_DISPLAY[self][1]

    @property
    def default_stream(self) -> TargetStream:
        return BUILTIN_DISPLAY[self][2]


# Prefix display configuration: (label, ansi_open, default_stream)
BUILTIN_DISPLAY = {
    BuiltInKind.CONFIRM: ("Confirm", "\033[1;38;5;208m", TargetStream.STDOUT),
    BuiltInKind.CRUNCHED: ("Crunched", "\033[92;1m", TargetStream.STDOUT),
    BuiltInKind.DEBUG: ("Debug", "\033[96;1m", TargetStream.STDOUT),
    BuiltInKind.DONE: ("Done", "\033[92;1m", TargetStream.STDOUT),
    BuiltInKind.ERROR: ("Error", "\033[91;1m", TargetStream.STDERR),
    BuiltInKind.INFO: ("Info", "\033[95;1m", TargetStream.STDOUT),
    BuiltInKind.NOTICE: ("Notice", "\033[95;1m", TargetStream.STDOUT),
    BuiltInKind.SUCCESS: ("Success", "\033[92;1m", TargetStream.STDOUT),
    BuiltInKind.TASK: ("Task", "\033[1;38;5;199m", TargetStream.STDOUT),
    BuiltInKind.WARNING: ("Warning", "\033[93;1m", TargetStream.STDERR),
}

# Names accepted on the command line, including aliases.
KIND_ALIASES = {
    "prompt": BuiltInKind.CONFIRM,
}


@dataclass(frozen=True)
class CustomKind:
    """A caller-defined prefix.

    The label is printed followed by a colon, painted in the given 256-color
    index. An empty label means "no prefix at all".

    Raises:
        InvalidColorError: If color is not between 1 and 255
    """

    label: str
    color: int = 199

    def __post_init__(self) -> None:
        color_code(self.color)

    @property
    def open_code(self) -> str:
        return color_code(self.color)

    @property
    def default_stream(self) -> TargetStream:
        return TargetStream.STDOUT

    @property
    def is_empty(self) -> bool:
        return self.label == ""


MsgKind = Union[BuiltInKind, CustomKind]


def kind_from_name(name: str) -> Optional[BuiltInKind]:
    """Look up a built-in kind by its lower-case name.

    Args:
        name: Kind name such as "error" (aliases like "prompt" are accepted)

    Returns:
        The matching kind, or None if the name is unknown
    """
    name = name.strip().lower()
    if name in KIND_ALIASES:
        return KIND_ALIASES[name]
    try:
        return BuiltInKind(name)
    except ValueError:
        return None


def prefix_parts(kind: MsgKind) -> tuple[str, str]:
    """Return the (label, ansi_open) pair for a kind.

    An empty label means the prefix and its separator are left out.
    """
    if isinstance(kind, BuiltInKind):
        return kind.label, kind.open_code
    if kind.is_empty:
        return "", ""
    return kind.label, kind.open_code
