"""Message: an immutable status line (prefix, body, decorations) and its printing."""

import sys
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import IO, Optional, Union

from ..errors import WriteFailureError
from ..utils.colors import supports_color
from .buffer import MsgBuffer, render
from .kind import BuiltInKind, CustomKind, MsgKind, TargetStream, kind_from_name

# Confirmation hint appended to prompts: " [y/N] " with the N underlined.
CONFIRM_HINT = " \033[2m[y/\033[4mN\033[0;2m]\033[0m "
CONFIRM_HINT_PLAIN = " [y/N] "

AFFIRMATIVE = ("y", "yes")
NEGATIVE = ("", "n", "no")


def resolve_stream(target: TargetStream) -> IO[str]:
    """Return the live sys stream for a target (looked up at call time)."""
    return sys.stderr if target is TargetStream.STDERR else sys.stdout


def write_bytes(stream: IO[str], data: bytes) -> None:
    """Write raw bytes to a text stream, preferring its binary buffer.

    Raises:
        WriteFailureError: If the stream rejects the write
    """
    try:
        binary = getattr(stream, "buffer", None)
        if binary is not None:
            stream.flush()
            binary.write(data)
            binary.flush()
        else:
            stream.write(data.decode("utf-8", errors="surrogateescape"))
            stream.flush()
    except (OSError, ValueError) as e:
        raise WriteFailureError(f"Unable to write to {getattr(stream, 'name', 'stream')}: {e}") from e


@dataclass(frozen=True)
class Message:
    """A single status line.

    Messages are values: the with_* methods return updated copies. Rendering
    is deterministic, so two equal messages always produce the same bytes.

    Attributes:
        kind: Built-in or custom prefix
        body: Message text, printed verbatim
        indent: Indentation level (4 spaces each)
        timestamp: Time shown before the prefix, or None
        newline: Whether a trailing newline is printed
        suffix: Text printed after the body
        stream: Output target; None means the kind's default
    """

    kind: MsgKind = field(default_factory=lambda: CustomKind(""))
    body: str = ""
    indent: int = 0
    timestamp: Optional[datetime] = None
    newline: bool = True
    suffix: str = ""
    stream: Optional[TargetStream] = None

    def __post_init__(self) -> None:
        if isinstance(self.indent, bool) or not isinstance(self.indent, int) or self.indent < 0:
            raise ValueError(f"Indentation must be a non-negative integer, got {self.indent!r}")

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def new(cls, kind: MsgKind, body: str) -> "Message":
        return cls(kind=kind, body=body)

    @classmethod
    def plain(cls, body: str) -> "Message":
        """A message without any prefix."""
        return cls(body=body)

    @classmethod
    def custom(cls, label: str, color: int, body: str) -> "Message":
        """A message with a caller-defined prefix.

        Raises:
            InvalidColorError: If color is not between 1 and 255
        """
        return cls(kind=CustomKind(label, color), body=body)

    @classmethod
    def confirm(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.CONFIRM, body=body)

    @classmethod
    def crunched(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.CRUNCHED, body=body)

    @classmethod
    def debug(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.DEBUG, body=body)

    @classmethod
    def done(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.DONE, body=body)

    @classmethod
    def error(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.ERROR, body=body)

    @classmethod
    def info(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.INFO, body=body)

    @classmethod
    def notice(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.NOTICE, body=body)

    @classmethod
    def success(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.SUCCESS, body=body)

    @classmethod
    def task(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.TASK, body=body)

    @classmethod
    def warning(cls, body: str) -> "Message":
        return cls(kind=BuiltInKind.WARNING, body=body)

    # =========================================================================
    # Builders
    # =========================================================================

    def with_indent(self, indent: int) -> "Message":
        return replace(self, indent=indent)

    def with_timestamp(self, enabled: bool = True, at: Optional[datetime] = None) -> "Message":
        """Turn the timestamp on (captured now, unless `at` is given) or off."""
        if not enabled:
            return replace(self, timestamp=None)
        return replace(self, timestamp=at or datetime.now())

    def with_newline(self, newline: bool) -> "Message":
        return replace(self, newline=newline)

    def with_kind(self, kind: MsgKind) -> "Message":
        return replace(self, kind=kind)

    def with_custom_prefix(self, label: str, color: int) -> "Message":
        return replace(self, kind=CustomKind(label, color))

    def with_body(self, body: str) -> "Message":
        return replace(self, body=body)

    def with_suffix(self, suffix: str) -> "Message":
        return replace(self, suffix=suffix)

    def with_stream(self, stream: TargetStream) -> "Message":
        return replace(self, stream=stream)

    # =========================================================================
    # Rendering
    # =========================================================================

    @property
    def target_stream(self) -> TargetStream:
        return self.stream or self.kind.default_stream

    @property
    def is_confirm(self) -> bool:
        return self.kind is BuiltInKind.CONFIRM

    def buffer(self, ansi: bool = True) -> MsgBuffer:
        return MsgBuffer.from_message(self, ansi)

    def render(self, ansi: bool = True) -> bytes:
        return render(self, ansi)

    def fitted(self, width: int, ansi: bool = True) -> bytes:
        """Render, shortening the body so the line fits within width columns."""
        return self.buffer(ansi).fitted(width)

    def as_str(self, ansi: bool = True) -> str:
        return self.render(ansi).decode("utf-8")

    def __str__(self) -> str:
        return self.as_str(ansi=False)

    # =========================================================================
    # Output
    # =========================================================================

    def print(
        self,
        file: Optional[IO[str]] = None,
        force_terminal: Optional[bool] = None,
        assume_yes: bool = False,
    ) -> int:
        """Print the message and return an exit code.

        Confirm messages prompt instead (see prompt()) and return 0 for yes,
        1 for no.

        Args:
            file: Stream override (defaults to the message's target stream)
            force_terminal: Override terminal/color detection
            assume_yes: Answer confirmations with "yes" without reading input

        Returns:
            Exit code

        Raises:
            WriteFailureError: If the stream rejects the write
        """
        if self.is_confirm:
            confirmed = self.prompt(file=file, force_terminal=force_terminal, assume_yes=assume_yes)
            return 0 if confirmed else 1

        stream = file or resolve_stream(self.target_stream)
        write_bytes(stream, self.render(supports_color(stream, force_terminal)))
        return 0

    def prompt(
        self,
        file: Optional[IO[str]] = None,
        input_stream: Optional[IO[str]] = None,
        force_terminal: Optional[bool] = None,
        assume_yes: bool = False,
    ) -> bool:
        """Ask a yes/no question, repeating until the answer is valid.

        An empty answer, "n" or "no" (any case) means no, as does end of
        input. "y" or "yes" means yes.

        Returns:
            True if the user confirmed
        """
        if assume_yes:
            return True

        stream = file or resolve_stream(self.target_stream)
        reader = input_stream or sys.stdin
        ansi = supports_color(stream, force_terminal)
        question = self.with_suffix(CONFIRM_HINT if ansi else CONFIRM_HINT_PLAIN).with_newline(False)
        if ansi:
            retry = Message.error("Invalid input: enter \033[91mN\033[0m or \033[92mY\033[0m.")
        else:
            retry = Message.error("Invalid input: enter N or Y.")

        while True:
            write_bytes(stream, question.render(ansi))
            line = reader.readline()
            if not line:
                return False

            answer = line.strip().lower()
            if answer in NEGATIVE:
                return False
            if answer in AFFIRMATIVE:
                return True
            write_bytes(stream, retry.render(ansi))


def build_message(
    kind_or_custom: Union[MsgKind, str, None],
    body: str,
    indent_level: int = 0,
    show_timestamp: bool = False,
    target_stream: Optional[TargetStream] = None,
) -> Message:
    """Assemble a message from CLI-style inputs.

    Args:
        kind_or_custom: A kind, a built-in kind name, or None for no prefix
        body: Message text
        indent_level: Indentation level
        show_timestamp: Whether to stamp the current time
        target_stream: Output target (None keeps the kind's default)

    Returns:
        The assembled message

    Raises:
        ValueError: If a kind name is unknown
    """
    if kind_or_custom is None:
        kind: MsgKind = CustomKind("")
    elif isinstance(kind_or_custom, str):
        found = kind_from_name(kind_or_custom)
        if found is None:
            raise ValueError(f"Unknown message kind: {kind_or_custom!r}")
        kind = found
    else:
        kind = kind_or_custom

    message = Message(kind=kind, body=body, indent=indent_level, stream=target_stream)
    if show_timestamp:
        message = message.with_timestamp(True)
    return message
