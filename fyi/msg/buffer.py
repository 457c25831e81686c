"""Byte buffer for a rendered message, split into named regions.

A rendered message is laid out as:

    [indent][timestamp][prefix-open][prefix][prefix-close][separator][body][suffix][newline]

Every region is tracked as a (start, length) entry in an ordered table.
Replacing one region rewrites just those bytes and shifts the start of every
later region by the length difference, so a buffer can be reused (e.g. by a
progress loop that only changes the body) without rendering it again.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Optional, Union

from ..utils.colors import Ansi, Style, StyledSpan
from ..utils.width import fitted_width, truncate_to_width
from .kind import prefix_parts

if TYPE_CHECKING:
    from .message import Message

INDENT_WIDTH = 4
TIMESTAMP_FORMAT = "%H:%M:%S"


class Part(IntEnum):
    """Buffer regions, in layout order."""
    INDENT = 0
    TIMESTAMP = 1
    PREFIX_OPEN = 2
    PREFIX = 3
    PREFIX_CLOSE = 4
    SEPARATOR = 5
    BODY = 6
    SUFFIX = 7
    NEWLINE = 8


@dataclass
class Region:
    """Byte range occupied by one part."""
    part: Part
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


def _as_bytes(data: Union[str, bytes]) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    data = bytes(data)
    # Reject anything that would break the buffer's UTF-8 guarantee.
    data.decode("utf-8")
    return data


class MsgBuffer:
    """Mutable message bytes with a region table."""

    def __init__(self, parts: Optional[dict[Part, Union[str, bytes]]] = None):
        """Initialize the buffer.

        Args:
            parts: Initial content per part; missing parts start empty
        """
        parts = parts or {}
        self._buf = bytearray()
        self._regions: list[Region] = []
        for part in Part:
            data = _as_bytes(parts.get(part, b""))
            self._regions.append(Region(part=part, start=len(self._buf), length=len(data)))
            self._buf += data

    @classmethod
    def from_message(cls, message: "Message", ansi: bool = True) -> "MsgBuffer":
        """Build a buffer holding the rendered message."""
        return cls(compose_parts(message, ansi))

    def copy(self) -> "MsgBuffer":
        clone = MsgBuffer.__new__(MsgBuffer)
        clone._buf = bytearray(self._buf)
        clone._regions = [Region(r.part, r.start, r.length) for r in self._regions]
        return clone

    # =========================================================================
    # Region access
    # =========================================================================

    def span(self, part: Part) -> tuple[int, int]:
        """Return the (start, end) byte offsets of a part."""
        region = self._regions[part]
        return region.start, region.end

    def get(self, part: Part) -> bytes:
        """Return the bytes of a part."""
        region = self._regions[part]
        return bytes(self._buf[region.start:region.end])

    def replace(self, part: Part, data: Union[str, bytes]) -> None:
        """Replace the content of one part, shifting the parts after it.

        Args:
            part: Part to replace
            data: New content (str is UTF-8 encoded)
        """
        data = _as_bytes(data)
        region = self._regions[part]
        delta = len(data) - region.length
        self._buf[region.start:region.end] = data
        region.length = len(data)
        if delta:
            for later in self._regions[part + 1:]:
                later.start += delta

    # =========================================================================
    # Output
    # =========================================================================

    def as_bytes(self) -> bytes:
        return bytes(self._buf)

    def __bytes__(self) -> bytes:
        return self.as_bytes()

    def __len__(self) -> int:
        return len(self._buf)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MsgBuffer):
            return self._buf == other._buf
        if isinstance(other, (bytes, bytearray)):
            return self._buf == other
        return NotImplemented

    def width(self) -> int:
        """Display width of the line, not counting the line ending."""
        return fitted_width(bytes(self._buf[:self._regions[Part.NEWLINE].start]))

    def fitted(self, width: int) -> bytes:
        """Return the rendered bytes trimmed to fit within width columns.

        Only the body is shortened. If the body cannot absorb the overflow,
        nothing fits and empty bytes are returned.
        """
        total = self.width()
        if total <= width:
            return self.as_bytes()

        body = self.get(Part.BODY)
        body_width = fitted_width(body)
        trim = total - width
        if body_width <= trim:
            return b""

        kept = truncate_to_width(body, body_width - trim)
        if not kept:
            return b""
        if b"\x1b" in kept:
            kept += Ansi.RESET.encode()

        trimmed = self.copy()
        trimmed.replace(Part.BODY, kept)
        return trimmed.as_bytes()


def compose_parts(message: "Message", ansi: bool = True) -> dict[Part, str]:
    """Lay a message out into its buffer parts.

    Args:
        message: Message to lay out
        ansi: If False, leave out every escape sequence

    Returns:
        Content for each part
    """
    parts: dict[Part, str] = {
        Part.INDENT: " " * (message.indent * INDENT_WIDTH),
        Part.BODY: message.body,
        Part.SUFFIX: message.suffix,
        Part.NEWLINE: "\n" if message.newline else "",
    }

    if message.timestamp is not None:
        stamp = message.timestamp.strftime(TIMESTAMP_FORMAT)
        parts[Part.TIMESTAMP] = StyledSpan(Style.DIM, stamp).render(ansi) + " "

    label, open_code = prefix_parts(message.kind)
    if label:
        parts[Part.PREFIX] = label
        if ansi:
            parts[Part.PREFIX_OPEN] = open_code
            parts[Part.PREFIX_CLOSE] = Ansi.RESET
            parts[Part.SEPARATOR] = f"{open_code}:{Ansi.RESET} "
        else:
            parts[Part.SEPARATOR] = ": "

    return parts


def render(message: "Message", ansi: bool = True) -> bytes:
    """Render a message to bytes."""
    return MsgBuffer.from_message(message, ansi).as_bytes()


def set_body(buffer: MsgBuffer, new_body: Union[str, bytes]) -> None:
    """Swap the body of an already-rendered buffer in place."""
    buffer.replace(Part.BODY, new_body)
