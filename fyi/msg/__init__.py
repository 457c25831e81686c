"""Message rendering: kinds, the region buffer and the Message value type."""

from .buffer import INDENT_WIDTH, MsgBuffer, Part, render, set_body
from .kind import BuiltInKind, CustomKind, MsgKind, TargetStream, kind_from_name
from .message import Message, build_message

__all__ = [
    "INDENT_WIDTH",
    "BuiltInKind",
    "CustomKind",
    "Message",
    "MsgBuffer",
    "MsgKind",
    "Part",
    "TargetStream",
    "build_message",
    "kind_from_name",
    "render",
    "set_body",
]
