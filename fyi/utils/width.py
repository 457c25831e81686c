"""Display-width helpers for fitting text into terminal columns.

Widths are measured in terminal cells: wide (CJK, emoji) characters take two
cells, combining marks and control characters take none, and ANSI escape
sequences are skipped whole so pre-colored text can be measured and cut
safely.
"""

from __future__ import annotations

import re
from typing import Iterator, TypeVar

from rich.cells import cell_len

AnyText = TypeVar("AnyText", str, bytes)

# CSI (ESC [ ... final), OSC (ESC ] ... BEL/ST) and two-byte ESC sequences.
_ANSI_PATTERN = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[@-Z\\-_]"
)

# Lone surrogates produced by decoding invalid UTF-8 with "surrogateescape".
_ESCAPED_BYTE_MIN = 0xDC80
_ESCAPED_BYTE_MAX = 0xDCFF


def _decode(text: str | bytes) -> str:
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="surrogateescape")
    return text


def _encode_like(original: AnyText, text: str) -> AnyText:
    if isinstance(original, bytes):
        return text.encode("utf-8", errors="surrogateescape")
    return text


def _segments(text: str) -> Iterator[tuple[str, bool]]:
    """Split text into (chunk, is_escape) pieces."""
    pos = 0
    for match in _ANSI_PATTERN.finditer(text):
        if match.start() > pos:
            yield text[pos:match.start()], False
        yield match.group(), True
        pos = match.end()
    if pos < len(text):
        yield text[pos:], False


def char_width(ch: str) -> int:
    """Return the cell width of a single character."""
    codepoint = ord(ch)
    if _ESCAPED_BYTE_MIN <= codepoint <= _ESCAPED_BYTE_MAX:
        return 1
    if codepoint < 32 or 0x7F <= codepoint < 0xA0:
        return 0
    return cell_len(ch)


def strip_ansi(text: AnyText) -> AnyText:
    """Remove ANSI escape sequences from text."""
    decoded = _decode(text)
    return _encode_like(text, _ANSI_PATTERN.sub("", decoded))


def fitted_width(text: str | bytes) -> int:
    """Return the number of terminal columns text occupies.

    Args:
        text: Text to measure; bytes are decoded as UTF-8, with each
            undecodable byte counted as one column

    Returns:
        Column count
    """
    decoded = _decode(text)
    if decoded.isascii() and "\x1b" not in decoded and decoded.isprintable():
        return len(decoded)

    total = 0
    for chunk, is_escape in _segments(decoded):
        if not is_escape:
            total += sum(char_width(ch) for ch in chunk)
    return total


def truncate_to_width(text: AnyText, max_columns: int) -> AnyText:
    """Cut text so that it fits within max_columns terminal columns.

    The cut falls after the last character that still fits. Escape sequences
    and zero-width characters seen before the cut are kept; code points and
    escape sequences are never split.

    Args:
        text: Text to truncate (str or bytes; the result has the same type)
        max_columns: Column budget

    Returns:
        The longest fitting prefix of text, or text itself if it already fits
    """
    if max_columns <= 0:
        return text[:0]

    decoded = _decode(text)
    if fitted_width(decoded) <= max_columns:
        return text

    kept: list[str] = []
    used = 0
    for chunk, is_escape in _segments(decoded):
        if is_escape:
            kept.append(chunk)
            continue
        for ch in chunk:
            width = char_width(ch)
            if used + width > max_columns:
                return _encode_like(text, "".join(kept))
            kept.append(ch)
            used += width
    return _encode_like(text, "".join(kept))
