"""Human-friendly number and duration formatting."""

from typing import Optional


def nice_int(value: int) -> str:
    """Format an integer with thousands separators (1234567 -> "1,234,567")."""
    return f"{value:,}"


def nice_percent(fraction: float) -> str:
    """Format a 0-1 fraction as a percentage with two decimals."""
    fraction = min(max(fraction, 0.0), 1.0)
    return f"{fraction * 100:.2f}%"


def format_clock(seconds: Optional[float]) -> str:
    """Format seconds as a fixed-width HH:MM:SS clock.

    Hours saturate at 99. None (unknown) renders as dashes.
    """
    if seconds is None:
        return "--:--:--"
    total = int(max(seconds, 0))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 99:
        return "99:59:59"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def nice_elapsed(seconds: float) -> str:
    """Format a duration in plain English.

    Examples:
        0 -> "0 seconds"
        61 -> "1 minute and 1 second"
        3723 -> "1 hour, 2 minutes, and 3 seconds"
        90000 -> "1 day and 1 hour" (zero-valued units are skipped)
    """
    total = int(max(seconds, 0))
    if total == 0:
        return "0 seconds"

    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if days:
        parts.append(_plural(days, "day", "days"))
    if hours:
        parts.append(_plural(hours, "hour", "hours"))
    if minutes:
        parts.append(_plural(minutes, "minute", "minutes"))
    if secs:
        parts.append(_plural(secs, "second", "seconds"))

    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2:
        return f"{parts[0]} and {parts[1]}"
    return ", ".join(parts[:-1]) + f", and {parts[-1]}"
