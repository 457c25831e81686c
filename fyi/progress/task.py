"""In-flight task labels tracked by a progress bar."""

from dataclasses import dataclass

from ..errors import ProgressError
from ..utils.width import fitted_width, strip_ansi, truncate_to_width


@dataclass
class ProgressTask:
    """A unit of work shown while it is in flight.

    Attributes:
        label: Label exactly as registered (used as the lookup key)
        text: Label with any ANSI styling removed (what gets drawn)
        width: Display width of text
        done: Whether the task has been reported complete
    """
    label: str
    text: str
    width: int
    done: bool = False

    @classmethod
    def new(cls, label: str) -> "ProgressTask":
        """Create a task for a label.

        Raises:
            ProgressError: If the label is empty (or only escape codes)
        """
        text = strip_ansi(label)
        if not text.strip():
            raise ProgressError("Task labels cannot be empty.")
        return cls(label=label, text=text, width=fitted_width(text))

    def fit(self, max_columns: int) -> str:
        """Return the display text cut down to max_columns."""
        if self.width <= max_columns:
            return self.text
        return truncate_to_width(self.text, max_columns)
