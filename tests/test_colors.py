"""Tests for ANSI helpers and color support detection."""

import io

import pytest

from fyi.errors import InvalidColorError
from fyi.utils.colors import Ansi, Style, StyledSpan, color_code, is_terminal, supports_color


class TestColorCode:
    """Tests for color_code."""

    def test_valid_color(self):
        """A color index becomes a bold 256-color sequence."""
        assert color_code(199) == "\033[1;38;5;199m"

    @pytest.mark.parametrize("color", [1, 255])
    def test_bounds_accepted(self, color):
        """Both ends of the 1-255 range are valid."""
        assert color_code(color).endswith(f";{color}m")

    @pytest.mark.parametrize("color", [0, 256, -1, True, "5", 3.0])
    def test_invalid_color_rejected(self, color):
        """Out-of-range and non-integer colors are rejected, never clamped."""
        with pytest.raises(InvalidColorError) as exc_info:
            color_code(color)
        assert exc_info.value.color == color

    def test_invalid_color_is_value_error(self):
        """InvalidColorError can be caught as a ValueError."""
        with pytest.raises(ValueError):
            color_code(0)


class TestStyledSpan:
    """Tests for StyledSpan rendering."""

    def test_render_with_color(self):
        span = StyledSpan(208, "Hi")
        assert span.render() == "\033[1;38;5;208mHi" + Ansi.RESET

    def test_render_with_named_style(self):
        span = StyledSpan(Style.DIM, "12:00:00")
        assert span.render() == Ansi.DIM + "12:00:00" + Ansi.RESET

    def test_render_plain(self):
        """Plain rendering drops every escape code."""
        assert StyledSpan(Style.BOLD, "Hi").render(ansi=False) == "Hi"

    def test_color_zero_allowed_for_spans(self):
        """Only prefixes reserve color 0."""
        assert StyledSpan(0, "Hi").render() == "\033[1;38;5;0mHi" + Ansi.RESET

    def test_invalid_color_rejected_on_creation(self):
        with pytest.raises(InvalidColorError):
            StyledSpan(256, "Hi")


class TestSupportsColor:
    """Tests for terminal and color detection."""

    def test_plain_stream_has_no_color(self):
        """A StringIO is not a terminal, so no colors."""
        assert supports_color(io.StringIO()) is False
        assert is_terminal(io.StringIO()) is False

    def test_forced_terminal_has_color(self):
        stream = io.StringIO()
        assert is_terminal(stream, force_terminal=True) is True
        assert supports_color(stream, force_terminal=True) is True

    def test_no_color_env_disables_color(self, monkeypatch):
        """NO_COLOR turns colors off even on a terminal."""
        monkeypatch.setenv("NO_COLOR", "1")
        stream = io.StringIO()
        assert is_terminal(stream, force_terminal=True) is True
        assert supports_color(stream, force_terminal=True) is False

    def test_dumb_terminal_disables_color(self, monkeypatch):
        monkeypatch.setenv("TERM", "dumb")
        assert supports_color(io.StringIO(), force_terminal=True) is False

    def test_force_terminal_false_disables_color(self):
        assert supports_color(io.StringIO(), force_terminal=False) is False
