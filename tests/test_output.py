"""Tests for output sinks.

``BufferedOutput`` keeps events in call order, hands pending ones out
through ``drain()``, and forgets its on-screen transcript on
``clear()``.  ``ConsoleOutput`` prints.
"""

import pytest

from vterm.output import BufferedOutput, ConsoleOutput, EventKind, OutputEvent


class TestBufferedOutput:
    """Verify the recording sink."""

    def test_events_keep_call_order(self) -> None:
        """Lines and embeds should be recorded in order."""
        out = BufferedOutput()
        out.write_line("one")
        out.write_rich("<b>two</b>")
        out.write_line("three")
        assert [e.kind for e in out.transcript] == [EventKind.LINE, EventKind.RICH, EventKind.LINE]
        assert out.lines == ["one", "<b>two</b>", "three"]

    def test_drain_returns_and_forgets(self) -> None:
        """drain() should hand out pending events exactly once."""
        out = BufferedOutput()
        out.write_line("a")
        assert out.drain() == [OutputEvent(EventKind.LINE, "a")]
        assert out.drain() == []
        assert out.lines == ["a"]

    def test_clear_empties_transcript_and_queues_clear(self) -> None:
        """clear() wipes the screen and tells the host to do the same."""
        out = BufferedOutput()
        out.write_line("a")
        out.clear()
        out.write_line("b")
        assert out.lines == ["b"]
        assert [e.kind for e in out.drain()] == [EventKind.LINE, EventKind.CLEAR, EventKind.LINE]

    def test_event_to_dict(self) -> None:
        """Events serialize to plain dicts."""
        assert OutputEvent(EventKind.RICH, "<i>x</i>").to_dict() == {
            "kind": "rich",
            "text": "<i>x</i>",
        }


class TestConsoleOutput:
    """Verify the printing sink."""

    def test_write_line_prints(self, capsys: pytest.CaptureFixture[str]) -> None:
        """write_line should print the text."""
        ConsoleOutput().write_line("hello")
        assert capsys.readouterr().out == "hello\n"

    def test_write_rich_prints_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Markup is printed as-is."""
        ConsoleOutput().write_rich("<img>")
        assert capsys.readouterr().out == "<img>\n"

    def test_clear_emits_escape(self, capsys: pytest.CaptureFixture[str]) -> None:
        """clear should emit the ANSI clear-screen sequence."""
        ConsoleOutput().clear()
        assert capsys.readouterr().out.startswith("\033[2J")
