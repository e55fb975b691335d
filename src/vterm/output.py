"""Output sinks — where command output goes.

Commands never print.  They write to an **output sink**, and the host
decides what a line means on its screen: the browser turns it into a
``<p>``, the console prints it.

The sink contract has three operations:

- ``write_line(text)`` — one line of plain text.
- ``write_rich(markup)`` — pre-formatted embeddable content (an
  ``<img>`` or ``<audio>`` tag) that the host renders as-is.
- ``clear()`` — wipe the screen.

Writes must reach the host in call order.

Two sinks ship with the package:

- **BufferedOutput** records events for a host that collects them
  after each command (the web app, and every test).
- **ConsoleOutput** prints straight to stdout for the REPL.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

_ANSI_CLEAR = "\033[2J\033[H"


class OutputSink(Protocol):
    """The interface every output sink provides."""

    def write_line(self, text: str) -> None:
        """Render one line of plain text."""
        ...

    def write_rich(self, markup: str) -> None:
        """Render pre-formatted embeddable content."""
        ...

    def clear(self) -> None:
        """Wipe everything rendered so far."""
        ...


class EventKind(StrEnum):
    """The kind of thing written to a sink."""

    LINE = "line"
    RICH = "rich"
    CLEAR = "clear"


@dataclass(frozen=True)
class OutputEvent:
    """One write to a sink, in the order it happened."""

    kind: EventKind
    text: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return a JSON-ready form of the event."""
        return {"kind": self.kind.value, "text": self.text}


class BufferedOutput:
    """A sink that records writes for later collection.

    Two buffers are kept:

    - **pending** events, handed out (and forgotten) by ``drain()`` —
      the web host sends these to the browser after each command.
    - the **transcript**, everything currently "on screen".  ``clear()``
      empties it, like wiping a real terminal.
    """

    def __init__(self) -> None:
        """Create an empty sink."""
        self._pending: list[OutputEvent] = []
        self._transcript: list[OutputEvent] = []

    def write_line(self, text: str) -> None:
        """Record a line of text."""
        self._record(OutputEvent(EventKind.LINE, text))

    def write_rich(self, markup: str) -> None:
        """Record a rich embed."""
        self._record(OutputEvent(EventKind.RICH, markup))

    def clear(self) -> None:
        """Empty the transcript and tell the host to wipe its screen."""
        self._transcript.clear()
        self._pending.append(OutputEvent(EventKind.CLEAR))

    def drain(self) -> list[OutputEvent]:
        """Return and forget the events written since the last drain."""
        events, self._pending = self._pending, []
        return events

    @property
    def transcript(self) -> list[OutputEvent]:
        """Return the events currently on screen."""
        return list(self._transcript)

    @property
    def lines(self) -> list[str]:
        """Return the text of every on-screen event, lines and embeds alike."""
        return [event.text for event in self._transcript]

    def _record(self, event: OutputEvent) -> None:
        self._pending.append(event)
        self._transcript.append(event)


class ConsoleOutput:
    """A sink that prints to stdout."""

    def write_line(self, text: str) -> None:
        """Print a line."""
        print(text)  # noqa: T201

    def write_rich(self, markup: str) -> None:
        """Print the markup as-is; a console cannot embed media."""
        print(markup)  # noqa: T201

    def clear(self) -> None:
        """Clear the terminal with an ANSI escape."""
        print(_ANSI_CLEAR, end="")  # noqa: T201
