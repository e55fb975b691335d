"""The shell — turns one line of input into one side effect.

``Shell.dispatch`` is the single entry point for user input.  For each
line it:

1. Trims it; an empty line does nothing.
2. Expands ``!<n>`` — replay line *n* of the history (shown as
   ``> line`` first).  The ``!<n>`` itself is never stored.
3. Records the line in the history (consecutive repeats are stored
   once).
4. If an addon is active, forwards the line to it untouched.  The one
   exception is ``exit`` (any case), which stops the addon.
5. Otherwise tokenizes the line, looks up the command, and runs it.

Tokenizing is deliberately simpler than a real shell: words split on
whitespace, a double-quoted run stays one word, and the quotes are
dropped.  There are no pipes, globs, or escapes.

Design choices:
    - **Output goes to the sink, not the return value.**  ``cat`` on an
      image needs to emit markup, ``clear`` needs to wipe the screen;
      a plain string cannot express either.
    - **The prompt always comes back.**  An exception escaping a
      command handler or an addon is reported as ``Error: ...`` and
      logged; it never tears down the session.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from vterm.errors import ErrorKind
from vterm.logging import LogLevel
from vterm.session import SessionState

if TYPE_CHECKING:
    from vterm.session import TerminalSession

_SOURCE = "shell"

# A word is a run of non-space, non-quote characters and quoted strings.
_TOKEN_RE = re.compile(r'(?:[^\s"]+|"[^"]*")+')

_RECALL_RE = re.compile(r"!(\d+)")


def tokenize(line: str) -> list[str]:
    """Split *line* into words, keeping double-quoted runs together.

    Examples::

        'echo "hello world"'   → ["echo", "hello world"]
        'cd "Program Files"'   → ["cd", "Program Files"]
        'say a"b c"d'          → ["say", "ab cd"]

    """
    return [token.replace('"', "") for token in _TOKEN_RE.findall(line)]


class Shell:
    """Command dispatcher bound to a running terminal session."""

    def __init__(self, *, session: TerminalSession) -> None:
        """Create a shell for *session*.

        Raises:
            RuntimeError: If the session is not running.

        """
        if session.state is not SessionState.RUNNING:
            msg = f"Shell requires a running session (state: {session.state}, not running)"
            raise RuntimeError(msg)
        self._session = session

    @property
    def session(self) -> TerminalSession:
        """Return the session this shell drives."""
        return self._session

    @property
    def prompt(self) -> str:
        """Return the prompt: the addon name while one is active, else the cwd."""
        addon = self._session.addons.active
        if addon is not None:
            return f"[{addon.name}]> "
        fs = self._session.filesystem
        return f"{fs.full_path(fs.cwd)} $ "

    def dispatch(self, raw_line: str) -> None:
        """Run one line of user input.

        Args:
            raw_line: The text exactly as typed.

        """
        line = raw_line.strip()
        if not line:
            return

        session = self._session
        if match := _RECALL_RE.fullmatch(line):
            self._recall(int(match.group(1)))
            return

        session.history.append(line)

        try:
            if session.addons.active is not None:
                self._route_to_addon(line)
            else:
                self._run_command(line)
        except Exception as exc:  # noqa: BLE001
            session.output.write_line(f"Error: {exc}")
            session.logger.log(LogLevel.ERROR, f"'{line}' raised {exc!r}", source=_SOURCE)

    def _recall(self, index: int) -> None:
        """Replay history entry *index* (1-based)."""
        session = self._session
        recalled = session.history.get(index)
        if recalled is None:
            session.output.write_line("Invalid history index.")
            session.logger.log(
                LogLevel.WARNING,
                f"no history entry {index}",
                source=_SOURCE,
                kind=ErrorKind.INVALID_HISTORY_INDEX,
            )
            return
        session.output.write_line(f"> {recalled}")
        self.dispatch(recalled)

    def _route_to_addon(self, line: str) -> None:
        """Send *line* to the active addon, or stop it on ``exit``."""
        addons = self._session.addons
        if line.lower() == "exit":
            addons.stop_addon()
        else:
            addons.handle_input(line)

    def _run_command(self, line: str) -> None:
        """Tokenize *line* and run the command it names."""
        session = self._session
        words = tokenize(line)
        if not words:
            return
        name, args = words[0].lower(), words[1:]
        command = session.commands.get(name)
        if command is None:
            session.output.write_line(f"Command not recognized: {name}.")
            session.logger.log(
                LogLevel.WARNING,
                f"unknown command '{name}'",
                source=_SOURCE,
                kind=ErrorKind.UNKNOWN_COMMAND,
            )
            return
        session.logger.log(LogLevel.DEBUG, f"run {command.name} {args}", source=_SOURCE)
        command.handler(args, session)
