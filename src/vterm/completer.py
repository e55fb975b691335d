"""Context-aware tab completer for the terminal.

The completer separates **what to complete** (pure logic, fully
testable) from **how to wire it** (readline in the REPL, a JSON
endpoint in the web app).

The ``complete(text, state)`` method is the readline callback.  It
delegates to ``completions(text, line)`` which looks at the words typed
so far and returns candidate strings:

- first word → command names and aliases;
- after ``run`` → addon names;
- after a path-taking command → entries of the directory being typed,
  relative or absolute, with ``/`` appended to directories.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vterm.fs.nodes import Directory

if TYPE_CHECKING:
    from collections.abc import Callable

    from vterm.shell import Shell

# Commands whose argument is a filesystem path.
_PATH_COMMANDS: frozenset[str] = frozenset(["ls", "cd", "cat", "mkdir", "touch", "rm", "tree"])


class Completer:
    """Tab completer for one shell."""

    def __init__(self, shell: Shell, *, line_buffer: Callable[[], str] | None = None) -> None:
        """Create a completer attached to *shell*.

        Args:
            shell: The shell whose session is completed against.
            line_buffer: Returns the full line being edited; the REPL
                passes ``readline.get_line_buffer``.

        """
        self._session = shell.session
        self._line_buffer = line_buffer

    def complete(self, text: str, state: int) -> str | None:
        """Readline callback — return the *state*-th candidate for *text*.

        Returns:
            The candidate at *state*, or ``None`` when exhausted.

        """
        line = self._line_buffer() if self._line_buffer is not None else text
        candidates = self.completions(text, line)
        if state < len(candidates):
            return candidates[state]
        return None

    def completions(self, text: str, line: str) -> list[str]:
        """Return sorted completion candidates.

        Args:
            text: The partial word under the cursor.
            line: The full input line so far.

        """
        if self._session.addons.active is not None:
            return []

        words = line.lstrip().split()
        if not words or (len(words) == 1 and not line.endswith(" ")):
            return [name for name in self._session.commands.names() if name.startswith(text)]

        command = words[0].lower()
        if command == "run":
            return [name for name in self._session.addons.names() if name.startswith(text.lower())]
        if command in _PATH_COMMANDS or text.startswith("/"):
            return self._complete_paths(text)
        return []

    def _complete_paths(self, text: str) -> list[str]:
        """Complete entries of the directory named by the start of *text*.

        ``"/C/Us"`` lists ``/C/`` for names starting with ``Us``; a bare
        ``"rea"`` lists the cwd.
        """
        last_slash = text.rfind("/")
        directory_part = text[: last_slash + 1]
        prefix = text[last_slash + 1 :]

        directory = self._session.filesystem.resolve(directory_part or ".")
        if not isinstance(directory, Directory):
            return []

        return sorted(
            f"{directory_part}{name}/" if isinstance(child, Directory) else f"{directory_part}{name}"
            for name, child in directory.children.items()
            if name.startswith(prefix)
        )
