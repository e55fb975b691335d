"""Command history — the list behind ``history`` and ``!<n>``.

Every line the user runs is remembered so it can be listed and
replayed.  Like ``HISTCONTROL=ignoredups`` in bash, running the same
line twice in a row stores it once.

Entries are numbered from 1, matching what ``history`` prints, so
``!3`` replays the line shown as ``3:``.
"""


class CommandHistory:
    """An ordered record of executed input lines."""

    def __init__(self) -> None:
        """Create an empty history."""
        self._lines: list[str] = []

    def append(self, line: str) -> bool:
        """Store *line* unless it repeats the previous entry.

        Returns:
            True if the line was stored.

        """
        if self._lines and self._lines[-1] == line:
            return False
        self._lines.append(line)
        return True

    def get(self, index: int) -> str | None:
        """Return the entry at 1-based *index*, or None if out of range."""
        if 1 <= index <= len(self._lines):
            return self._lines[index - 1]
        return None

    def entries(self) -> list[str]:
        """Return all entries, oldest first."""
        return list(self._lines)

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._lines)
