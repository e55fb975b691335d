"""Session logging and audit trail.

Every terminal session keeps a structured log of what happened: boot
steps, commands that failed, addons starting and stopping.  The user
never sees it unless they ask (``log``), but it is the first place to
look when a session misbehaves.

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source, kind).
- **Logger** — an append-only log with filtering and clearing.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **Failures carry an ErrorKind** so the log can be filtered by
      *why* something failed, not just by its wording.
    - **Bounded** — a browser tab can stay open for days, so the oldest
      entries are dropped once ``capacity`` is reached.
"""

from collections import deque
from dataclasses import dataclass
from enum import IntEnum

from vterm.errors import ErrorKind

DEFAULT_LOG_CAPACITY = 500


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "shell").
        kind: Why an operation failed, for failure events.

    """

    level: LogLevel
    message: str
    source: str
    kind: ErrorKind | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Append-only, bounded log buffer with filtering."""

    def __init__(self, *, capacity: int = DEFAULT_LOG_CAPACITY) -> None:
        """Create an empty logger keeping at most *capacity* entries."""
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        kind: ErrorKind | None = None,
    ) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Component that generated the event.
            kind: Failure classification, if this records a failure.

        """
        self._entries.append(LogEntry(level=level, message=message, source=source, kind=kind))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        kind: ErrorKind | None = None,
    ) -> list[LogEntry]:
        """Return entries matching every given criterion.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.
            kind: If set, only return failures of this kind.

        Returns:
            A filtered list of log entries.

        """
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
            and (kind is None or e.kind is kind)
        ]

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of retained entries."""
        return len(self._entries)
