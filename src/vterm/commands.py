"""Command records and the registry that maps verbs to them.

A **Command** bundles a name, a one-line description for ``help``, the
handler that does the work, and any aliases (``time`` is an alias of
``date``).  Aliases are plain synonyms: every name points at the same
``Command`` object, so ``help`` can tell them apart from real commands
by identity.

The handler receives the parsed argument list and the session it runs
in.  The session gives it the file system, the output sink, and
everything else a command may need.

Design choices:
    - **Validate on the way in.**  A command with an empty name or a
      non-callable handler is a programming error, so ``register``
      raises ``ValueError`` immediately rather than failing later at
      dispatch time.
    - **Later registrations win.**  Registering a name that is already
      taken replaces the old command, which lets a page override a
      built-in.  The replacement is logged as a warning so accidental
      collisions are visible.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from vterm.logging import Logger, LogLevel

if TYPE_CHECKING:
    from vterm.session import TerminalSession

Handler: TypeAlias = Callable[[list[str], "TerminalSession"], None]


@dataclass(frozen=True)
class Command:
    """An immutable command registration.

    Attributes:
        name: Primary name, used by ``help`` and for sorting.
        description: One-line summary shown by ``help``.
        handler: Function called with (args, session).
        aliases: Extra names that run the same handler.

    """

    name: str
    description: str
    handler: Handler
    aliases: frozenset[str] = field(default_factory=frozenset)  # pyright: ignore[reportUnknownVariableType]

    @property
    def names(self) -> list[str]:
        """Return the primary name followed by the aliases (sorted)."""
        return [self.name, *sorted(self.aliases)]


def _check_name(name: str) -> str:
    """Return *name* lower-cased, or raise if it cannot be typed as a verb."""
    if not name or any(ch.isspace() for ch in name):
        msg = f"Invalid command name: {name!r}"
        raise ValueError(msg)
    return name.lower()


class CommandRegistry:
    """Map command names (and aliases) to commands."""

    def __init__(self, *, logger: Logger | None = None) -> None:
        """Create an empty registry.

        Args:
            logger: Where to report name collisions.  Optional so the
                registry can be used on its own.

        """
        self._commands: dict[str, Command] = {}
        self._logger = logger

    def register(self, command: Command) -> None:
        """Insert *command* under its name and every alias.

        Raises:
            ValueError: If a name is empty or contains whitespace, or the
                handler is not callable.

        """
        if not callable(command.handler):
            msg = f"Handler for {command.name!r} is not callable"
            raise ValueError(msg)
        keys = [_check_name(name) for name in command.names]
        for key in keys:
            previous = self._commands.get(key)
            if previous is not None and previous is not command and self._logger is not None:
                self._logger.log(
                    LogLevel.WARNING,
                    f"'{key}' now runs '{command.name}' (was '{previous.name}')",
                    source="commands",
                )
            self._commands[key] = command

    def get(self, name: str) -> Command | None:
        """Return the command registered under *name* (case-insensitive)."""
        return self._commands.get(name.lower())

    def unique_commands(self) -> list[Command]:
        """Return each command once, sorted by primary name."""
        unique = {id(c): c for c in self._commands.values()}
        return sorted(unique.values(), key=lambda c: c.name)

    def names(self) -> list[str]:
        """Return every registered name and alias, sorted."""
        return sorted(self._commands)

    def __contains__(self, name: object) -> bool:
        """Return True if *name* is a registered name or alias."""
        return isinstance(name, str) and name.lower() in self._commands
