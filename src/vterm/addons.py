"""Addons — mini-programs that take over the terminal.

``run snake`` doesn't execute anything in the usual sense.  It hands the
keyboard to an **addon**: from then on every line the user types goes
to the addon instead of the command interpreter, until they type
``exit``.

An addon is anything with these capabilities:

- ``name`` — what the user types after ``run``.
- ``start(context)`` — called once when the addon takes over; the
  context carries the output sink and the file system.
- ``on_input(line)`` — called with every line typed while active.
- ``stop()`` — called when the user leaves.

The session manager is a two-state machine::

    IDLE  ──start_addon──▶  ACTIVE(addon)
      ▲                          │
      └────────stop_addon────────┘

Only one addon can be ACTIVE at a time.  Starting a second one is
refused until the first has stopped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from vterm.errors import ErrorKind
from vterm.logging import Logger, LogLevel

if TYPE_CHECKING:
    from vterm.fs.filesystem import VirtualFileSystem
    from vterm.output import OutputSink

_SOURCE = "addons"


@dataclass(frozen=True)
class AddonContext:
    """What an addon gets to work with while it is active."""

    output: OutputSink
    filesystem: VirtualFileSystem
    logger: Logger


class Addon(Protocol):
    """The interface every addon provides."""

    @property
    def name(self) -> str:
        """Return the name used with ``run``."""
        ...

    def start(self, context: AddonContext) -> None:
        """Take over the terminal."""
        ...

    def on_input(self, line: str) -> None:
        """Handle one line of user input."""
        ...

    def stop(self) -> None:
        """Release the terminal."""
        ...


class AddonState(StrEnum):
    """Whether an addon currently owns the input."""

    IDLE = "idle"
    ACTIVE = "active"


class AddonSessionManager:
    """Registry of addons plus the single-active-addon state machine."""

    def __init__(self, *, logger: Logger | None = None) -> None:
        """Create a manager with no addons and nothing active."""
        self._addons: dict[str, Addon] = {}
        self._active: Addon | None = None
        self._context: AddonContext | None = None
        self._logger = logger if logger is not None else Logger()

    @property
    def state(self) -> AddonState:
        """Return the current state."""
        return AddonState.IDLE if self._active is None else AddonState.ACTIVE

    @property
    def active(self) -> Addon | None:
        """Return the active addon, or None."""
        return self._active

    def register(self, addon: Addon) -> None:
        """Register *addon* under its name (case-insensitive)."""
        self._addons[addon.name.lower()] = addon

    def names(self) -> list[str]:
        """Return the registered addon names, sorted."""
        return sorted(self._addons)

    def start_addon(self, name: str, context: AddonContext) -> bool:
        """Hand the terminal to the addon called *name*.

        Fails, with a message on the context's sink, if another addon
        is already active or no addon has that name.

        Returns:
            True if the addon is now active.

        """
        if self._active is not None:
            context.output.write_line("An addon is already running. Please 'exit' first.")
            self._logger.log(
                LogLevel.WARNING,
                f"refused to start '{name}' while '{self._active.name}' is active",
                source=_SOURCE,
                kind=ErrorKind.ADDON_ALREADY_ACTIVE,
            )
            return False

        addon = self._addons.get(name.lower())
        if addon is None:
            context.output.write_line(f"Addon not found: {name}")
            self._logger.log(
                LogLevel.WARNING,
                f"no addon named '{name}'",
                source=_SOURCE,
                kind=ErrorKind.ADDON_NOT_FOUND,
            )
            return False

        addon.start(context)
        self._active = addon
        self._context = context
        self._logger.log(LogLevel.INFO, f"started '{addon.name}'", source=_SOURCE)
        return True

    def stop_addon(self) -> bool:
        """Stop the active addon and return to the main terminal.

        Returns:
            False if no addon was active.

        """
        addon, context = self._active, self._context
        if addon is None or context is None:
            return False
        try:
            addon.stop()
        finally:
            self._active = None
            self._context = None
        context.output.write_line("Returned to main terminal.")
        self._logger.log(LogLevel.INFO, f"stopped '{addon.name}'", source=_SOURCE)
        return True

    def handle_input(self, line: str) -> None:
        """Forward *line* verbatim to the active addon, if any."""
        if self._active is not None:
            self._active.on_input(line)


class EchoAddon:
    """The simplest possible addon: repeat every line back, tagged.

    Useful as a template and for checking that input routing works.
    """

    def __init__(self, name: str = "echo") -> None:
        """Create an echo addon answering to *name*."""
        self._name = name
        self._context: AddonContext | None = None

    @property
    def name(self) -> str:
        """Return the name used with ``run``."""
        return self._name

    def start(self, context: AddonContext) -> None:
        """Remember the context and announce ourselves."""
        self._context = context
        context.output.write_line(f"[{self._name}] started. Type 'exit' to leave.")

    def on_input(self, line: str) -> None:
        """Echo *line* back with the addon's name as a prefix."""
        if self._context is not None:
            self._context.output.write_line(f"[{self._name}]> {line}")

    def stop(self) -> None:
        """Forget the context."""
        self._context = None
