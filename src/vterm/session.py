"""Terminal sessions — one user's shell, start to finish.

A session owns every piece of mutable state a terminal has: the file
system, the command registry, the addon manager, the command history,
and the log.  Nothing is global, so two browser tabs get two sessions
that cannot see each other's files.

Like a kernel, a session has an explicit lifecycle::

    CLOSED  →  STARTING  →  RUNNING  →  CLOSED

Start sequence (order matters):
    0. Logger — capture events from the start.
    1. File system — commands need somewhere to work.
    2. Commands — built-ins registered.
    3. Addons — built-in addons registered.
    4. History — empty.

Closing stops any active addon and drops everything; nothing is
persisted.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, TypeVar

from vterm.addons import AddonContext, AddonSessionManager, EchoAddon
from vterm.builtins import register_builtins
from vterm.commands import CommandRegistry
from vterm.fs.filesystem import VirtualFileSystem
from vterm.history import CommandHistory
from vterm.logging import Logger, LogLevel
from vterm.output import BufferedOutput

if TYPE_CHECKING:
    from vterm.addons import Addon
    from vterm.output import OutputSink


class SessionState(StrEnum):
    """Lifecycle phases of a terminal session."""

    CLOSED = "closed"
    STARTING = "starting"
    RUNNING = "running"


class TerminalSession:
    """All the state behind one terminal.

    Components are None until ``start()`` runs; the properties raise
    ``RuntimeError`` if used on a session that is not running.
    """

    def __init__(
        self,
        *,
        output: OutputSink | None = None,
        addons: list[Addon] | None = None,
        populate: bool = True,
    ) -> None:
        """Create a session in the CLOSED state.

        Args:
            output: Where command output goes.  Defaults to a fresh
                ``BufferedOutput``.
            addons: Addons to register on start, in addition to the
                built-in ``echo`` addon.
            populate: Whether the file system gets the standard layout.

        """
        self._state = SessionState.CLOSED
        self._output: OutputSink = output if output is not None else BufferedOutput()
        self._extra_addons = list(addons or [])
        self._populate = populate
        self._boot_log: list[str] = []
        self._logger: Logger | None = None
        self._filesystem: VirtualFileSystem | None = None
        self._commands: CommandRegistry | None = None
        self._addons: AddonSessionManager | None = None
        self._history: CommandHistory | None = None

    @property
    def state(self) -> SessionState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def boot_log(self) -> list[str]:
        """Return the messages recorded while starting."""
        return list(self._boot_log)

    @property
    def output(self) -> OutputSink:
        """Return the output sink."""
        return self._output

    @property
    def logger(self) -> Logger:
        """Return the session log."""
        return _require(self._logger)

    @property
    def filesystem(self) -> VirtualFileSystem:
        """Return the file system."""
        return _require(self._filesystem)

    @property
    def commands(self) -> CommandRegistry:
        """Return the command registry."""
        return _require(self._commands)

    @property
    def addons(self) -> AddonSessionManager:
        """Return the addon session manager."""
        return _require(self._addons)

    @property
    def history(self) -> CommandHistory:
        """Return the command history."""
        return _require(self._history)

    def addon_context(self) -> AddonContext:
        """Return the context handed to an addon when it starts."""
        return AddonContext(output=self._output, filesystem=self.filesystem, logger=self.logger)

    def start(self) -> None:
        """Build every component and enter the RUNNING state.

        Raises:
            RuntimeError: If the session is not CLOSED.

        """
        if self._state is not SessionState.CLOSED:
            msg = f"Cannot start session in state {self._state}"
            raise RuntimeError(msg)
        self._state = SessionState.STARTING
        self._boot_log = []

        self._logger = Logger()
        self._boot_log.append("[OK] Logger")

        self._filesystem = VirtualFileSystem(populate=self._populate)
        self._boot_log.append(f"[OK] File system ({len(self._filesystem.root.children)} entries)")

        self._commands = CommandRegistry(logger=self._logger)
        register_builtins(self._commands)
        self._boot_log.append(f"[OK] Commands ({len(self._commands.unique_commands())} built-in)")

        self._addons = AddonSessionManager(logger=self._logger)
        for addon in [EchoAddon(), *self._extra_addons]:
            self._addons.register(addon)
        self._boot_log.append(f"[OK] Addons ({', '.join(self._addons.names())})")

        self._history = CommandHistory()
        self._boot_log.append("[OK] History")

        self._state = SessionState.RUNNING
        self._logger.log(LogLevel.INFO, "Session started", source="session")

    def close(self) -> None:
        """Stop any active addon and discard all state.

        An addon that fails to stop is logged; the session still closes.
        """
        if self._state is SessionState.CLOSED:
            return
        if self._addons is not None:
            try:
                self._addons.stop_addon()
            except Exception as exc:  # noqa: BLE001
                if self._logger is not None:
                    self._logger.log(
                        LogLevel.ERROR, f"addon failed to stop: {exc!r}", source="session"
                    )
        self._logger = None
        self._filesystem = None
        self._commands = None
        self._addons = None
        self._history = None
        self._state = SessionState.CLOSED


T = TypeVar("T")


def _require(component: T | None) -> T:
    """Return *component*, or raise if the session has not started."""
    if component is None:
        msg = "Session is not running"
        raise RuntimeError(msg)
    return component
