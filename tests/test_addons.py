"""Tests for addons and the addon session manager.

At most one addon owns the terminal at a time.  While it does, every
input line except ``exit`` goes to it verbatim; ``exit`` hands control
back to the command interpreter.
"""

from vterm.addons import AddonContext, AddonSessionManager, AddonState, EchoAddon
from vterm.errors import ErrorKind
from vterm.fs.filesystem import VirtualFileSystem
from vterm.logging import Logger
from vterm.output import BufferedOutput
from vterm.session import TerminalSession
from vterm.shell import Shell


class _RecordingAddon:
    """An addon that records every hook call."""

    def __init__(self, name: str) -> None:
        self._name = name
        self.calls: list[str] = []
        self.context: AddonContext | None = None

    @property
    def name(self) -> str:
        return self._name

    def start(self, context: AddonContext) -> None:
        self.context = context
        self.calls.append("start")

    def on_input(self, line: str) -> None:
        self.calls.append(f"input:{line}")

    def stop(self) -> None:
        self.calls.append("stop")


def _context() -> tuple[BufferedOutput, AddonContext]:
    """Build a context over a buffered sink."""
    output = BufferedOutput()
    return output, AddonContext(output=output, filesystem=VirtualFileSystem(), logger=Logger())


def _manager_with(*names: str) -> tuple[AddonSessionManager, dict[str, _RecordingAddon]]:
    """Create a manager with one recording addon per name."""
    manager = AddonSessionManager()
    addons = {name: _RecordingAddon(name) for name in names}
    for addon in addons.values():
        manager.register(addon)
    return manager, addons


class TestStateMachine:
    """Verify IDLE / ACTIVE transitions."""

    def test_starts_idle(self) -> None:
        """A new manager has nothing active."""
        manager, _ = _manager_with("a")
        assert manager.state is AddonState.IDLE
        assert manager.active is None

    def test_start_activates(self) -> None:
        """start_addon should call start with the context and go ACTIVE."""
        manager, addons = _manager_with("a")
        _output, context = _context()
        assert manager.start_addon("a", context)
        assert manager.state is AddonState.ACTIVE
        assert manager.active is addons["a"]
        assert addons["a"].context is context

    def test_lookup_is_case_insensitive(self) -> None:
        """Addon names match regardless of case."""
        manager, addons = _manager_with("Snake")
        _output, context = _context()
        assert manager.start_addon("SNAKE", context)
        assert manager.active is addons["Snake"]

    def test_unknown_addon(self) -> None:
        """An unknown name is reported and nothing changes."""
        manager, _ = _manager_with("a")
        output, context = _context()
        assert not manager.start_addon("zzz", context)
        assert output.lines == ["Addon not found: zzz"]
        assert manager.state is AddonState.IDLE

    def test_exclusivity(self) -> None:
        """A second start is refused while one addon is active."""
        logger = Logger()
        manager = AddonSessionManager(logger=logger)
        a, b = _RecordingAddon("a"), _RecordingAddon("b")
        manager.register(a)
        manager.register(b)
        output, context = _context()
        manager.start_addon("a", context)
        assert not manager.start_addon("b", context)
        assert manager.active is a
        assert b.calls == []
        assert output.lines == ["An addon is already running. Please 'exit' first."]
        assert logger.filter(kind=ErrorKind.ADDON_ALREADY_ACTIVE)

    def test_stop_then_start_other(self) -> None:
        """After stopping, another addon may start."""
        manager, addons = _manager_with("a", "b")
        output, context = _context()
        manager.start_addon("a", context)
        assert manager.stop_addon()
        assert addons["a"].calls == ["start", "stop"]
        assert output.lines[-1] == "Returned to main terminal."
        assert manager.start_addon("b", context)
        assert manager.active is addons["b"]

    def test_stop_when_idle(self) -> None:
        """Stopping with nothing active returns False."""
        manager, _ = _manager_with("a")
        assert not manager.stop_addon()

    def test_handle_input_forwards(self) -> None:
        """Input reaches the active addon verbatim."""
        manager, addons = _manager_with("a")
        _output, context = _context()
        manager.start_addon("a", context)
        manager.handle_input("  ls -la  ")
        assert addons["a"].calls == ["start", "input:  ls -la  "]

    def test_handle_input_when_idle_is_ignored(self) -> None:
        """Without an active addon, input goes nowhere."""
        manager, addons = _manager_with("a")
        manager.handle_input("hello")
        assert addons["a"].calls == []


class TestEchoAddon:
    """Verify the built-in echo addon."""

    def test_echo_tags_lines(self) -> None:
        """Lines come back prefixed with the addon name."""
        addon = EchoAddon()
        output, context = _context()
        addon.start(context)
        addon.on_input("hello")
        assert output.lines == ["[echo] started. Type 'exit' to leave.", "[echo]> hello"]


class TestShellRouting:
    """Verify how the shell routes input while an addon is active."""

    def _shell(self) -> tuple[BufferedOutput, Shell, _RecordingAddon]:
        output = BufferedOutput()
        addon = _RecordingAddon("game")
        session = TerminalSession(output=output, addons=[addon])
        session.start()
        return output, Shell(session=session), addon

    def test_run_starts_addon(self) -> None:
        """'run game' should start the addon."""
        _output, shell, addon = self._shell()
        shell.dispatch("run game")
        assert addon.calls == ["start"]
        assert shell.prompt == "[game]> "

    def test_lines_go_to_addon_not_commands(self) -> None:
        """While active, even command names are forwarded untouched."""
        output, shell, addon = self._shell()
        shell.dispatch("run game")
        shell.dispatch("ls /")
        shell.dispatch('say "hi"')
        assert addon.calls == ["start", "input:ls /", 'input:say "hi"']
        assert output.lines == []

    def test_exit_is_case_insensitive(self) -> None:
        """'EXIT' should stop the addon."""
        output, shell, addon = self._shell()
        shell.dispatch("run game")
        shell.dispatch("EXIT")
        assert addon.calls == ["start", "stop"]
        assert output.lines == ["Returned to main terminal."]
        assert shell.session.addons.active is None

    def test_exit_without_addon(self) -> None:
        """exit with nothing active says so."""
        output, shell, _addon = self._shell()
        shell.dispatch("exit")
        assert output.lines == ["No active addon to exit."]

    def test_run_usage(self) -> None:
        """run needs a name."""
        output, shell, _addon = self._shell()
        shell.dispatch("run")
        assert output.lines == ["Usage: run <addon-name>"]

    def test_run_unknown(self) -> None:
        """run with an unknown name reports it."""
        output, shell, _addon = self._shell()
        shell.dispatch("run tetris")
        assert output.lines == ["Addon not found: tetris"]

    def test_addon_lines_are_recorded_in_history(self) -> None:
        """Lines sent to an addon are still part of history."""
        _output, shell, _addon = self._shell()
        shell.dispatch("run game")
        shell.dispatch("up")
        shell.dispatch("exit")
        assert shell.session.history.entries() == ["run game", "up", "exit"]

    def test_addon_exception_is_contained(self) -> None:
        """A failing addon hook must not escape dispatch."""
        output, shell, addon = self._shell()

        def explode(_line: str) -> None:
            msg = "addon crashed"
            raise RuntimeError(msg)

        shell.dispatch("run game")
        addon.on_input = explode  # type: ignore[method-assign]
        shell.dispatch("jump")
        assert output.lines == ["Error: addon crashed"]
        assert shell.session.addons.active is addon
