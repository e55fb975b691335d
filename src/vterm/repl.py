"""Interactive REPL (Read-Eval-Print Loop) for the console.

The browser is the main home of the terminal, but the same session
runs just as well in a console.  The REPL starts a session that prints
to stdout, creates a shell, and loops:

    1. **Read** — display the prompt and read a line.
    2. **Eval** — pass it to ``shell.dispatch()``.
    3. **Print** — the session's ``ConsoleOutput`` already printed.
    4. **Loop** — until Ctrl+D or Ctrl+C.

``exit`` only leaves addons, as in the browser, so the console is left
with end-of-file.

The helper ``format_boot_log`` is pure and testable.  The ``run()``
function is the I/O entrypoint.
"""

import contextlib
import locale
import readline

from vterm.completer import Completer
from vterm.output import ConsoleOutput
from vterm.session import TerminalSession
from vterm.shell import Shell

_BANNER_WIDTH = 38


def format_boot_log(boot_log: list[str]) -> str:
    """Format the session boot log into a banner string.

    Args:
        boot_log: Messages recorded while the session started.

    Returns:
        A string suitable for printing to the console.

    """
    border = "=" * _BANNER_WIDTH
    header = f"\n  {border}\n               vterm\n     A terminal in your browser\n  {border}\n\n"
    body = "\n".join(f"  {msg}" for msg in boot_log)
    footer = "\nType 'help' for commands, Ctrl+D to quit.\n"
    return header + body + footer


def run() -> None:
    """Start a session and run the interactive REPL.

    This is the ``vterm`` console entry point.
    """
    # Let date print in the user's locale; an unknown locale keeps "C".
    with contextlib.suppress(locale.Error):
        locale.setlocale(locale.LC_TIME, "")

    session = TerminalSession(output=ConsoleOutput())
    session.start()
    shell = Shell(session=session)

    # Wire up tab completion via readline.
    completer = Completer(shell, line_buffer=readline.get_line_buffer)
    readline.set_completer(completer.complete)
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")

    print(format_boot_log(session.boot_log))  # noqa: T201

    try:
        while True:
            try:
                line = input(shell.prompt)
            except EOFError:
                # Ctrl+D — graceful exit
                print()  # noqa: T201
                break
            shell.dispatch(line)

    except KeyboardInterrupt:
        # Ctrl+C — graceful exit
        print("\nInterrupted.")  # noqa: T201

    finally:
        session.close()
        print("Session closed.")  # noqa: T201
