"""Built-in commands.

Each built-in is a small function ``(args, session) -> None`` that
adapts one file system or addon operation to the terminal: it reads
its arguments, calls the operation, and writes what happened to the
session's output sink.

Failures are reported, never raised.  The file system records *why* an
operation failed in ``last_error``; ``_report`` writes the user-facing
message and logs the reason.

Design choices:
    - **One table.**  ``BUILTINS`` lists every built-in with its
      description and aliases, so ``register_builtins`` is a loop and
      ``help`` reads from the same records.
    - **Rich embeds are escaped.**  Image and audio sources come from
      file content, so they go through ``markupsafe.escape`` before
      being placed in an attribute.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from markupsafe import escape

from vterm.commands import Command, CommandRegistry
from vterm.errors import ErrorKind
from vterm.fs.nodes import Directory, File, FileKind
from vterm.logging import LogLevel

if TYPE_CHECKING:
    from vterm.session import TerminalSession

# Column width for command names in ``help``.
HELP_NAME_WIDTH = 15

# Default number of entries shown by ``log``.
_LOG_TAIL = 20


def _report(session: TerminalSession, message: str, kind: ErrorKind | None) -> None:
    """Write a failure message and record it in the session log."""
    session.output.write_line(message)
    session.logger.log(LogLevel.WARNING, message, source="shell", kind=kind)


# -- navigation -----------------------------------------------------------


def cmd_pwd(_args: list[str], session: TerminalSession) -> None:
    """Print the full path of the working directory."""
    fs = session.filesystem
    session.output.write_line(fs.full_path(fs.cwd))


def cmd_ls(args: list[str], session: TerminalSession) -> None:
    """List a directory, one entry per line."""
    entries = session.filesystem.list_files(args[0] if args else ".")
    if not entries:
        session.output.write_line("Empty directory.")
        return
    for entry in entries:
        session.output.write_line(entry)


def cmd_cd(args: list[str], session: TerminalSession) -> None:
    """Change the working directory."""
    if not args:
        _report(session, "cd: no such file or directory: ", ErrorKind.PATH_NOT_FOUND)
        return
    fs = session.filesystem
    if not fs.change_directory(args[0]):
        _report(session, f"cd: no such file or directory: {args[0]}", fs.last_error)


def cmd_tree(args: list[str], session: TerminalSession) -> None:
    """Print a directory and everything below it as a tree."""
    path = args[0] if args else "."
    fs = session.filesystem
    start = fs.resolve(path)
    if not isinstance(start, Directory):
        kind = ErrorKind.PATH_NOT_FOUND if start is None else ErrorKind.WRONG_NODE_TYPE
        _report(session, f"tree: '{path}' is not a directory.", kind)
        return
    session.output.write_line(fs.full_path(start))
    for line in fs.walk_tree(start):
        session.output.write_line(line)


# -- files ----------------------------------------------------------------


def _render_file(file: File, session: TerminalSession) -> None:
    """Write *file* to the sink the way its kind asks for."""
    out = session.output
    match file.kind:
        case FileKind.TEXT:
            if file.content:
                for line in file.content.split("\n"):
                    out.write_line(line)
        case FileKind.IMAGE:
            out.write_rich(
                f'<img src="{escape(file.content)}" alt="{escape(file.name)}" '
                'style="max-width: 100%; height: auto;">'
            )
        case FileKind.AUDIO:
            out.write_rich(
                f'<audio controls src="{escape(file.content)}">'
                "Your browser does not support audio playback.</audio>"
            )
        case FileKind.EXECUTABLE:
            out.write_line(f"[Executable] To run this, type: run {file.content}")
        case _:
            out.write_line(f"Unsupported file type: {file.kind}")


def cmd_cat(args: list[str], session: TerminalSession) -> None:
    """Display a file according to its kind."""
    path = args[0] if args else ""
    node = session.filesystem.resolve(path) if path else None
    if not isinstance(node, File):
        kind = ErrorKind.PATH_NOT_FOUND if node is None else ErrorKind.WRONG_NODE_TYPE
        _report(session, f"cat: No such file: {path}", kind)
        return
    _render_file(node, session)


def cmd_mkdir(args: list[str], session: TerminalSession) -> None:
    """Create a directory."""
    fs = session.filesystem
    if not args:
        _report(session, "mkdir: cannot create directory: ", ErrorKind.PATH_NOT_FOUND)
        return
    if not fs.create_directory(args[0]):
        _report(session, f"mkdir: cannot create directory: {args[0]}", fs.last_error)


def cmd_touch(args: list[str], session: TerminalSession) -> None:
    """Create an empty text file."""
    if not args:
        session.output.write_line("Usage: touch <filename>")
        return
    fs = session.filesystem
    if not fs.create_file(args[0]):
        _report(session, f"touch: cannot create file: {args[0]}", fs.last_error)


def cmd_rm(args: list[str], session: TerminalSession) -> None:
    """Delete a file.  Directories are refused."""
    if not args:
        session.output.write_line("Usage: rm <filename>")
        return
    fs = session.filesystem
    if not fs.delete_file(args[0]):
        _report(
            session, f"rm: cannot remove '{args[0]}': No such file or directory", fs.last_error
        )


# -- misc -----------------------------------------------------------------


def cmd_echo(args: list[str], session: TerminalSession) -> None:
    """Print the arguments separated by spaces."""
    session.output.write_line(" ".join(args))


def cmd_history(_args: list[str], session: TerminalSession) -> None:
    """Print the numbered command history."""
    for number, line in enumerate(session.history.entries(), start=1):
        session.output.write_line(f"{number}: {line}")


def cmd_date(_args: list[str], session: TerminalSession) -> None:
    """Print the current date and time in the LC_TIME locale's format."""
    session.output.write_line(datetime.now().astimezone().strftime("%c"))


def cmd_clear(_args: list[str], session: TerminalSession) -> None:
    """Wipe the screen."""
    session.output.clear()


def cmd_help(_args: list[str], session: TerminalSession) -> None:
    """List every command once, with its description."""
    for command in session.commands.unique_commands():
        session.output.write_line(f"{command.name:<{HELP_NAME_WIDTH}}- {command.description}")


def cmd_log(args: list[str], session: TerminalSession) -> None:
    """Show the most recent session log entries."""
    count = _LOG_TAIL
    if args:
        try:
            count = int(args[0])
        except ValueError:
            session.output.write_line("Usage: log [count]")
            return
    entries = session.logger.entries[-count:] if count > 0 else []
    if not entries:
        session.output.write_line("No log entries.")
        return
    for entry in entries:
        session.output.write_line(str(entry))


# -- addons ---------------------------------------------------------------


def cmd_run(args: list[str], session: TerminalSession) -> None:
    """Hand the terminal to an addon."""
    if not args:
        session.output.write_line("Usage: run <addon-name>")
        return
    session.addons.start_addon(args[0], session.addon_context())


def cmd_exit(_args: list[str], session: TerminalSession) -> None:
    """Leave the active addon."""
    if not session.addons.stop_addon():
        session.output.write_line("No active addon to exit.")


BUILTINS: tuple[Command, ...] = (
    Command("pwd", "Print current working directory", cmd_pwd),
    Command("ls", "List files in current directory", cmd_ls),
    Command("cd", "Change directory", cmd_cd),
    Command("cat", "Display file contents", cmd_cat),
    Command("mkdir", "Create a directory", cmd_mkdir),
    Command("touch", "Create an empty file", cmd_touch),
    Command("rm", "Delete a file", cmd_rm),
    Command("echo", "Print text", cmd_echo),
    Command("history", "Show command history. Use !<number> to rerun.", cmd_history),
    Command("date", "Displays the current date and time.", cmd_date, frozenset({"time"})),
    Command("tree", "Display the directory structure as a tree.", cmd_tree),
    Command("clear", "Clear terminal output", cmd_clear),
    Command("help", "List available commands", cmd_help),
    Command("run", "Run a registered addon", cmd_run),
    Command("exit", "Exits the current addon.", cmd_exit),
    Command("log", "Show recent session log entries", cmd_log),
)


def register_builtins(registry: CommandRegistry) -> None:
    """Register every built-in command with *registry*."""
    for command in BUILTINS:
        registry.register(command)
