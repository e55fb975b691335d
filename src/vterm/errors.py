"""Failure taxonomy for the terminal.

Nothing the user types can crash a session.  Operations that can fail
return a boolean or ``None`` and the command handler turns that into a
human-readable line.  The *reason* for a failure still matters for the
session log, so every failure is classified with an ``ErrorKind``.

This mirrors ``errno`` in Unix: system calls return ``-1`` and the
reason is left in a side channel for whoever wants to look.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classify why an operation failed."""

    PATH_NOT_FOUND = "path_not_found"
    NAME_COLLISION = "name_collision"
    WRONG_NODE_TYPE = "wrong_node_type"
    ADDON_NOT_FOUND = "addon_not_found"
    ADDON_ALREADY_ACTIVE = "addon_already_active"
    INVALID_HISTORY_INDEX = "invalid_history_index"
    UNKNOWN_COMMAND = "unknown_command"
