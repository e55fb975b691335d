"""File system subsystem — tree nodes and the virtual file system.

Re-exports public symbols so callers can write::

    from vterm.fs import VirtualFileSystem, FileKind
"""

from vterm.fs.filesystem import README_TEXT, ROOT_NAME, VirtualFileSystem
from vterm.fs.nodes import Directory, File, FileKind, Node

__all__ = [
    "README_TEXT",
    "ROOT_NAME",
    "Directory",
    "File",
    "FileKind",
    "Node",
    "VirtualFileSystem",
]
