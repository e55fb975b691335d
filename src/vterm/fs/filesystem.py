"""In-memory file system with path resolution and a working directory.

The file system is a tree of ``Directory`` and ``File`` nodes rooted at
``/``.  Paths are resolved the way a shell resolves them:

- A leading ``/`` starts the walk at the root; anything else starts at
  the **current working directory** (cwd).
- ``.`` stays put, ``..`` moves to the parent.  The root is its own
  parent, so ``cd ..`` at ``/`` is harmless.
- Every other segment must name a child of the current directory.

Failures are not exceptions.  Each operation answers ``True``/``False``
(or ``None`` for lookups), and records the reason in ``last_error``,
the way a Unix syscall returns ``-1`` and sets ``errno``.  The shell
turns that into a message; nothing a user types can crash the session.

Design choices:
    - **No parent pointers.**  Nodes don't know their parent, so the
      tree is strictly owned top-down.  ``parent_of`` searches from the
      root instead: O(tree size), which is fine for a toy tree.
    - **Insertion-ordered listings.**  ``ls`` shows entries in the
      order they were created, not sorted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vterm.errors import ErrorKind
from vterm.fs.nodes import Directory, File, FileKind

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from vterm.fs.nodes import Node

ROOT_NAME = "/"

README_TEXT = "Welcome to the terminal!"

# Fixed layout every session starts with; creation order is listing order.
_INITIAL_DIRECTORIES = ("/C", "/C/Users", "/C/Program Files", "/D")

# Tree connector glyphs.
_TEE = "├── "
_CORNER = "└── "
_PIPE = "│   "
_BLANK = "    "


def _split_path(path: str) -> tuple[str, str]:
    """Split a path into (parent_path, child_name).

    Trailing slashes are ignored.  A bare name lives in the cwd, which
    is spelled ``.`` so it can be handed straight to ``resolve``.

    Examples::

        "/C/Users"  → ("/C", "Users")
        "/notes"    → ("/", "notes")
        "a/b/"      → ("a", "b")
        "notes"     → (".", "notes")

    """
    trimmed = path.rstrip("/")
    if not trimmed:
        return ("/", "")
    last_slash = trimmed.rfind("/")
    if last_slash == -1:
        return (".", trimmed)
    if last_slash == 0:
        return ("/", trimmed[1:])
    return (trimmed[:last_slash], trimmed[last_slash + 1 :])


def _is_valid_name(name: str) -> bool:
    """Return True if *name* can label a new node."""
    return name not in {"", ".", ".."}


class VirtualFileSystem:
    """A simulated file system owned by one terminal session.

    A fresh instance is pre-populated with the standard layout:
    ``/C``, ``/C/Users``, ``/C/Program Files``, ``/D`` and
    ``/readme.txt``.
    """

    def __init__(self, *, populate: bool = True) -> None:
        """Create the root directory and, by default, the initial layout.

        Args:
            populate: Create the standard directories and readme.  Pass
                False for a bare root.

        """
        self._root = Directory(ROOT_NAME)
        self._cwd: Directory = self._root
        self.last_error: ErrorKind | None = None
        if populate:
            for path in _INITIAL_DIRECTORIES:
                self.create_directory(path)
            self.create_file("/readme.txt", README_TEXT)

    @property
    def root(self) -> Directory:
        """Return the root directory."""
        return self._root

    @property
    def cwd(self) -> Directory:
        """Return the current working directory."""
        return self._cwd

    # -- lookup -----------------------------------------------------------

    def resolve(self, path: str) -> Node | None:
        """Translate *path* into a node, or None if it does not exist.

        Resolution stops with None the moment a segment is missing, or
        when a file is reached but segments remain.
        """
        if path == ROOT_NAME:
            return self._root

        current: Node = self._root if path.startswith("/") else self._cwd
        for part in (p for p in path.split("/") if p):
            if not isinstance(current, Directory):
                return None
            if part == ".":
                continue
            if part == "..":
                current = self.parent_of(current) or current
                continue
            child = current.get_child(part)
            if child is None:
                return None
            current = child
        return current

    def parent_of(self, node: Node) -> Directory | None:
        """Return the directory that owns *node*, or None for the root.

        Found by a depth-first search from the root; nodes do not store
        a reference to their parent.
        """
        if node is self._root:
            return None
        stack = [self._root]
        while stack:
            directory = stack.pop()
            for child in directory.children.values():
                if child is node:
                    return directory
                if isinstance(child, Directory):
                    stack.append(child)
        return None

    def full_path(self, node: Node) -> str:
        """Return the absolute path of *node* by walking up to the root."""
        names: list[str] = []
        current: Node | None = node
        while current is not None and current is not self._root:
            names.append(current.name)
            current = self.parent_of(current)
        if not names:
            return ROOT_NAME
        return "/" + "/".join(reversed(names))

    def list_files(self, path: str = ".") -> list[str]:
        """List a directory's entries in insertion order.

        Directories are suffixed with ``/``.  Returns an empty list if
        *path* is not a directory.
        """
        directory = self.resolve(path)
        if not isinstance(directory, Directory):
            self._fail(self._kind_for_missing_directory(directory))
            return []
        self.last_error = None
        return [
            f"{name}/" if isinstance(child, Directory) else name
            for name, child in directory.children.items()
        ]

    def walk_tree(self, directory: Directory, prefix: str = "") -> Iterator[str]:
        """Yield ``tree``-style lines for everything below *directory*.

        The last child of each directory gets the corner glyph, every
        other child the tee.
        """
        children = list(directory.children.values())
        for index, child in enumerate(children):
            is_last = index == len(children) - 1
            connector = _CORNER if is_last else _TEE
            if isinstance(child, Directory):
                yield f"{prefix}{connector}{child.name}/"
                yield from self.walk_tree(child, prefix + (_BLANK if is_last else _PIPE))
            else:
                yield f"{prefix}{connector}{child.name}"

    # -- mutation ---------------------------------------------------------

    def change_directory(self, path: str) -> bool:
        """Move the cwd to *path* if it names a directory."""
        target = self.resolve(path)
        if not isinstance(target, Directory):
            return self._fail(self._kind_for_missing_directory(target))
        self._cwd = target
        self.last_error = None
        return True

    def create_file(self, path: str, content: str = "", kind: FileKind = FileKind.TEXT) -> bool:
        """Create a file at *path*.

        Fails if the parent directory does not resolve or a sibling
        already uses the name.
        """
        return self._insert(path, lambda name: File(name, content, kind))

    def create_directory(self, path: str) -> bool:
        """Create an empty directory at *path* (same rules as create_file)."""
        return self._insert(path, Directory)

    def delete_file(self, path: str) -> bool:
        """Delete the file at *path*.

        Only files can be deleted; a directory target fails with
        ``WRONG_NODE_TYPE`` and the tree is left untouched.
        """
        parent_path, name = _split_path(path)
        parent = self.resolve(parent_path)
        if not isinstance(parent, Directory) or not _is_valid_name(name):
            return self._fail(ErrorKind.PATH_NOT_FOUND)
        target = parent.get_child(name)
        if target is None:
            return self._fail(ErrorKind.PATH_NOT_FOUND)
        if not isinstance(target, File):
            return self._fail(ErrorKind.WRONG_NODE_TYPE)
        del parent.children[name]
        self.last_error = None
        return True

    def _insert(self, path: str, make: Callable[[str], Node]) -> bool:
        """Link a new node under the parent of *path*."""
        parent_path, name = _split_path(path)
        parent = self.resolve(parent_path)
        if not isinstance(parent, Directory) or not _is_valid_name(name):
            return self._fail(ErrorKind.PATH_NOT_FOUND)
        if name in parent.children:
            return self._fail(ErrorKind.NAME_COLLISION)
        parent.children[name] = make(name)
        self.last_error = None
        return True

    def _fail(self, kind: ErrorKind) -> bool:
        """Record *kind* as the last error and return False."""
        self.last_error = kind
        return False

    @staticmethod
    def _kind_for_missing_directory(node: Node | None) -> ErrorKind:
        """Classify a lookup that was expected to find a directory."""
        return ErrorKind.PATH_NOT_FOUND if node is None else ErrorKind.WRONG_NODE_TYPE
