"""Tree nodes for the simulated file system.

The tree has two kinds of node:

- **File**: a leaf holding ``content`` and a ``kind`` that tells the
  terminal how to render it (print text, embed an image, ...).
- **Directory**: an interior node whose ``children`` dict maps names to
  nodes.  Python dicts preserve insertion order, which is exactly the
  order ``ls`` and ``tree`` display.

Design choices:
    - **Directories own their children.**  A node never points back at
      its parent, so the tree has no reference cycles.  The parent is
      found on demand by searching from the root (see
      ``VirtualFileSystem.parent_of``).
    - **Identity, not equality.**  ``eq=False`` keeps the default
      ``object`` comparison: two empty directories called ``tmp`` in
      different places are different nodes, and the parent search
      relies on ``is``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeAlias


class FileKind(StrEnum):
    """How a file's content should be rendered."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    EXECUTABLE = "exe"
    OTHER = "other"


@dataclass(eq=False)
class File:
    """A leaf node.

    For ``TEXT`` files ``content`` is the text itself.  For the
    reference kinds it is a URL (``IMAGE``, ``AUDIO``) or the name of
    the addon to ``run`` (``EXECUTABLE``).
    """

    name: str
    content: str = ""
    kind: FileKind = FileKind.TEXT


@dataclass(eq=False)
class Directory:
    """An interior node mapping child names to nodes."""

    name: str
    children: dict[str, Node] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]

    def get_child(self, name: str) -> Node | None:
        """Return the child called *name*, or None."""
        return self.children.get(name)


Node: TypeAlias = File | Directory
