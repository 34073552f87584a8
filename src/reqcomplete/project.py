"""Project hierarchy: folder and file nodes backed by the file system."""

from __future__ import annotations

import os
from pathlib import Path


class Node:
    """A file or folder in a project tree.

    Nodes compare and hash by identity, so they can key per-file caches.
    Folder children are listed from disk the first time they are needed and
    kept until ``refresh()``; entries still present after a refresh keep
    their Node objects.
    """

    def __init__(self, path: Path, parent: Node | None, is_folder: bool) -> None:
        self.path = path
        self.parent = parent
        self.is_folder = is_folder
        self._children: tuple[Node, ...] | None = None
        self._previous: dict[str, Node] = {}

    def __repr__(self) -> str:
        kind = "Folder" if self.is_folder else "File"
        return f"<{kind} {self.path}>"

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()

    @property
    def root(self) -> Node:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def children(self) -> tuple[Node, ...]:
        """Immediate children sorted by name. Raises OSError if unreadable."""
        if self._children is None:
            self._children = self._scan()
        return self._children

    def _scan(self) -> tuple[Node, ...]:
        if not self.is_folder:
            return ()
        found = []
        with os.scandir(self.path) as entries:
            for entry in entries:
                is_folder = entry.is_dir(follow_symlinks=True)
                child = self._previous.get(entry.name)
                if child is None or child.is_folder != is_folder:
                    child = Node(Path(entry.path), self, is_folder)
                found.append(child)
        self._previous = {}
        found.sort(key=lambda n: n.name)
        return tuple(found)

    def refresh(self) -> None:
        """Forget the listings of this folder and every folder below it."""
        if self._children is None:
            return
        for child in self._children:
            child.refresh()
        self._previous = {child.name: child for child in self._children}
        self._children = None

    @property
    def first_child(self) -> Node | None:
        return self.children[0] if self.children else None

    @property
    def next_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        siblings = self.parent.children
        idx = siblings.index(self)
        return siblings[idx + 1] if idx + 1 < len(siblings) else None

    def find_child(self, name: str) -> Node | None:
        """Find an immediate child by name, ignoring case."""
        wanted = name.casefold()
        for child in self.children:
            if child.name.casefold() == wanted:
                return child
        return None

    def ancestors(self) -> list[Node]:
        """This node and every parent up to the project root, nearest first."""
        chain: list[Node] = []
        node: Node | None = self
        while node is not None:
            chain.append(node)
            node = node.parent
        return chain


class Project:
    """A project rooted at *home*; only nodes under it are reachable."""

    def __init__(self, home: Path) -> None:
        self.home = Path(os.path.abspath(home))
        self.root = Node(self.home, None, True)

    def __repr__(self) -> str:
        return f"Project({str(self.home)!r})"

    def find_node(self, path: Path | str) -> Node | None:
        """Map an absolute path to its node, or None if it is not in the project."""
        target = Path(os.path.abspath(path))
        try:
            parts = target.relative_to(self.home).parts
        except ValueError:
            return None

        node = self.root
        for part in parts:
            child = node.find_child(part)
            if child is None:
                return None
            node = child
        return node

    def relative_path(self, node: Node) -> str:
        """Friendly project-relative path with "/" separators."""
        return relative_node_path(self.root, node)


def relative_node_path(relative_to: Node, node: Node) -> str:
    """Path of *node* relative to the folder *relative_to*, "/" separated."""
    return Path(os.path.relpath(node.path, relative_to.path)).as_posix()
