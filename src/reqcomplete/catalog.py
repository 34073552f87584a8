"""Module candidates for require completions: runtime built-ins and project modules."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from reqcomplete.builtins import BUILTIN_MODULES
from reqcomplete.config import Settings
from reqcomplete.project import Node, Project, relative_node_path
from reqcomplete.tokens import QuoteMode


class IconKind(Enum):
    BUILTIN = auto()
    PROJECT = auto()
    KEYWORD = auto()
    IDENTIFIER = auto()


@dataclass(frozen=True, slots=True)
class ModuleCandidate:
    """A module specifier offered inside ``require(...)``."""

    display_text: str
    description: str
    icon: IconKind

    def insertion_text(self, quote: QuoteMode, default_quote: str = "'") -> str:
        """Text to insert for *quote*, the opening quote already in the buffer.

        With no opening quote both quotes are inserted; otherwise only the
        closing quote, of the same kind as the opening one.
        """
        if quote is QuoteMode.NONE:
            return f"{default_quote}{self.display_text}{default_quote}"
        return f"{self.display_text}{quote.char}"


def builtin_candidates() -> list[ModuleCandidate]:
    """Candidates for every module built into the runtime."""
    return [
        ModuleCandidate(name, description, IconKind.BUILTIN)
        for name, description in BUILTIN_MODULES.items()
    ]


class CompletionCache:
    """Project candidates per file node, until invalidated.

    The owner invalidates entries when a file's dependency surface changes.
    Hold ``locked()`` around a lookup-then-store sequence when the cache is
    shared between threads.
    """

    def __init__(self) -> None:
        self._entries: dict[Node, tuple[ModuleCandidate, ...]] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._entries)

    @contextmanager
    def locked(self) -> Iterator[CompletionCache]:
        with self._lock:
            yield self

    def try_get(self, node: Node) -> tuple[bool, tuple[ModuleCandidate, ...]]:
        with self._lock:
            if node in self._entries:
                return True, self._entries[node]
            return False, ()

    def store(self, node: Node, candidates: tuple[ModuleCandidate, ...]) -> None:
        with self._lock:
            self._entries[node] = candidates

    def invalidate(self, node: Node | None = None) -> None:
        """Drop one file's entry, or every entry when *node* is None.

        The folder listings of the affected project trees are re-read on the
        next walk, so files added or removed since then are picked up.
        """
        with self._lock:
            if node is None:
                roots = {entry.root for entry in self._entries}
                self._entries.clear()
            else:
                roots = {node.root}
                self._entries.pop(node, None)
            for root in roots:
                root.refresh()


class ModuleCatalog:
    """Walks a project hierarchy for requirable modules, caching per file."""

    def __init__(self, settings: Settings | None = None, cache: CompletionCache | None = None) -> None:
        self.settings = settings or Settings()
        self.cache = cache if cache is not None else CompletionCache()
        self._logger = logging.getLogger("ModuleCatalog")

    def project_candidates(self, project: Project | None, path: Path | str) -> tuple[ModuleCandidate, ...]:
        """Candidates from *project* for the file at *path*.

        Anything that prevents locating the file (no project, a path outside
        it, an unreadable folder) yields no candidates rather than an error.
        """
        if project is None:
            return ()

        try:
            with self.cache.locked() as cache:
                node = project.find_node(path)
                if node is None or node.is_folder:
                    self._logger.debug("%s is not a file in %r", path, project)
                    return ()

                hit, candidates = cache.try_get(node)
                if hit:
                    self._logger.debug("candidate cache hit for %s", node.path)
                    return candidates

                candidates = tuple(self.walk(project, node))
                cache.store(node, candidates)
                self._logger.debug("cached %d candidates for %s", len(candidates), node.path)
                return candidates
        except OSError as exc:
            self._logger.warning("cannot list project modules for %s: %s", path, exc)
            return ()

    def walk(self, project: Project, node: Node) -> list[ModuleCandidate]:
        """Collect ancestor packages and peer/child modules for the file *node*."""
        found: list[ModuleCandidate] = []
        if node.parent is not None:
            self._parent_modules(project, node.parent, found)
        self._peer_and_child_modules(project, node, found)
        return found

    # ------------------------------------------------------------------
    # Packages in modules directories of every ancestor folder
    # ------------------------------------------------------------------

    def _parent_modules(self, project: Project, folder: Node, found: list[ModuleCandidate]) -> None:
        for ancestor in folder.ancestors():
            modules = ancestor.find_child(self.settings.modules_dir)
            if modules is not None and modules.is_folder:
                self._modules_in(project, modules, modules, found)

    def _modules_in(
        self,
        project: Project,
        folder: Node,
        modules: Node,
        found: list[ModuleCandidate],
    ) -> None:
        for child in folder.children:
            if not child.is_folder:
                if child.extension == self.settings.extension.lower():
                    found.append(self._make(project, child, relative_node_path(modules, child)))
            elif self._is_package(child):
                # A package is required as a whole, never by its inner files
                found.append(self._make(project, child, relative_node_path(modules, child)))
            elif not self._is_modules_dir(child):
                # Namespaced layouts such as @scope/name
                self._modules_in(project, child, modules, found)

    # ------------------------------------------------------------------
    # Files beside and below the current file
    # ------------------------------------------------------------------

    def _peer_and_child_modules(self, project: Project, node: Node, found: list[ModuleCandidate]) -> None:
        folder = node.parent
        if folder is None:
            return
        for child in self.code_files(folder):
            if child is node:
                continue
            found.append(self._make(project, child, "./" + relative_node_path(folder, child)))

    def code_files(self, folder: Node) -> Iterator[Node]:
        """Source files and packages under *folder*, skipping modules directories."""
        for child in folder.children:
            if not child.is_folder:
                if child.extension == self.settings.extension.lower():
                    yield child
            elif self._is_modules_dir(child):
                continue
            elif self._is_package(child):
                yield child
            else:
                yield from self.code_files(child)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_package(self, folder: Node) -> bool:
        return (
            folder.find_child(self.settings.package_file) is not None
            or folder.find_child(self.settings.main_file) is not None
        )

    def _is_modules_dir(self, folder: Node) -> bool:
        return folder.name.casefold() == self.settings.modules_dir.casefold()

    def _make(self, project: Project, node: Node, display_text: str) -> ModuleCandidate:
        return ModuleCandidate(
            display_text,
            f"{project.relative_path(node)} (in project)",
            IconKind.PROJECT,
        )
