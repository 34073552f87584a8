"""Module-path completion for require() calls in JavaScript sources."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reqcomplete.completion import CompletionSet
    from reqcomplete.config import Settings

__version__ = "0.1.0"


def complete(
    source: str,
    offset: int,
    path: Path | str | None = None,
    project_dir: Path | str | None = None,
    settings: Settings | None = None,
) -> CompletionSet:
    """Compute completions at *offset* in *source*.

    With *path* (and optionally *project_dir*, defaulting to the file's folder)
    project modules are offered alongside the runtime's built-in modules.
    """
    from reqcomplete.catalog import ModuleCatalog
    from reqcomplete.completion import CompletionSource
    from reqcomplete.lexer import TokenStream
    from reqcomplete.project import Project

    project = None
    if path is not None:
        project = Project(Path(project_dir) if project_dir is not None else Path(path).parent)
    source_completions = CompletionSource(ModuleCatalog(settings))
    return source_completions.complete(TokenStream(source), offset, project, path)
