"""Assemble completion sets for a cursor position."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from reqcomplete.catalog import IconKind, ModuleCandidate, ModuleCatalog, builtin_candidates
from reqcomplete.config import Settings
from reqcomplete.lexer import KEYWORDS, TokenStream, tokenize
from reqcomplete.project import Project
from reqcomplete.span import applicable_span_or_empty
from reqcomplete.tokens import QuoteMode, ReplacementSpan, TokenType
from reqcomplete.trigger import require_context, should_trigger

REQUIRE_MONIKER = "Node.js require"
REQUIRE_DISPLAY_NAME = "Node.js require"
GENERAL_MONIKER = "JavaScript"
GENERAL_DISPLAY_NAME = "JavaScript"


@dataclass(frozen=True, slots=True)
class CompletionItem:
    display_text: str
    insertion_text: str
    description: str
    icon: IconKind


@dataclass(frozen=True, slots=True)
class CompletionSet:
    """Completions offered for one request, with the span a commit replaces."""

    moniker: str
    display_name: str
    span: ReplacementSpan
    items: list[CompletionItem] = field(default_factory=list)

    @property
    def is_require(self) -> bool:
        return self.moniker == REQUIRE_MONIKER


def sort_key(candidate: ModuleCandidate) -> tuple[bool, str]:
    """Specifiers starting with "." sort after all others, each group by ordinal order."""
    return candidate.display_text.startswith("."), candidate.display_text


def assemble(
    builtins: list[ModuleCandidate],
    project: tuple[ModuleCandidate, ...] | list[ModuleCandidate],
    quote: QuoteMode,
    span: ReplacementSpan,
    default_quote: str = "'",
) -> CompletionSet:
    """Merge, sort and package require candidates. Duplicates are kept."""
    candidates = sorted([*builtins, *project], key=sort_key)
    items = [
        CompletionItem(
            c.display_text,
            c.insertion_text(quote, default_quote),
            c.description,
            c.icon,
        )
        for c in candidates
    ]
    return CompletionSet(REQUIRE_MONIKER, REQUIRE_DISPLAY_NAME, span, items)


class CompletionSource:
    """Decides between require and general completions for a cursor position."""

    def __init__(self, catalog: ModuleCatalog | None = None) -> None:
        self.catalog = catalog or ModuleCatalog()
        self._logger = logging.getLogger("CompletionSource")

    @property
    def settings(self) -> Settings:
        return self.catalog.settings

    def complete(
        self,
        stream: TokenStream,
        cursor: int,
        project: Project | None = None,
        path: Path | str | None = None,
    ) -> CompletionSet:
        """Completions at *cursor* in the document *stream*.

        *project* and *path* locate the document in its project; without them
        only built-in modules are offered inside require.
        """
        cursor = stream.clamp(cursor)
        if should_trigger(stream, cursor, eat_open_paren=True, allow_quote=True):
            return self.require_completions(stream, cursor, project, path)
        return self.general_completions(stream, cursor)

    def require_completions(
        self,
        stream: TokenStream,
        cursor: int,
        project: Project | None = None,
        path: Path | str | None = None,
    ) -> CompletionSet:
        context = require_context(stream, cursor)
        project_candidates: tuple[ModuleCandidate, ...] = ()
        if path is not None:
            project_candidates = self.catalog.project_candidates(project, path)

        result = assemble(
            builtin_candidates(),
            project_candidates,
            context.quote,
            context.span,
            self.settings.default_quote,
        )
        self._logger.debug(
            "require completions at %d: %d items, quote=%s, span=%s",
            cursor,
            len(result.items),
            context.quote.name,
            context.span,
        )
        return result

    def general_completions(self, stream: TokenStream, cursor: int) -> CompletionSet:
        """Keywords and identifiers already in the document."""
        span = applicable_span_or_empty(stream, cursor)
        words: dict[str, IconKind] = {kw: IconKind.KEYWORD for kw in KEYWORDS}
        for tok in tokenize(stream.source):
            # Skip the word being typed so it is not offered back to itself
            if tok.type == TokenType.IDENTIFIER and tok.start != span.start:
                words.setdefault(tok.text, IconKind.IDENTIFIER)

        items = [
            CompletionItem(word, word, icon.name.lower(), icon)
            for word, icon in sorted(words.items())
        ]
        return CompletionSet(GENERAL_MONIKER, GENERAL_DISPLAY_NAME, span, items)
