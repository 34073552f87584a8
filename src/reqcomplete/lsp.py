"""Minimal LSP server for require() module-path completion."""

from __future__ import annotations

import logging
from pathlib import Path

from lsprotocol.types import (
    INITIALIZED,
    TEXT_DOCUMENT_COMPLETION,
    WORKSPACE_DID_CHANGE_WATCHED_FILES,
    CompletionContext,
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    CompletionTriggerKind,
    DidChangeWatchedFilesParams,
    DidChangeWatchedFilesRegistrationOptions,
    FileSystemWatcher,
    InitializedParams,
    Position,
    Range,
    Registration,
    RegistrationParams,
    TextDocumentSyncKind,
    TextEdit,
    WatchKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import PositionCodec

from reqcomplete import __version__
from reqcomplete.catalog import IconKind, ModuleCatalog
from reqcomplete.completion import CompletionSet, CompletionSource
from reqcomplete.config import Settings, load_settings
from reqcomplete.errors import ConfigError
from reqcomplete.lexer import TokenStream
from reqcomplete.project import Project
from reqcomplete.trigger import should_trigger_eagerly

TRIGGER_CHARACTERS = ["(", "'", '"', "/", "."]
EAGER_TRIGGER_CHARACTERS = ("(", "'", '"')
WATCHER_REGISTRATION_ID = "reqcomplete-watched-files"

_ITEM_KINDS = {
    IconKind.BUILTIN: CompletionItemKind.Module,
    IconKind.PROJECT: CompletionItemKind.File,
    IconKind.KEYWORD: CompletionItemKind.Keyword,
    IconKind.IDENTIFIER: CompletionItemKind.Variable,
}


class RequireLanguageServer(LanguageServer):
    """Language server holding the module catalog and one Project per root."""

    def __init__(self, *args, settings: Settings | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.settings = settings or Settings()
        self.completion_source = CompletionSource(ModuleCatalog(self.settings))
        self.projects: dict[Path, Project] = {}

    def project_for(self, document_path: str | None) -> Project | None:
        """The project containing *document_path*: the workspace root, else its folder."""
        if not document_path:
            return None
        root_path = self.workspace.root_path
        home = Path(root_path) if root_path else Path(document_path).parent
        if home not in self.projects:
            self.projects[home] = Project(home)
        return self.projects[home]

    def invalidate(self) -> None:
        """Re-read project folders on next use and drop every cached candidate list."""
        for project in self.projects.values():
            project.root.refresh()
        self.completion_source.catalog.cache.invalidate()


server = RequireLanguageServer(
    "reqcomplete-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def _offset(stream: TokenStream, codec: PositionCodec, position: Position) -> int | None:
    """Offset of an LSP position whose character counts the client's code units."""
    if not 0 <= position.line < stream.line_count:
        return None
    start, end = stream.line_extent(position.line)
    units = 0
    character = 0
    for ch in stream.text(start, end):
        if units >= position.character:
            break
        units += codec.client_num_units(ch)
        character += 1
    if units < position.character:
        return None
    return stream.offset_at(position.line, character)


def _position(stream: TokenStream, codec: PositionCodec, offset: int) -> Position:
    line, character = stream.position_at(offset)
    line_start = stream.line_extent(line)[0]
    units = codec.client_num_units(stream.text(line_start, line_start + character))
    return Position(line=line, character=units)


def _range(stream: TokenStream, codec: PositionCodec, start: int, end: int) -> Range:
    return Range(start=_position(stream, codec, start), end=_position(stream, codec, end))


def to_completion_list(
    result: CompletionSet, stream: TokenStream, codec: PositionCodec | None = None
) -> CompletionList:
    """Convert a completion set into LSP items that edit the resolved span."""
    edit_range = _range(stream, codec or PositionCodec(), result.span.start, result.span.end)
    items = [
        CompletionItem(
            label=item.display_text,
            kind=_ITEM_KINDS[item.icon],
            detail=item.description,
            sort_text=f"{idx:05d}",
            text_edit=TextEdit(range=edit_range, new_text=item.insertion_text),
        )
        for idx, item in enumerate(result.items)
    ]
    return CompletionList(is_incomplete=False, items=items)


def _opens_require(stream: TokenStream, cursor: int, context: CompletionContext | None) -> bool:
    """False when a typed "(" or quote does not open a require argument."""
    if context is None or context.trigger_kind != CompletionTriggerKind.TriggerCharacter:
        return True
    typed = context.trigger_character
    if typed not in EAGER_TRIGGER_CHARACTERS or stream.text(cursor - 1, cursor) != typed:
        return True
    # Look at the buffer as it was before the character went in
    source = stream.source
    before = TokenStream(source[: cursor - 1] + source[cursor:])
    return should_trigger_eagerly(before, cursor - 1, typed)


def _complete(ls: RequireLanguageServer, params: CompletionParams) -> CompletionList:
    """Compute completions for the document position in *params*."""
    doc = ls.workspace.get_text_document(params.text_document.uri)
    stream = TokenStream(doc.source)
    codec = doc.position_codec
    cursor = _offset(stream, codec, params.position)
    if cursor is None or not _opens_require(stream, cursor, params.context):
        return CompletionList(is_incomplete=False, items=[])

    path = doc.path
    project = ls.project_for(path)
    result = ls.completion_source.complete(stream, cursor, project, path)
    return to_completion_list(result, stream, codec)


@server.feature(INITIALIZED)
def initialized(ls: RequireLanguageServer, params: InitializedParams) -> None:
    """Ask the client to report created and deleted source and package files."""
    capabilities = ls.client_capabilities.workspace
    watched = capabilities.did_change_watched_files if capabilities is not None else None
    if watched is None or not watched.dynamic_registration:
        return
    registration = watched_files_registration(ls.settings)
    ls.client_register_capability(RegistrationParams(registrations=[registration]))


def watched_files_registration(settings: Settings) -> Registration:
    kind = WatchKind.Create | WatchKind.Delete
    patterns = [f"**/*{settings.extension}", f"**/{settings.package_file}"]
    if not settings.main_file.lower().endswith(settings.extension.lower()):
        patterns.append(f"**/{settings.main_file}")
    watchers = [FileSystemWatcher(glob_pattern=pattern, kind=kind) for pattern in patterns]
    return Registration(
        id=WATCHER_REGISTRATION_ID,
        method=WORKSPACE_DID_CHANGE_WATCHED_FILES,
        register_options=DidChangeWatchedFilesRegistrationOptions(watchers=watchers),
    )


@server.feature(TEXT_DOCUMENT_COMPLETION, CompletionOptions(trigger_characters=TRIGGER_CHARACTERS))
def completion(ls: RequireLanguageServer, params: CompletionParams) -> CompletionList:
    return _complete(ls, params)


@server.feature(WORKSPACE_DID_CHANGE_WATCHED_FILES)
def did_change_watched_files(ls: RequireLanguageServer, params: DidChangeWatchedFilesParams) -> None:
    # Any created, renamed or deleted file can change what other files may require
    if params.changes:
        ls.invalidate()


def main() -> int:
    try:
        settings = load_settings(None, Path.cwd())
    except ConfigError as exc:
        logging.basicConfig()
        logging.getLogger("RequireLanguageServer").error("%s", exc)
        return 2

    logging.basicConfig(level=settings.log_level_number)
    server.settings = settings
    server.completion_source = CompletionSource(ModuleCatalog(settings))
    server.start_io()
    return 0
