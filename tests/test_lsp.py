"""Tests for the LSP server: completion lists and invalidation."""

from __future__ import annotations

from pathlib import Path

import pytest
from lsprotocol.types import (
    WORKSPACE_DID_CHANGE_WATCHED_FILES,
    ClientCapabilities,
    CompletionContext,
    CompletionItemKind,
    CompletionParams,
    CompletionTriggerKind,
    DidChangeWatchedFilesClientCapabilities,
    DidChangeWatchedFilesParams,
    FileChangeType,
    FileEvent,
    InitializedParams,
    Position,
    TextDocumentIdentifier,
    TextDocumentItem,
    TextDocumentSyncKind,
    WatchKind,
    WorkspaceClientCapabilities,
)
from pygls.workspace import Workspace

from reqcomplete.config import Settings
from reqcomplete.lsp import (
    RequireLanguageServer,
    _complete,
    did_change_watched_files,
    initialized,
    watched_files_registration,
)


@pytest.fixture
def lsp_env(tmp_path: Path):
    """Create a server with an initialized workspace and a document helper."""
    ls = RequireLanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    def put(source: str, name: str = "app.js") -> str:
        path = tmp_path / name
        path.write_text(source)
        uri = path.as_uri()
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="javascript", version=0, text=source)
        )
        return uri

    return ls, put


def _params(
    uri: str, line: int, character: int, typed: str | None = None
) -> CompletionParams:
    context = None
    if typed is not None:
        context = CompletionContext(
            trigger_kind=CompletionTriggerKind.TriggerCharacter, trigger_character=typed
        )
    return CompletionParams(
        text_document=TextDocumentIdentifier(uri=uri),
        position=Position(line=line, character=character),
        context=context,
    )


# ---------------------------------------------------------------------------
# require completions
# ---------------------------------------------------------------------------


class TestRequireCompletions:
    def test_builtins_then_project_files(self, lsp_env, tmp_path: Path) -> None:
        ls, put = lsp_env
        (tmp_path / "b.js").write_text("")
        uri = put("require(")
        result = _complete(ls, _params(uri, 0, 8))

        labels = [item.label for item in result.items]
        assert labels[0] == "assert"
        assert labels[-1] == "./b.js"
        assert result.is_incomplete is False

        first = result.items[0]
        assert first.kind == CompletionItemKind.Module
        assert first.text_edit.new_text == "'assert'"
        assert first.text_edit.range.start == Position(line=0, character=8)
        assert first.text_edit.range.end == Position(line=0, character=8)
        assert result.items[-1].kind == CompletionItemKind.File

    def test_sort_text_keeps_order(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("require(")
        result = _complete(ls, _params(uri, 0, 8))
        sort_texts = [item.sort_text for item in result.items]
        assert sort_texts == sorted(sort_texts)

    def test_partial_quoted_argument(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("x\nrequire('ht')")
        result = _complete(ls, _params(uri, 1, 11))
        http = next(item for item in result.items if item.label == "http")
        assert http.text_edit.new_text == "http'"
        assert http.text_edit.range.start == Position(line=1, character=9)
        assert http.text_edit.range.end == Position(line=1, character=12)


# ---------------------------------------------------------------------------
# General completions and bad positions
# ---------------------------------------------------------------------------


class TestGeneralCompletions:
    def test_member_require_not_offered_modules(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("obj.require(")
        result = _complete(ls, _params(uri, 0, 12))
        assert "http" not in [item.label for item in result.items]

    def test_word_span(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("let value = 1;\nval")
        result = _complete(ls, _params(uri, 1, 3))
        value = next(item for item in result.items if item.label == "value")
        assert value.kind == CompletionItemKind.Variable
        assert value.text_edit.range.start == Position(line=1, character=0)
        assert value.text_edit.range.end == Position(line=1, character=3)

    def test_position_outside_document(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("x")
        result = _complete(ls, _params(uri, 5, 0))
        assert result.items == []


# ---------------------------------------------------------------------------
# Invalidation
# ---------------------------------------------------------------------------


class TestInvalidation:
    def test_watched_files_reread_projects(self, lsp_env, tmp_path: Path) -> None:
        ls, put = lsp_env
        uri = put("require(")
        _complete(ls, _params(uri, 0, 8))
        assert ls.projects
        assert len(ls.completion_source.catalog.cache) == 1

        (tmp_path / "new.js").write_text("")
        did_change_watched_files(
            ls,
            DidChangeWatchedFilesParams(
                changes=[FileEvent(uri=(tmp_path / "new.js").as_uri(), type=FileChangeType.Created)]
            ),
        )
        assert ls.projects
        assert len(ls.completion_source.catalog.cache) == 0

        result = _complete(ls, _params(uri, 0, 8))
        assert result.items[-1].label == "./new.js"

    def test_project_reused(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("require(")
        _complete(ls, _params(uri, 0, 8))
        _complete(ls, _params(uri, 0, 8))
        assert len(ls.projects) == 1

    def test_project_refreshed_in_place(self, lsp_env, tmp_path: Path) -> None:
        ls, put = lsp_env
        uri = put("require(")
        _complete(ls, _params(uri, 0, 8))
        project = next(iter(ls.projects.values()))

        (tmp_path / "c.js").write_text("")
        ls.invalidate()
        result = _complete(ls, _params(uri, 0, 8))
        assert next(iter(ls.projects.values())) is project
        assert result.items[-1].label == "./c.js"


# ---------------------------------------------------------------------------
# Positions in UTF-16 code units
# ---------------------------------------------------------------------------


class TestUtf16Positions:
    def test_astral_character_before_require(self, lsp_env) -> None:
        ls, put = lsp_env
        source = "var s = '\U0001F600'; var x = require("
        uri = put(source)
        # The emoji takes two UTF-16 code units
        result = _complete(ls, _params(uri, 0, len(source) + 1))
        assert "fs" in [item.label for item in result.items]

    def test_edit_range_in_client_units(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("var s = '\U0001F600'; require('ht')")
        result = _complete(ls, _params(uri, 0, 25))
        http = next(item for item in result.items if item.label == "http")
        assert http.text_edit.range.start == Position(line=0, character=23)
        assert http.text_edit.range.end == Position(line=0, character=26)

    def test_character_past_line_end(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("require(\nx")
        result = _complete(ls, _params(uri, 0, 9))
        assert result.items == []


# ---------------------------------------------------------------------------
# Trigger characters
# ---------------------------------------------------------------------------


class TestTriggerCharacters:
    def test_paren_after_require(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("x = require(")
        result = _complete(ls, _params(uri, 0, 12, typed="("))
        assert "http" in [item.label for item in result.items]

    def test_quote_after_require_paren(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("x = require(')")
        result = _complete(ls, _params(uri, 0, 13, typed="'"))
        http = next(item for item in result.items if item.label == "http")
        assert http.text_edit.new_text == "http'"

    def test_paren_after_other_call(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("let value = 1;\nfoo(")
        assert _complete(ls, _params(uri, 1, 4, typed="(")).items == []

    def test_quote_outside_require(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("x = '")
        assert _complete(ls, _params(uri, 0, 5, typed="'")).items == []

    def test_dot_keeps_general_completions(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("let value = 1;\nvalue.")
        result = _complete(ls, _params(uri, 1, 6, typed="."))
        assert result.items

    def test_invoked_explicitly(self, lsp_env) -> None:
        ls, put = lsp_env
        uri = put("let value = 1;\nfoo(")
        assert _complete(ls, _params(uri, 1, 4)).items


# ---------------------------------------------------------------------------
# Watched-files registration
# ---------------------------------------------------------------------------


def _capabilities(dynamic: bool) -> ClientCapabilities:
    return ClientCapabilities(
        workspace=WorkspaceClientCapabilities(
            did_change_watched_files=DidChangeWatchedFilesClientCapabilities(
                dynamic_registration=dynamic
            )
        )
    )


class TestWatcherRegistration:
    def test_registration_contents(self) -> None:
        registration = watched_files_registration(Settings())
        assert registration.method == WORKSPACE_DID_CHANGE_WATCHED_FILES
        watchers = registration.register_options.watchers
        assert [w.glob_pattern for w in watchers] == ["**/*.js", "**/package.json"]
        assert all(w.kind == WatchKind.Create | WatchKind.Delete for w in watchers)

    def test_custom_main_file_watched(self) -> None:
        registration = watched_files_registration(Settings(main_file="main.mjs"))
        patterns = [w.glob_pattern for w in registration.register_options.watchers]
        assert patterns == ["**/*.js", "**/package.json", "**/main.mjs"]

    def test_registered_on_initialized(self, lsp_env, monkeypatch) -> None:
        ls, _ = lsp_env
        ls.protocol.client_capabilities = _capabilities(True)
        sent = []
        monkeypatch.setattr(ls, "client_register_capability", sent.append)

        initialized(ls, InitializedParams())

        assert len(sent) == 1
        (registration,) = sent[0].registrations
        assert registration.method == WORKSPACE_DID_CHANGE_WATCHED_FILES
        patterns = [w.glob_pattern for w in registration.register_options.watchers]
        assert "**/*.js" in patterns and "**/package.json" in patterns

    def test_not_registered_without_client_support(self, lsp_env, monkeypatch) -> None:
        ls, _ = lsp_env
        ls.protocol.client_capabilities = _capabilities(False)
        sent = []
        monkeypatch.setattr(ls, "client_register_capability", sent.append)
        initialized(ls, InitializedParams())
        assert sent == []
