"""Shared test fixtures and helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from reqcomplete.lexer import TokenStream, tokenize
from reqcomplete.tokens import Token, TokenType

CURSOR = "|"


def at_cursor(marked: str) -> tuple[TokenStream, int]:
    """Split text holding one "|" cursor marker into a stream and an offset."""
    assert marked.count(CURSOR) == 1, f"expected exactly one cursor marker in {marked!r}"
    cursor = marked.index(CURSOR)
    return TokenStream(marked.replace(CURSOR, "")), cursor


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns the tokens."""

    def _lex(source: str) -> list[Token]:
        return tokenize(source)

    return _lex


@pytest.fixture
def make_tree(tmp_path: Path):
    """Return a helper that creates files (and their folders) under tmp_path.

    Paths ending in "/" create empty folders.
    """

    def _make(*paths: str) -> Path:
        for rel in paths:
            target = tmp_path / rel
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text("")
        return tmp_path

    return _make


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_texts(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token texts match the expected list."""
    actual = [t.text for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
