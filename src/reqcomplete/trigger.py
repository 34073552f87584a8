"""Detect whether the cursor sits in a ``require(...)`` argument position.

Detection is a small matcher over classified tokens walked backwards from the
cursor, not a parse: optionally skip a partially typed string, expect ``(``,
expect ``require``, then decide from the single token before ``require``
whether that ``require`` starts an expression.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from reqcomplete.lexer import TokenStream
from reqcomplete.scanner import scan_reverse
from reqcomplete.tokens import QuoteMode, ReplacementSpan, Token, is_ident_char

_logger = logging.getLogger("RequireTrigger")

# Tokens after which an expression (and so a require call) may start.
ALLOW_REQUIRE_TOKENS = frozenset(
    {
        "!", "!=", "!==", "%", "%=", "&", "&&", "&=", "(", ")",
        "*", "*=", "+", "++", "+=", ",", "-", "--", "-=", "..", "...", "/", "/=", ":", ";",
        "<", "<<", "<<=", "<=", "=", "==", "===", ">", ">=", ">>", ">>=", ">>>", ">>>=",
        "?", "[", "^", "^=", "{", "|", "|=", "||", "}", "~",
        "in", "case", "new", "return", "throw", "typeof",
    }
)  # fmt: skip

# Statement-like words of JavaScript and its related dialects. An identifier
# before require only counts as an expression boundary when it is not one of these.
KEYWORDS = frozenset(
    {
        "break", "case", "catch", "class", "const", "continue", "default", "delete", "do",
        "else", "eval", "extends", "false", "field", "final", "finally", "for", "function",
        "if", "import", "in", "instanceof", "new", "null", "package", "private", "protected",
        "public", "return", "super", "switch", "this", "throw", "true", "try", "typeof",
        "var", "while", "with",
        "abstract", "debugger", "enum", "export", "goto", "implements", "native", "static",
        "synchronized", "throws", "transient", "volatile",
    }
)  # fmt: skip

REQUIRE = "require"
OPEN_PAREN = "("


@dataclass(frozen=True, slots=True)
class RequireContext:
    """Where and how a require completion is inserted.

    ``quote`` is the opening quote already in the buffer (NONE when the user has
    only typed ``require(``), and ``span`` is the text a commit replaces.
    """

    quote: QuoteMode
    span: ReplacementSpan


def _is_quoted(token: Token) -> bool:
    return token.text.startswith(("'", '"'))


def _eat_token(tokens: Iterator[Token], text: str) -> bool:
    tok = next(tokens, None)
    return tok is not None and tok.text == text


def _starts_expression(token: Token) -> bool:
    text = token.text
    if text.endswith(";"):
        return True
    if text in ALLOW_REQUIRE_TOKENS:
        return True
    return all(is_ident_char(ch) for ch in text) and text not in KEYWORDS


def should_trigger(
    stream: TokenStream,
    cursor: int,
    eat_open_paren: bool,
    allow_quote: bool = False,
) -> bool:
    """Return True if module-path completions apply at *cursor*.

    *eat_open_paren* requires a ``(`` between the cursor and ``require``;
    *allow_quote* lets a partially typed string argument sit before the cursor.
    """
    cursor = stream.clamp(cursor)
    tokens = scan_reverse(stream, cursor)

    if allow_quote:
        first = next(tokens, None)
        if first is None or not _is_quoted(first):
            # The peeked token takes part in the matching below
            tokens = scan_reverse(stream, cursor)

    if eat_open_paren and not _eat_token(tokens, OPEN_PAREN):
        return False
    if not _eat_token(tokens, REQUIRE):
        return False

    previous = next(tokens, None)
    if previous is None:
        # require at the beginning of the document
        triggered = True
    elif stream.line_number(previous.start) != stream.line_number(cursor):
        triggered = True
    else:
        triggered = _starts_expression(previous)

    _logger.debug(
        "require trigger at %d: %s (previous=%r)",
        cursor,
        triggered,
        previous.text if previous is not None else None,
    )
    return triggered


def should_trigger_eagerly(stream: TokenStream, cursor: int, typed: str) -> bool:
    """Return True if typing *typed* at *cursor* would open a require completion.

    The character has not reached the buffer yet: a ``(`` completes the
    ``require(`` form on its own, a quote needs the ``(`` already present.
    """
    if typed == OPEN_PAREN:
        return should_trigger(stream, cursor, eat_open_paren=False)
    if typed in ("'", '"'):
        return should_trigger(stream, cursor, eat_open_paren=True)
    return False


def require_context(stream: TokenStream, cursor: int) -> RequireContext:
    """Work out the quote already typed and the span a require completion replaces.

    With ``require('ht')`` and the cursor after ``ht`` the span starts just after
    the opening quote and covers ``ht'``, so the inserted ``http'`` leaves one
    quote on each side. With ``require(`` the span is empty at the cursor.
    """
    cursor = stream.clamp(cursor)
    first = next(scan_reverse(stream, cursor), None)
    if first is None or not _is_quoted(first):
        return RequireContext(QuoteMode.NONE, ReplacementSpan(cursor, 0))

    line_end = stream.line_extent(stream.line_number(first.start))[1]
    full = stream.classify(first.start, line_end)
    # The quoted token is never empty, so classification yields at least it
    length = full[0].length - 1 if full else first.length - 1

    start = cursor - (first.length - 1)
    return RequireContext(QuoteMode.from_char(first.text[0]), ReplacementSpan(start, length))
