"""JavaScript lexer: classifies source text into a flat token stream.

The lexer is deliberately line-tolerant: any construct still open when the
requested range ends (a string, a template, a block comment) is closed at the
range end rather than reported as an error. Completion works on half-typed
code, so classification must never fail.
"""

from __future__ import annotations

from bisect import bisect_right

from reqcomplete.tokens import Token, TokenType, is_ident_char, is_ident_start

KEYWORDS = frozenset(
    {
        "async", "await", "break", "case", "catch", "class", "const", "continue",
        "debugger", "default", "delete", "do", "else", "enum", "export", "extends",
        "false", "finally", "for", "function", "if", "import", "in", "instanceof",
        "let", "new", "null", "return", "static", "super", "switch", "this",
        "throw", "true", "try", "typeof", "var", "void", "while", "with", "yield",
    }
)  # fmt: skip

# Longest operators first so a greedy scan picks the longest match.
OPERATORS = (
    ">>>=", "...", "!==", "===", ">>>", "<<=", ">>=", "&&=", "||=", "??=", "**=",
    "!=", "==", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<=", ">=",
    "&&", "||", "??", "?.", "<<", ">>", "**", "++", "--", "=>", "..",
    "+", "-", "*", "/", "%", "&", "~", "!", "|", "^", "=", "<", ">",
    "(", ")", "{", "}", "[", "]", ";", ":", "?", ".", ",",
)  # fmt: skip

# After one of these a "/" divides; anywhere else it starts a regular expression.
_VALUE_END_OPERATORS = frozenset({")", "]", "}", "++", "--"})
_VALUE_KEYWORDS = frozenset({"this", "super", "true", "false", "null"})
_VALUE_TOKENS = frozenset(
    {TokenType.IDENTIFIER, TokenType.NUMBER, TokenType.STRING, TokenType.TEMPLATE, TokenType.REGEXP}
)


class Lexer:
    """Classify the text of ``source[start:end]`` into Token objects.

    Token offsets are absolute positions in *source*. Whitespace and line
    breaks separate tokens but are never emitted.
    """

    def __init__(self, source: str, start: int = 0, end: int | None = None) -> None:
        self._source = source
        self._pos = max(0, start)
        self._end = len(source) if end is None else min(end, len(source))
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the range and return the token list."""
        while self._pos < self._end:
            self._lex_one()
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < self._end:
            return self._source[idx]
        return ""

    def _emit(self, tt: TokenType, start: int) -> Token:
        tok = Token(tt, self._source[start : self._pos], start, self._pos)
        self._tokens.append(tok)
        return tok

    def _last(self) -> Token | None:
        return self._tokens[-1] if self._tokens else None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _lex_one(self) -> None:
        ch = self._peek()

        if ch.isspace():
            self._pos += 1
            return

        if is_ident_start(ch):
            self._lex_identifier()
            return

        if ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
            self._lex_number()
            return

        if ch in "'\"":
            self._lex_string(ch)
            return

        if ch == "`":
            self._lex_template()
            return

        if ch == "/":
            nxt = self._peek(1)
            if nxt == "/":
                self._lex_line_comment()
                return
            if nxt == "*":
                self._lex_block_comment()
                return
            if self._regexp_allowed():
                self._lex_regexp()
                return

        self._lex_operator()

    # ------------------------------------------------------------------
    # Words and numbers
    # ------------------------------------------------------------------

    def _lex_identifier(self) -> None:
        start = self._pos
        while self._pos < self._end and is_ident_char(self._peek()):
            self._pos += 1
        text = self._source[start : self._pos]
        self._emit(TokenType.KEYWORD if text in KEYWORDS else TokenType.IDENTIFIER, start)

    def _lex_number(self) -> None:
        start = self._pos
        while self._pos < self._end:
            ch = self._peek()
            if ch.isalnum() or ch in "._":
                self._pos += 1
            elif ch in "+-" and self._source[self._pos - 1] in "eE" and not self._is_hex(start):
                self._pos += 1
            else:
                break
        self._emit(TokenType.NUMBER, start)

    def _is_hex(self, start: int) -> bool:
        return self._source[start : start + 2].lower() == "0x"

    # ------------------------------------------------------------------
    # Strings, templates and comments
    # ------------------------------------------------------------------

    def _lex_string(self, quote: str) -> None:
        start = self._pos
        self._pos += 1  # opening quote
        while self._pos < self._end:
            ch = self._peek()
            if ch == "\\":
                self._pos += 2
                continue
            if ch == "\n":
                break
            self._pos += 1
            if ch == quote:
                break
        self._pos = min(self._pos, self._end)
        self._emit(TokenType.STRING, start)

    def _lex_template(self) -> None:
        start = self._pos
        self._pos += 1
        while self._pos < self._end:
            ch = self._peek()
            if ch == "\\":
                self._pos += 2
                continue
            self._pos += 1
            if ch == "`":
                break
        self._pos = min(self._pos, self._end)
        self._emit(TokenType.TEMPLATE, start)

    def _lex_line_comment(self) -> None:
        start = self._pos
        while self._pos < self._end and self._peek() != "\n":
            self._pos += 1
        self._emit(TokenType.COMMENT, start)

    def _lex_block_comment(self) -> None:
        start = self._pos
        close = self._source.find("*/", self._pos + 2, self._end)
        self._pos = self._end if close == -1 else close + 2
        self._emit(TokenType.COMMENT, start)

    # ------------------------------------------------------------------
    # Regular expressions and operators
    # ------------------------------------------------------------------

    def _regexp_allowed(self) -> bool:
        last = self._last()
        if last is None:
            return True
        if last.type in _VALUE_TOKENS:
            return False
        if last.type == TokenType.KEYWORD:
            return last.text not in _VALUE_KEYWORDS
        if last.type == TokenType.OPERATOR:
            return last.text not in _VALUE_END_OPERATORS
        return True

    def _lex_regexp(self) -> None:
        start = self._pos
        self._pos += 1
        in_class = False
        while self._pos < self._end:
            ch = self._peek()
            if ch == "\n":
                break
            if ch == "\\":
                self._pos += 2
                continue
            self._pos += 1
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                while self._pos < self._end and is_ident_char(self._peek()):
                    self._pos += 1
                break
        self._pos = min(self._pos, self._end)
        self._emit(TokenType.REGEXP, start)

    def _lex_operator(self) -> None:
        start = self._pos
        for op in OPERATORS:
            if self._source.startswith(op, start, self._end):
                self._pos += len(op)
                self._emit(TokenType.OPERATOR, start)
                return
        self._pos += 1
        self._emit(TokenType.ERROR, start)


def tokenize(source: str, start: int = 0, end: int | None = None) -> list[Token]:
    """Convenience function: tokenize a range of source text."""
    return Lexer(source, start, end).tokenize()


class TokenStream:
    """An immutable document snapshot that classifies ranges on demand.

    Offsets handed out or accepted by the stream are only meaningful against
    the text it was built from.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        # Offset of the first character of every line
        self._line_starts = [0]
        for idx, ch in enumerate(source):
            if ch == "\n":
                self._line_starts.append(idx + 1)

    @property
    def source(self) -> str:
        return self._source

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self._source)))

    def line_number(self, offset: int) -> int:
        """0-based number of the line containing *offset*."""
        return bisect_right(self._line_starts, self.clamp(offset)) - 1

    def line_extent(self, line: int) -> tuple[int, int]:
        """Start and end offsets of *line*; the end excludes the line break."""
        start = self._line_starts[line]
        if line + 1 < len(self._line_starts):
            end = self._line_starts[line + 1] - 1
            if end > start and self._source[end - 1] == "\r":
                end -= 1
        else:
            end = len(self._source)
        return start, end

    def offset_at(self, line: int, character: int) -> int | None:
        """Absolute offset of a 0-based line and character, or None if absent."""
        if not 0 <= line < len(self._line_starts):
            return None
        start, end = self.line_extent(line)
        if not 0 <= character <= end - start:
            return None
        return start + character

    def position_at(self, offset: int) -> tuple[int, int]:
        """0-based line and character of *offset*."""
        offset = self.clamp(offset)
        line = self.line_number(offset)
        return line, offset - self._line_starts[line]

    def text(self, start: int, end: int) -> str:
        return self._source[self.clamp(start) : self.clamp(end)]

    def classify(self, start: int, end: int) -> list[Token]:
        """Classify exactly ``[start, end)``; a token crossing *end* is cut there."""
        start, end = self.clamp(start), self.clamp(end)
        if start >= end:
            return []
        return Lexer(self._source, start, end).tokenize()
