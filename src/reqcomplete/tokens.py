"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Completable
    IDENTIFIER = auto()  # [A-Za-z_$][A-Za-z0-9_$]*
    KEYWORD = auto()  # reserved word

    # Literals
    NUMBER = auto()
    STRING = auto()  # '...' or "..." (possibly unterminated)
    TEMPLATE = auto()  # `...`
    REGEXP = auto()  # /.../flags

    OPERATOR = auto()  # punctuation and operators, longest match
    COMMENT = auto()  # // line or /* block */
    ERROR = auto()  # any character the lexer does not recognise


_COMPLETABLE = frozenset({TokenType.IDENTIFIER, TokenType.KEYWORD})


@dataclass(frozen=True, slots=True)
class Token:
    """A classified span of source text. Offsets are absolute, end exclusive."""

    type: TokenType
    text: str
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def can_complete(self) -> bool:
        """True for identifier-like tokens a completion may replace."""
        return self.type in _COMPLETABLE


class QuoteMode(Enum):
    """Opening quote already present in a require argument, if any."""

    NONE = ""
    SINGLE = "'"
    DOUBLE = '"'

    @property
    def char(self) -> str:
        return self.value

    @classmethod
    def from_char(cls, ch: str) -> QuoteMode:
        if ch == "'":
            return cls.SINGLE
        if ch == '"':
            return cls.DOUBLE
        return cls.NONE


@dataclass(frozen=True, slots=True)
class ReplacementSpan:
    """Text a committed completion overwrites. Zero length means insert."""

    start: int
    length: int

    def __post_init__(self) -> None:
        if self.length < 0:
            raise ValueError(f"negative span length: {self.length}")

    @property
    def end(self) -> int:
        return self.start + self.length

    @classmethod
    def of(cls, token: Token) -> ReplacementSpan:
        return cls(token.start, token.length)


_IDENT_SPECIAL = frozenset("_$")


def is_ident_char(ch: str) -> bool:
    """Return True if ch may appear in a JavaScript identifier (ASCII only)."""
    return ch.isascii() and (ch.isalnum() or ch in _IDENT_SPECIAL)


def is_ident_start(ch: str) -> bool:
    """Return True if ch may start a JavaScript identifier."""
    return ch.isascii() and (ch.isalpha() or ch in _IDENT_SPECIAL)
