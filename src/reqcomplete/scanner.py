"""Backward token walk from a cursor position to the start of the document."""

from __future__ import annotations

from collections.abc import Iterator

from reqcomplete.lexer import TokenStream
from reqcomplete.tokens import Token


def scan_reverse(stream: TokenStream, offset: int) -> Iterator[Token]:
    """Yield tokens before *offset*, most recent first, back to the document start.

    The cursor's own line is classified only up to *offset*, so a token the
    cursor sits inside is yielded truncated at the cursor. Earlier lines are
    classified whole. Each line is classified when the walk reaches it.
    """
    offset = stream.clamp(offset)
    line = stream.line_number(offset)
    boundary = offset

    while True:
        line_start = stream.line_extent(line)[0]
        yield from reversed(stream.classify(line_start, boundary))

        if line == 0:
            return

        line -= 1
        boundary = stream.line_extent(line)[1]
