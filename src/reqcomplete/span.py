"""Resolve the span of existing text a completion commit replaces."""

from __future__ import annotations

from reqcomplete.lexer import TokenStream
from reqcomplete.tokens import ReplacementSpan


def applicable_span(stream: TokenStream, position: int) -> ReplacementSpan | None:
    """Return the span of the completable token at *position*, or None.

    Tokens of the cursor line that start before *position* plus one character
    are considered, so the token starting at the cursor ("abc.|fob") is
    visible. Tokens are taken whole, never cut at the cursor.
    """
    if not 0 <= position <= len(stream.source):
        return None

    line_start, line_end = stream.line_extent(stream.line_number(position))
    boundary = position
    if boundary < line_end:
        boundary += 1

    tokens = [t for t in stream.classify(line_start, line_end) if t.start < boundary]
    # "|"
    if not tokens:
        return None

    last = tokens[-1]
    # "fob |"
    if position > last.end:
        return None

    if position > last.start:
        if last.can_complete:
            # "fo|o"
            return ReplacementSpan.of(last)
        # "<|="
        return None

    second_last = tokens[-2] if len(tokens) >= 2 else None
    if (
        last.start == position
        and last.can_complete
        and (
            second_last is None  # "|fob"
            or position > second_last.end  # "if |fob"
            or not second_last.can_complete  # "abc.|fob"
        )
    ):
        return ReplacementSpan.of(last)

    # "abc|." ("ab|c." was handled as "ab|c" above)
    if second_last is not None and second_last.end == position and second_last.can_complete:
        return ReplacementSpan.of(second_last)

    return None


def applicable_span_or_empty(stream: TokenStream, position: int) -> ReplacementSpan:
    """Like applicable_span, but fall back to an empty span at the cursor."""
    span = applicable_span(stream, position)
    if span is not None:
        return span
    return ReplacementSpan(stream.clamp(position), 0)
