"""--debug token dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from reqcomplete.lexer import TokenStream
from reqcomplete.scanner import scan_reverse


def dump_tokens(stream: TokenStream, cursor: int, *, limit: int = 8, file: TextIO = sys.stderr) -> None:
    """Print the tokens the trigger detector sees, most recent first."""
    line, character = stream.position_at(cursor)
    file.write(f"Cursor {cursor} (line {line + 1}, column {character + 1})\n")
    for idx, tok in enumerate(scan_reverse(stream, cursor)):
        if idx >= limit:
            file.write("  ...\n")
            break
        tok_line = stream.line_number(tok.start) + 1
        file.write(f"  {tok.type.name:<10} {tok.text!r} [{tok.start}:{tok.end}] line {tok_line}\n")
