"""Error types with formatted source context."""

from __future__ import annotations

from pathlib import Path


class ConfigError(Exception):
    """Raised when a configuration file holds an unusable value."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(self.format())

    def format(self) -> str:
        if self.path is None:
            return f"error: {self.message}"
        return f"error: {self.message}\n  --> {self.path}"


class PositionError(Exception):
    """Raised when a requested cursor position does not exist in the source."""

    def __init__(self, message: str, line: int, column: int, source: str) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.js") -> str:
        lines = self.source.splitlines()
        line_idx = self.line - 1

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx]
        else:
            source_line = ""

        # Point one past the end of the line when the column overshoots it
        col = max(1, min(self.column, len(source_line) + 1))
        pad = " " * (col - 1)

        line_num = str(self.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.line}:{self.column}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )
