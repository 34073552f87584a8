"""Command-line interface: print completions for a position in a file."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from reqcomplete.catalog import ModuleCatalog
from reqcomplete.completion import CompletionSet, CompletionSource
from reqcomplete.config import Settings, load_settings
from reqcomplete.errors import ConfigError, PositionError
from reqcomplete.lexer import TokenStream
from reqcomplete.project import Project


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    offset: int | None
    line: int | None
    column: int | None
    project_dir: Path
    settings: Settings
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="reqcomplete",
        description="Module-path completions for require() calls",
    )
    p.add_argument("input", help="JavaScript source file")
    where = p.add_mutually_exclusive_group(required=True)
    where.add_argument("--offset", type=int, metavar="N", help="0-based character offset")
    where.add_argument("--line", type=int, metavar="L", help="1-based line (needs --column)")
    p.add_argument("--column", type=int, metavar="C", help="1-based column")
    p.add_argument(
        "--project",
        metavar="DIR",
        help="Project root (default: directory of the input file)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover reqcomplete.toml in the project)",
    )
    p.add_argument("--log-level", metavar="LEVEL", help="Logging level (default: WARNING)")
    p.add_argument("--debug", action="store_true", help="Dump tokens before the cursor to stderr")
    return p


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    if args.line is not None and args.column is None:
        raise argparse.ArgumentTypeError("--line needs --column")

    input_file = Path(args.input)
    project_dir = Path(args.project) if args.project else input_file.parent
    if not project_dir.parts:
        project_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    settings = load_settings(config_path, project_dir, args.log_level)

    return CliOptions(
        input_file=input_file,
        offset=args.offset,
        line=args.line,
        column=args.column,
        project_dir=project_dir,
        settings=settings,
        debug=args.debug,
    )


def resolve_cursor(options: CliOptions, stream: TokenStream) -> int:
    """Turn the requested position into an offset, or raise PositionError."""
    if options.offset is not None:
        if not 0 <= options.offset <= len(stream.source):
            line, character = stream.position_at(options.offset)
            raise PositionError(
                f"offset {options.offset} is outside the file", line + 1, character + 1, stream.source
            )
        return options.offset

    if options.line is None or options.column is None:
        raise PositionError(
            "no position given: use --offset, or --line with --column", 1, 1, stream.source
        )
    offset = stream.offset_at(options.line - 1, options.column - 1)
    if offset is None:
        raise PositionError(
            f"no position at line {options.line}, column {options.column}",
            options.line,
            options.column,
            stream.source,
        )
    return offset


def complete_file(options: CliOptions) -> CompletionSet:
    """Read the input file and compute completions at the requested position."""
    from reqcomplete.debug import dump_tokens

    source = options.input_file.read_text(encoding="utf-8")
    stream = TokenStream(source)
    cursor = resolve_cursor(options, stream)

    if options.debug:
        dump_tokens(stream, cursor, file=sys.stderr)

    source_completions = CompletionSource(ModuleCatalog(options.settings))
    project = Project(options.project_dir)
    return source_completions.complete(stream, cursor, project, options.input_file)


def write_completions(result: CompletionSet, out: TextIO) -> None:
    kind = "require" if result.is_require else "general"
    out.write(f"# {kind} start={result.span.start} length={result.span.length}\n")
    for item in result.items:
        out.write(f"{item.insertion_text}\t{item.description}\n")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    logging.basicConfig(
        level=options.settings.log_level_number,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    try:
        result = complete_file(options)
    except PositionError as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: cannot read {options.input_file}: {exc.strerror}", file=sys.stderr)
        return 1

    write_completions(result, sys.stdout)
    return 0
