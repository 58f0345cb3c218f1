#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
CLI interface for the conversation utilities.

Usage:
    conv latest [--print|--json|--pick] [--cwd DIR] [--debug]
    conv search QUERY... [--roles LIST] [--json|--files|--paths-only] [--limit N]
    conv export [--file F]... [--stdin] [--stdout] [--concat] [--md] [-o PATH]
    conv pick [QUERY...] [--roles LIST] [--limit N]
    python3 -m conv <command> [args]

Exit codes: 0 ok, 1 no mapped directory, 2 no .jsonl files,
3 no valid input files, 64 usage error, 73 output not writable.
"""

import argparse
import sys
from typing import List, Optional

from conv._version import __version__
from conv.commands import dispatch_command
from conv.config import load_settings
from conv.debug_logger import init_logger
from conv.errors import EXIT_USAGE, ConvError


class UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with the usage-error status (64)."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def positive_int(value: str) -> int:
    """argparse type for --limit: a positive integer (floats are floored)."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be a positive number, got {value!r}")
    if number != number or number in (float("inf"), float("-inf")) or number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive number, got {value!r}")
    return int(number)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--cwd", help="Start from this directory instead of the current shell dir")
    parser.add_argument(
        "--debug", action="store_true", help="Log mapping candidates and decisions to stderr"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = UsageArgumentParser(
        prog="conv",
        description="Conversation utilities for mapped Claude project transcripts",
    )
    parser.add_argument("--version", action="version", version=f"conv {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # latest command
    latest_parser = subparsers.add_parser(
        "latest",
        help="Find the newest .jsonl conversation for the current project",
        epilog=(
            "Mapping uses the shell-visible PWD first (preserves symlinks). "
            '"Latest" is chosen by filesystem mtime, not by filename.'
        ),
    )
    latest_output = latest_parser.add_mutually_exclusive_group()
    latest_output.add_argument(
        "-p", "--print", action="store_true", help="Print the file contents instead of the path"
    )
    latest_output.add_argument(
        "--json", action="store_true", help="Print JSON metadata {path, size, mtime}"
    )
    latest_output.add_argument(
        "--pick", action="store_true", help="Open the action sheet for the newest file"
    )
    _add_common(latest_parser)

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Find messages in mapped JSONL conversations",
        epilog=(
            "Matches are case-insensitive substrings of the extracted text. Roles are "
            "taken from message.role when present, otherwise from the top-level type."
        ),
    )
    search_parser.add_argument("query", nargs="*", help="Search text (multiple words are joined)")
    search_parser.add_argument(
        "-r",
        "--role",
        "--roles",
        dest="roles",
        help="Comma-separated roles (user,assistant,system,any). Default: user,assistant",
    )
    search_output = search_parser.add_mutually_exclusive_group()
    search_output.add_argument(
        "--json", action="store_true", help="Output JSON objects (file,line,role,timestamp,text)"
    )
    search_output.add_argument(
        "--files", action="store_true", help="List matching files ranked by hit count"
    )
    search_output.add_argument(
        "--paths-only",
        "--files-only",
        dest="paths_only",
        action="store_true",
        help="Print only matching file paths (unique), for piping into export --stdin",
    )
    search_parser.add_argument(
        "--limit", type=positive_int, help="Max results to print (default 1000)"
    )
    _add_common(search_parser)

    # export command
    export_parser = subparsers.add_parser(
        "export", help="Export .jsonl to a readable transcript (non-interactive)"
    )
    export_parser.add_argument(
        "-f", "--file", dest="files", action="append", metavar="FILE",
        help="Export this .jsonl (repeatable)",
    )
    export_parser.add_argument(
        "--stdin", action="store_true", help="Read newline-separated .jsonl paths from stdin"
    )
    export_parser.add_argument(
        "-o", "--output", "--out", dest="output", metavar="PATH",
        help="Write transcript to this path; combines when several inputs are given",
    )
    export_parser.add_argument("--stdout", action="store_true", help="Print transcript to stdout")
    export_parser.add_argument(
        "--concat", action="store_true",
        help="Combine multiple inputs into one transcript (default with --stdout)",
    )
    export_parser.add_argument(
        "--roles", help="Filter roles (e.g. user,assistant,system); default: all"
    )
    export_parser.add_argument(
        "--md", "--markdown", dest="markdown", action="store_true",
        help="Write Markdown (default is plain text)",
    )
    _add_common(export_parser)

    # pick command
    pick_parser = subparsers.add_parser(
        "pick", help="Live search UI with selection, then an action sheet"
    )
    pick_parser.add_argument("query", nargs="*", help="Initial query")
    pick_parser.add_argument(
        "-r", "--role", "--roles", dest="roles",
        help="Initial roles filter: user,assistant,system,any (default: user,assistant)",
    )
    pick_parser.add_argument(
        "--limit", type=positive_int, help="Max items in the result list (default 200)"
    )
    _add_common(pick_parser)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    settings = load_settings()
    logger = init_logger(settings.debug_level)
    started = logger.command_start(args.command)
    try:
        exit_code = dispatch_command(args, settings)
    except ConvError as e:
        print(str(e), file=sys.stderr)
        logger.error(args.command, type(e).__name__)
        exit_code = e.exit_code
    logger.command_end(args.command, started, exit_code)
    return exit_code


def run() -> None:
    """Console-script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
