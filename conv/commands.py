#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Command pattern implementation for the CLI.

Each subcommand is a class implementing ``execute(args, settings) -> int``.
Commands are registered in COMMAND_REGISTRY and dispatched via
dispatch_command(). Failures that end a command are raised as ConvError
subclasses and turned into exit codes by cli.main().
"""

import json
import sys
import time
from abc import ABC, abstractmethod
from argparse import Namespace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Type

from conv.clipboard import copy_to_clipboard
from conv.config import ConvSettings
from conv.debug_logger import get_logger
from conv.errors import EXIT_OK, NoLogFilesError, UsageError
from conv.export import (
    collect_input_files,
    load_transcripts,
    render_combined,
    validate_inputs,
    write_output,
)
from conv.mapper import resolve_mapped_dir
from conv.models import ROLE_PRESETS, RoleFilter
from conv.render import combined_output_path, default_output_path
from conv.search import (
    build_cache,
    format_hit_line,
    format_result_line,
    rank_files,
    search_hits,
)
from conv.transcripts import find_latest_jsonl, list_jsonl_files


class Command(ABC):
    """Abstract base class for all CLI commands.

    Commands receive the parsed args and the loaded settings explicitly;
    nothing reads process arguments behind their back.
    """

    @abstractmethod
    def execute(self, args: Namespace, settings: ConvSettings) -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments
            settings: Loaded ConvSettings

        Returns:
            Exit code (0 for success, non-zero for errors)
        """
        pass


def _roles_arg(args: Namespace, default: RoleFilter) -> RoleFilter:
    value = getattr(args, "roles", None)
    return RoleFilter.parse(value) if value is not None else default


def _query_arg(args: Namespace) -> str:
    return " ".join(getattr(args, "query", None) or [])


# =============================================================================
# latest
# =============================================================================


class LatestCommand(Command):
    """Print the newest session file of the mapped directory."""

    def execute(self, args: Namespace, settings: ConvSettings) -> int:
        mapped_dir = resolve_mapped_dir(args.cwd, debug=args.debug)
        latest = find_latest_jsonl(mapped_dir)
        if latest is None:
            raise NoLogFilesError(str(mapped_dir))

        if getattr(args, "pick", False):
            from conv.tui.app_state import MODE_LATEST, PickerState

            state = PickerState(
                mode=MODE_LATEST,
                latest_file=latest.path,
                page_size=settings.picker_page_size,
            )
            return run_picker(state, settings)

        if args.json:
            print(json.dumps(latest.to_dict(), separators=(",", ":")))
        elif args.print:
            sys.stdout.write(latest.path.read_text(encoding="utf-8", errors="replace"))
        else:
            print(latest.path)
        return EXIT_OK


# =============================================================================
# search
# =============================================================================


class SearchCommand(Command):
    """Non-interactive search across the mapped directory's session files."""

    def execute(self, args: Namespace, settings: ConvSettings) -> int:
        query = _query_arg(args)
        if not query:
            raise UsageError("Error: search requires a query")
        roles = _roles_arg(args, RoleFilter.default())
        limit = args.limit or settings.search_limit

        mapped_dir = resolve_mapped_dir(args.cwd, debug=args.debug)
        files = list_jsonl_files(mapped_dir)
        if not files:
            raise NoLogFilesError(str(mapped_dir))

        started = time.perf_counter()
        cache = build_cache(files)

        if args.files or args.paths_only:
            results = rank_files(cache, query, roles)[:limit]
            for result in results:
                print(result.path if args.paths_only else format_result_line(result))
            found = len(results)
        else:
            hits = search_hits(cache, query, roles, limit)
            if args.json:
                print(json.dumps([hit.to_dict() for hit in hits], indent=2))
            else:
                for hit in hits:
                    print(format_hit_line(hit))
            found = len(hits)

        elapsed_ms = (time.perf_counter() - started) * 1000
        get_logger().search_complete(query, roles.label(), len(files), found, elapsed_ms)
        return EXIT_OK


# =============================================================================
# export
# =============================================================================


class ExportCommand(Command):
    """Render one or more session files to text or Markdown."""

    def execute(self, args: Namespace, settings: ConvSettings) -> int:
        stdin_text = sys.stdin.read() if args.stdin else None
        inputs = collect_input_files(args.files or [], stdin_text)

        if not inputs:
            mapped_dir = resolve_mapped_dir(args.cwd, debug=args.debug)
            latest = find_latest_jsonl(mapped_dir)
            if latest is None:
                raise NoLogFilesError(str(mapped_dir))
            inputs = [latest.path]

        inputs = validate_inputs(inputs)
        roles = _roles_arg(args, RoleFilter.any())
        transcripts = load_transcripts(inputs, roles)
        exported_at = datetime.now(timezone.utc)
        markdown = args.markdown
        cwd = Path.cwd()

        combine = args.concat or args.stdout or (args.output is not None and len(transcripts) > 1)
        if combine:
            text = render_combined(transcripts, markdown, settings, exported_at)
            if args.stdout:
                sys.stdout.write(text)
                get_logger().export_written("<stdout>", len(transcripts), markdown, len(text))
                return EXIT_OK
            out_path = Path(args.output) if args.output else combined_output_path(markdown, cwd)
            print(write_output(out_path, text, len(transcripts), markdown))
            return EXIT_OK

        for transcript in transcripts:
            text = render_combined([transcript], markdown, settings, exported_at)
            if args.output:
                out_path = Path(args.output)
            else:
                out_path = default_output_path(transcript, markdown, cwd, settings.export_dir)
            print(write_output(out_path, text, 1, markdown))
        return EXIT_OK


# =============================================================================
# pick (interactive)
# =============================================================================


def preset_index_for(roles: RoleFilter) -> int:
    """Index of the picker preset equal to ``roles`` (default preset if none)."""
    for index, preset in enumerate(ROLE_PRESETS):
        if RoleFilter.from_preset(preset) == roles:
            return index
    return 0


def run_picker(state, settings: ConvSettings) -> int:
    """Run the Textual picker and carry out the action it returns."""
    from conv.tui.app import PickerApp
    from conv.tui.app_state import CANCEL

    outcome = PickerApp(state).run()
    if outcome is None or outcome.action == CANCEL or not outcome.files:
        return EXIT_OK

    transcripts = load_transcripts(outcome.files, outcome.roles)
    text = render_combined(transcripts, outcome.markdown, settings)

    if outcome.action.startswith("stdout-"):
        sys.stdout.write(text + "\n")
    elif outcome.action.startswith("clipboard-"):
        if not copy_to_clipboard(text):
            print("(notice) Clipboard copy failed: no clipboard tool succeeded", file=sys.stderr)
    elif outcome.action.startswith("file-"):
        out_path = combined_output_path(outcome.markdown, Path.cwd())
        print(write_output(out_path, text, len(transcripts), outcome.markdown))
    return EXIT_OK


class PickCommand(Command):
    """Interactive search picker followed by an action sheet."""

    def execute(self, args: Namespace, settings: ConvSettings) -> int:
        from conv.tui.app_state import PickerState

        mapped_dir = resolve_mapped_dir(args.cwd, debug=args.debug)
        files = list_jsonl_files(mapped_dir)
        if not files:
            raise NoLogFilesError(str(mapped_dir))

        roles = _roles_arg(args, RoleFilter.default())
        state = PickerState(
            cache=build_cache(files),
            query=_query_arg(args),
            preset_index=preset_index_for(roles),
            page_size=settings.picker_page_size,
            limit=args.limit or settings.picker_limit,
        )
        return run_picker(state, settings)


# =============================================================================
# Registry
# =============================================================================


COMMAND_REGISTRY: Dict[str, Type[Command]] = {
    "latest": LatestCommand,
    "search": SearchCommand,
    "export": ExportCommand,
    "pick": PickCommand,
}


def dispatch_command(args: Namespace, settings: ConvSettings) -> int:
    """Dispatch to appropriate command handler.

    Args:
        args: Parsed arguments with 'command' attribute
        settings: Loaded ConvSettings

    Returns:
        Exit code (0 for success, 1 for unknown command)
    """
    command_name = args.command
    if command_name not in COMMAND_REGISTRY:
        print(f"Unknown command: {command_name}", file=sys.stderr)
        return 1

    command_class = COMMAND_REGISTRY[command_name]
    command = command_class()
    return command.execute(args, settings)
