#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Export session files as readable transcripts.

Shared by the ``export`` command and the picker's write/print/copy actions.
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TextIO

from conv.config import ConvSettings
from conv.debug_logger import get_logger
from conv.errors import NoValidInputError, OutputWriteError
from conv.models import JSONL_SUFFIX, RoleFilter, Transcript
from conv.render import combined_transcript_text
from conv.transcripts import read_transcript


def normalize_input(path: str) -> Path:
    """Absolute, symlink-free form of ``path`` (unchanged if resolution fails)."""
    try:
        return Path(os.path.realpath(os.path.expanduser(path)))
    except (OSError, ValueError):
        return Path(path)


def collect_input_files(
    file_args: Iterable[str], stdin_text: Optional[str] = None
) -> List[Path]:
    """Paths from stdin (one per line) followed by ``--file`` values.

    Blank lines are ignored; duplicates are dropped after normalization.
    """
    raw: List[str] = []
    if stdin_text:
        raw.extend(line.strip() for line in stdin_text.splitlines() if line.strip())
    raw.extend(file_args)

    seen = set()
    paths = []
    for item in raw:
        path = normalize_input(item)
        if path not in seen:
            seen.add(path)
            paths.append(path)
    return paths


def validate_inputs(paths: Sequence[Path], err: Optional[TextIO] = None) -> List[Path]:
    """Keep existing ``.jsonl`` files, reporting the others on stderr.

    Raises:
        NoValidInputError: no path survived validation
    """
    err = err or sys.stderr
    valid = []
    for path in paths:
        if path.name.endswith(JSONL_SUFFIX) and path.is_file():
            valid.append(path)
        else:
            print(f"Skipping invalid/nonexistent file: {path}", file=err)
    if not valid:
        raise NoValidInputError()
    return valid


def load_transcripts(paths: Iterable[Path], roles: Optional[RoleFilter] = None) -> List[Transcript]:
    return [read_transcript(path, roles) for path in paths]


def render_combined(
    transcripts: Sequence[Transcript],
    markdown: bool,
    settings: ConvSettings,
    exported_at: Optional[datetime] = None,
) -> str:
    return combined_transcript_text(
        transcripts,
        markdown,
        exported_at=exported_at or datetime.now(timezone.utc),
        code_ratio=settings.code_line_ratio,
        code_min_lines=settings.code_min_lines,
    )


def write_output(path: Path, text: str, files: int, markdown: bool) -> Path:
    """Write ``text`` to ``path``, creating parent directories.

    Raises:
        OutputWriteError: the directory or file could not be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(str(path), e.strerror or str(e)) from e
    get_logger().export_written(str(path), files, markdown, len(text))
    return path
