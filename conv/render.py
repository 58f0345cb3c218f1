#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Render transcripts as plain text or Markdown.

Markdown output fences message text that looks like code, unless the text
already carries its own ``` fences.
"""

import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from conv.models import ELLIPSIS, TITLE_MAX_CHARS, Transcript, TranscriptRecord

FENCE = "```"
DEFAULT_CODE_LINE_RATIO = 0.4
DEFAULT_CODE_MIN_LINES = 3

CODE_LINE_START = re.compile(
    r"^(\s*([#>]|//|/\*|\*|\{|\}|const\b|let\b|var\b|function\b|class\b|if\b|for\b"
    r"|while\b|return\b|import\b|export\b|def\b|print\b))"
)
CODE_INLINE = re.compile(r"(;|\{|\}|=>|\(\)|\)\s*\{|\bconsole\.log\b)")


def seems_code_block(
    text: str,
    ratio: float = DEFAULT_CODE_LINE_RATIO,
    min_lines: int = DEFAULT_CODE_MIN_LINES,
) -> bool:
    """Guess whether ``text`` is code.

    True when it contains a fence, or when it has at least ``min_lines``
    non-blank lines and at least ``ratio`` of them look like code.
    """
    if FENCE in text:
        return True
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < min_lines:
        return False
    codey = sum(
        1 for line in lines if CODE_LINE_START.search(line) or CODE_INLINE.search(line)
    )
    return codey / len(lines) >= ratio


def _exported_stamp(exported_at: Optional[datetime]) -> str:
    dt = exported_at or datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_transcript_text(
    records: Sequence[TranscriptRecord],
    source: str,
    markdown: bool,
    exported_at: Optional[datetime] = None,
    code_ratio: float = DEFAULT_CODE_LINE_RATIO,
    code_min_lines: int = DEFAULT_CODE_MIN_LINES,
) -> str:
    """Render one transcript.

    Args:
        records: Records in file order
        source: Source identifier shown in the header (usually the file path)
        markdown: Markdown when True, plain text otherwise
        exported_at: Generation time for the header; defaults to now
        code_ratio: Share of code-like lines that triggers fencing
        code_min_lines: Minimum non-blank lines before fencing is considered

    Returns:
        The rendered document
    """
    stamp = _exported_stamp(exported_at)
    lines: List[str] = []
    if markdown:
        lines += ["# Conversation Export", "", f"- Source: {source}", f"- Exported: {stamp}", ""]
        for record in records:
            when = f" ({record.timestamp})" if record.timestamp else ""
            lines.append(f"## {record.role_label}{when}")
            lines.append("")
            text = record.text or ""
            if FENCE not in text and seems_code_block(text, code_ratio, code_min_lines):
                lines += [FENCE, text, FENCE]
            else:
                lines.append(text)
            lines.append("")
    else:
        lines.append(f"Conversation Export\nSource: {source}\nExported: {stamp}")
        lines.append("")
        for record in records:
            when = f" [{record.timestamp}]" if record.timestamp else ""
            lines.append(f"{record.role_label}{when}:")
            lines.append(record.text or "")
            lines.append("")
    return "\n".join(lines)


def file_marker(path: str, markdown: bool) -> str:
    if markdown:
        return f"\n---\n### File: {path}\n"
    return f"\n==== File: {path} ====\n"


def combined_transcript_text(
    transcripts: Sequence[Transcript],
    markdown: bool,
    exported_at: Optional[datetime] = None,
    code_ratio: float = DEFAULT_CODE_LINE_RATIO,
    code_min_lines: int = DEFAULT_CODE_MIN_LINES,
) -> str:
    """Render several transcripts as one document.

    Each transcript is preceded by a file marker when there is more than one.
    """
    exported_at = exported_at or datetime.now(timezone.utc)
    parts = []
    for transcript in transcripts:
        if len(transcripts) > 1:
            parts.append(file_marker(str(transcript.path), markdown))
        parts.append(
            build_transcript_text(
                transcript.records,
                str(transcript.path),
                markdown,
                exported_at=exported_at,
                code_ratio=code_ratio,
                code_min_lines=code_min_lines,
            )
        )
    return "\n".join(parts)


def derive_title(records: Iterable[TranscriptRecord]) -> Optional[str]:
    """First line of the first user message, else of the first non-empty one.

    Truncated to TITLE_MAX_CHARS characters plus an ellipsis.
    """
    records = list(records)
    candidate = next(
        (r.text for r in records if r.role_key == "user" and r.text.strip()), None
    )
    if candidate is None:
        candidate = next((r.text for r in records if r.text.strip()), None)
    if candidate is None:
        return None
    first = re.split(r"\r?\n", candidate)[0].strip()
    if len(first) > TITLE_MAX_CHARS:
        first = first[:TITLE_MAX_CHARS] + ELLIPSIS
    return first


def slugify_title(title: str) -> str:
    """Lower-case ASCII slug: ``"Fix the Parser!"`` -> ``"fix-the-parser"``."""
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def default_output_path(
    transcript: Transcript,
    markdown: bool,
    base_dir: Path,
    export_dir: str = "ai/conv",
    today: Optional[date] = None,
) -> Path:
    """Auto-named output file: ``<export_dir>/<date>-<slug>.<ext>``.

    Falls back to ``conversation-<date>`` when no title can be derived.
    """
    today = today or date.today()
    title = derive_title(transcript.records)
    slug = slugify_title(title) if title else ""
    stem = f"{today.isoformat()}-{slug}" if slug else f"conversation-{today.isoformat()}"
    return base_dir / export_dir / f"{stem}.{'md' if markdown else 'txt'}"


def combined_output_path(markdown: bool, base_dir: Path, today: Optional[date] = None) -> Path:
    """Default path for a combined export: ``conversation-<date>.<ext>``."""
    today = today or date.today()
    return base_dir / f"conversation-{today.isoformat()}.{'md' if markdown else 'txt'}"
