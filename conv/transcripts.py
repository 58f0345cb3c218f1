#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Transcript reader for session-log JSONL files.

Lists the .jsonl files of a mapped directory and turns each line into a
normalized TranscriptRecord. Record shapes vary by type and evolve over
time, so extraction is best-effort: lines that fail to parse are skipped,
unknown shapes yield empty text, and nothing here raises on bad content.
"""

import json
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple, Union

from conv.debug_logger import get_logger
from conv.models import (
    EXTRA_TEXT_KEYS,
    JSONL_SUFFIX,
    MISSING,
    MessageRecord,
    RawRecord,
    RoleFilter,
    SessionLogFile,
    SummaryRecord,
    Transcript,
    TranscriptRecord,
    classify_record,
)

PathLike = Union[str, Path]


# =============================================================================
# Directory listing
# =============================================================================


def list_jsonl_files(directory: PathLike) -> List[Path]:
    """Regular ``*.jsonl`` files directly inside ``directory``, sorted by name."""
    directory = Path(directory)
    files = []
    try:
        entries = list(directory.iterdir())
    except OSError:
        return []
    for entry in entries:
        if not entry.name.endswith(JSONL_SUFFIX):
            continue
        try:
            if entry.is_file():
                files.append(entry)
        except OSError:
            continue
    return sorted(files, key=lambda p: p.name)


def list_session_files(directory: PathLike) -> List[SessionLogFile]:
    """Session files with their stat data, most recently modified first."""
    sessions = []
    for path in list_jsonl_files(directory):
        try:
            st = path.stat()
        except OSError:
            continue
        sessions.append(SessionLogFile(path=path, mtime=st.st_mtime, size=st.st_size))
    sessions.sort(key=lambda s: s.mtime, reverse=True)
    return sessions


def find_latest_jsonl(directory: PathLike) -> Optional[SessionLogFile]:
    """The most recently modified session file, or None."""
    sessions = list_session_files(directory)
    return sessions[0] if sessions else None


# =============================================================================
# Text extraction
# =============================================================================


def _collect(value: Any, parts: List[str]) -> None:
    if value is None:
        return
    if isinstance(value, str):
        parts.append(value)
    elif isinstance(value, list):
        for item in value:
            _collect(item, parts)
    elif isinstance(value, dict):
        text = value.get("text")
        if isinstance(text, str):
            parts.append(text)
        content = value.get("content")
        if isinstance(content, str):
            parts.append(content)
        elif isinstance(content, list):
            _collect(content, parts)
        for key in EXTRA_TEXT_KEYS:
            extra = value.get(key)
            if isinstance(extra, str):
                parts.append(extra)


def record_role(record: RawRecord) -> Optional[str]:
    """Message role when present, else the record's type."""
    if isinstance(record, MessageRecord) and record.role is not None:
        return record.role
    return record.kind


def record_text(record: RawRecord) -> str:
    """Join every text fragment of a record with newlines."""
    parts: List[str] = []
    if isinstance(record, MessageRecord):
        if record.content is not MISSING:
            _collect(record.content, parts)
        if record.summary is not None:
            parts.append(record.summary)
    elif isinstance(record, SummaryRecord):
        parts.append(record.summary)
    return "\n".join(parts)


def extract_role_and_text(obj: Any) -> Tuple[Optional[str], str, Optional[str]]:
    """Extract ``(role, text, timestamp)`` from one parsed JSON line.

    Args:
        obj: Parsed JSON value of any shape

    Returns:
        Tuple of role (or None), text (possibly empty) and timestamp (or None)
    """
    record = classify_record(obj)
    return record_role(record), record_text(record), record.timestamp


def parse_line(line: str, line_no: int = 0) -> Optional[TranscriptRecord]:
    """Parse one JSONL line into a record; None for blank or invalid lines."""
    stripped = line.strip()
    if not stripped:
        return None
    try:
        obj = json.loads(stripped)
    except ValueError:
        return None
    role, text, timestamp = extract_role_and_text(obj)
    return TranscriptRecord(role=role, text=text, timestamp=timestamp, line=line_no)


# =============================================================================
# File reading
# =============================================================================


def iter_records(path: PathLike) -> Iterator[TranscriptRecord]:
    """Yield the records of a session file in line order.

    Each call re-reads the file. An unreadable file yields nothing.
    """
    path = Path(path)
    records = skipped = 0
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            for line_no, line in enumerate(f, start=1):
                record = parse_line(line, line_no)
                if record is None:
                    if line.strip():
                        skipped += 1
                    continue
                records += 1
                yield record
    except OSError as e:
        get_logger().error("read_transcript", f"{path}: {e}")
        return
    get_logger().file_scanned(str(path), records, skipped)


def read_transcript(path: PathLike, roles: Optional[RoleFilter] = None) -> Transcript:
    """Read a whole session file, keeping records the role filter accepts."""
    roles = roles or RoleFilter.any()
    records = [r for r in iter_records(path) if roles.accepts(r.role)]
    return Transcript(path=Path(path), records=records)
