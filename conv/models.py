#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Data models for transcript discovery, search and export.

Contains the dataclasses, the tagged union of raw session-log record shapes,
and the constants shared by the scanner, the search engine and the renderer.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union


# =============================================================================
# Constants
# =============================================================================

SNIPPET_MAX_CHARS = 140  # Picker / ranked-result snippets
HIT_TEXT_MAX_CHARS = 300  # One-line CLI search hits
TITLE_MAX_CHARS = 50
ELLIPSIS = "..."

DEFAULT_SEARCH_LIMIT = 1000
DEFAULT_ROLES = ("user", "assistant")
ANY_ROLE = "any"

# Picker role presets, in cycling order
ROLE_PRESETS = ("user+assistant", "any", "user", "assistant", "system")

# Keys scanned on content objects besides text/content
EXTRA_TEXT_KEYS = ("summary", "title", "message", "body")

JSONL_SUFFIX = ".jsonl"


class _Missing:
    """Marker for a key that is absent, as opposed to present and null."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


# =============================================================================
# Raw record shapes
# =============================================================================


@dataclass(frozen=True)
class MessageRecord:
    """A line carrying a ``message`` object (user/assistant turns)."""

    kind: Optional[str]
    role: Optional[str]
    content: Any
    summary: Optional[str] = None
    timestamp: Optional[str] = None


@dataclass(frozen=True)
class SummaryRecord:
    """A compaction summary line: ``{"type": "summary", "summary": ...}``."""

    kind: Optional[str]
    summary: str
    timestamp: Optional[str] = None


@dataclass(frozen=True)
class SystemRecord:
    """A system line with no message payload."""

    kind: str = "system"
    timestamp: Optional[str] = None


@dataclass(frozen=True)
class UnknownRecord:
    """Anything else: snapshots, progress events, non-object JSON values."""

    kind: Optional[str] = None
    timestamp: Optional[str] = None


RawRecord = Union[MessageRecord, SummaryRecord, SystemRecord, UnknownRecord]


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def classify_record(obj: Any) -> RawRecord:
    """Classify one parsed JSON line into a known record shape.

    Args:
        obj: Result of json.loads on a session-log line

    Returns:
        The matching record variant; never raises.
    """
    if not isinstance(obj, dict):
        return UnknownRecord()

    kind = _str_or_none(obj.get("type"))
    timestamp = _str_or_none(obj.get("timestamp"))
    summary = _str_or_none(obj.get("summary"))
    message = obj.get("message")

    if isinstance(message, dict):
        return MessageRecord(
            kind=kind,
            role=_str_or_none(message.get("role")),
            content=message.get("content", MISSING),
            summary=summary,
            timestamp=timestamp,
        )
    if summary is not None:
        return SummaryRecord(kind=kind, summary=summary, timestamp=timestamp)
    if kind == "system":
        return SystemRecord(timestamp=timestamp)
    return UnknownRecord(kind=kind, timestamp=timestamp)


# =============================================================================
# Normalized records
# =============================================================================


@dataclass(frozen=True)
class TranscriptRecord:
    """One normalized session-log line.

    Attributes:
        role: message role, else the top-level type, else None
        text: newline-joined text fragments (possibly empty)
        timestamp: the line's timestamp when it is a string
        line: 1-based line number in the source file
    """

    role: Optional[str]
    text: str
    timestamp: Optional[str] = None
    line: int = 0

    @property
    def role_key(self) -> str:
        """Lower-cased role used for filtering ("" when unknown)."""
        return (self.role or "").lower()

    @property
    def role_label(self) -> str:
        return self.role_key or "unknown"


@dataclass
class Transcript:
    """Ordered records of one session-log file."""

    path: Path
    records: List[TranscriptRecord] = field(default_factory=list)


@dataclass(frozen=True)
class SessionLogFile:
    """A .jsonl file in a mapped directory."""

    path: Path
    mtime: float
    size: int

    @property
    def mtime_iso(self) -> str:
        """Modification time as UTC ISO-8601 with milliseconds and a Z suffix."""
        dt = datetime.fromtimestamp(self.mtime, tz=timezone.utc)
        return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def to_dict(self) -> Dict[str, Any]:
        return {"path": str(self.path), "size": self.size, "mtime": self.mtime_iso}


@dataclass(frozen=True)
class SearchResult:
    """A file ranked by how many of its records match a query."""

    path: Path
    count: int
    snippet: str = ""
    title: Optional[str] = None


@dataclass(frozen=True)
class SearchHit:
    """A single matching record, as emitted by non-interactive search."""

    file: str
    line: int
    role: Optional[str]
    timestamp: Optional[str]
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "role": self.role,
            "timestamp": self.timestamp,
            "text": self.text,
        }


# =============================================================================
# Role filtering
# =============================================================================


@dataclass(frozen=True)
class RoleFilter:
    """Set of accepted roles; ``roles=None`` accepts everything.

    A record whose role is unknown is never excluded.
    """

    roles: Optional[FrozenSet[str]] = None

    @classmethod
    def any(cls) -> "RoleFilter":
        return cls(None)

    @classmethod
    def of(cls, roles: Iterable[str]) -> "RoleFilter":
        normalized = frozenset(r.strip().lower() for r in roles if r.strip())
        if not normalized or ANY_ROLE in normalized:
            return cls(None)
        return cls(normalized)

    @classmethod
    def parse(cls, value: str) -> "RoleFilter":
        """Parse a comma-separated list such as ``user,assistant`` or ``any``."""
        return cls.of(value.split(","))

    @classmethod
    def from_preset(cls, preset: str) -> "RoleFilter":
        return cls.of(preset.split("+"))

    @classmethod
    def default(cls) -> "RoleFilter":
        return cls.of(DEFAULT_ROLES)

    @property
    def is_any(self) -> bool:
        return self.roles is None

    def accepts(self, role: Optional[str]) -> bool:
        if self.roles is None:
            return True
        key = (role or "").lower()
        return not key or key in self.roles

    def label(self) -> str:
        if self.roles is None:
            return ANY_ROLE
        return ",".join(sorted(self.roles))
