#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Search and rank session files by case-insensitive substring matches.

Files are read once into a cache of normalized records; ranking is then a
pure function of (cache, query, role filter), cheap enough to recompute on
every keystroke in the picker.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from conv.models import (
    ELLIPSIS,
    HIT_TEXT_MAX_CHARS,
    SNIPPET_MAX_CHARS,
    RoleFilter,
    SearchHit,
    SearchResult,
    TranscriptRecord,
)
from conv.render import derive_title
from conv.transcripts import iter_records


@dataclass
class CachedFile:
    """Records of one session file plus its derived title."""

    path: Path
    records: List[TranscriptRecord] = field(default_factory=list)
    title: Optional[str] = None


def build_cache(files: Iterable[Path]) -> List[CachedFile]:
    """Read every file once, keeping enumeration order."""
    cache = []
    for path in files:
        records = list(iter_records(path))
        cache.append(CachedFile(path=Path(path), records=records, title=derive_title(records)))
    return cache


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, ending with an ellipsis if cut."""
    if len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def make_snippet(text: str, limit: int = SNIPPET_MAX_CHARS) -> str:
    """Collapse whitespace to single spaces and truncate."""
    return truncate(" ".join(text.split()), limit)


def record_matches(record: TranscriptRecord, needle: str, roles: RoleFilter) -> bool:
    """Role accepted and text contains ``needle`` (already lower-cased)."""
    if not roles.accepts(record.role):
        return False
    return bool(record.text) and needle in record.text.lower()


def matching_records(
    records: Iterable[TranscriptRecord], query: str, roles: RoleFilter
) -> List[TranscriptRecord]:
    needle = query.lower()
    return [r for r in records if record_matches(r, needle, roles)]


def count_matches(records: Iterable[TranscriptRecord], query: str, roles: RoleFilter) -> int:
    return len(matching_records(records, query, roles))


def rank_files(
    cache: Sequence[CachedFile], query: str, roles: Optional[RoleFilter] = None
) -> List[SearchResult]:
    """Rank cached files by match count, highest first.

    With an empty query every file holding at least one record is listed
    with a count of 1 and its title as snippet. Files with no match are
    dropped; equal counts keep cache order.

    Args:
        cache: Files from build_cache()
        query: Case-insensitive substring, may be empty
        roles: Role filter; defaults to accepting every role

    Returns:
        List of SearchResult
    """
    roles = roles or RoleFilter.any()
    results = []
    for cached in cache:
        if query:
            matches = matching_records(cached.records, query, roles)
            count = len(matches)
            snippet = make_snippet(matches[0].text) if matches else ""
        else:
            count = 1 if cached.records else 0
            snippet = cached.title or ""
        if count:
            results.append(
                SearchResult(path=cached.path, count=count, snippet=snippet, title=cached.title)
            )
    results.sort(key=lambda r: r.count, reverse=True)
    return results


def search_hits(
    cache: Sequence[CachedFile],
    query: str,
    roles: Optional[RoleFilter] = None,
    limit: Optional[int] = None,
) -> List[SearchHit]:
    """Individual matching records, in ranked-file order then line order.

    Args:
        cache: Files from build_cache()
        query: Non-empty case-insensitive substring
        roles: Role filter; defaults to accepting every role
        limit: Maximum number of hits returned

    Returns:
        List of SearchHit, at most ``limit`` long
    """
    roles = roles or RoleFilter.any()
    by_path: Dict[Path, CachedFile] = {c.path: c for c in cache}
    hits: List[SearchHit] = []
    for result in rank_files(cache, query, roles):
        for record in matching_records(by_path[result.path].records, query, roles):
            hits.append(
                SearchHit(
                    file=str(result.path),
                    line=record.line,
                    role=record.role_key or None,
                    timestamp=record.timestamp,
                    text=record.text,
                )
            )
            if limit is not None and len(hits) >= limit:
                return hits
    return hits


def format_hit_line(hit: SearchHit) -> str:
    """``file.jsonl:12:user [ts]: text`` with text cut to 300 characters."""
    when = f" [{hit.timestamp}]" if hit.timestamp else ""
    who = hit.role or "unknown"
    text = truncate(hit.text, HIT_TEXT_MAX_CHARS)
    return f"{os.path.basename(hit.file)}:{hit.line}:{who}{when}: {text}"


def format_result_line(result: SearchResult) -> str:
    """``  5  /path/to/file.jsonl  snippet`` for ranked file listings."""
    snippet = f"  {result.snippet}" if result.snippet else ""
    return f"{result.count:>5}  {result.path}{snippet}"
