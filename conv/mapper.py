#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Map a working directory to its session-log directory.

The assistant stores each project's transcripts in a directory named after
the project's absolute path with every ``/`` turned into ``-``, sometimes
prefixed with ``~``:

    /Users/alice/dev/proj  ->  <projects_root>/~Users-alice-dev-proj
                               <projects_root>/Users-alice-dev-proj

Lookup walks from the working directory up through its ancestors; when no
ancestor maps, the directory whose name shares the longest suffix with the
dashed working directory is chosen.
"""

import os
import sys
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple

from conv.debug_logger import get_logger
from conv.errors import MappedDirNotFoundError
from conv.paths import PathResolver


def _norm(path: str) -> str:
    out = path.replace("\\", "/")
    if len(out) > 1 and out.endswith("/"):
        out = out[:-1]
    return out


def _trace(debug: bool, message: str) -> None:
    if debug:
        print(message, file=sys.stderr)


def dashed_from_abs(path: str) -> str:
    """Dash an absolute path: strip leading slashes and one trailing slash,
    then replace the remaining slashes with ``-``.

    >>> dashed_from_abs("/Users/alice/proj/")
    'Users-alice-proj'
    """
    cleaned = path.replace("\\", "/").lstrip("/")
    if cleaned.endswith("/"):
        cleaned = cleaned[:-1]
    return cleaned.replace("/", "-")


def mapped_names(path: str) -> List[str]:
    """Directory names that may hold transcripts for ``path``."""
    dashed = dashed_from_abs(path)
    return [f"~{dashed}", dashed]


def common_suffix_length(a: str, b: str) -> int:
    """Number of trailing characters ``a`` and ``b`` share."""
    i = 0
    while i < len(a) and i < len(b) and a[len(a) - 1 - i] == b[len(b) - 1 - i]:
        i += 1
    return i


def candidate_start_paths(
    cwd: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> List[str]:
    """Starting points for the lookup, most specific first.

    The explicit ``cwd``, then ``PWD`` (keeps symlinked paths as the shell
    shows them), then the process working directory, followed by the
    symlink-free form of each. Duplicates are dropped, order is kept.
    """
    env = os.environ if environ is None else environ
    raw: List[str] = []
    if cwd:
        raw.append(cwd)
    if env.get("PWD"):
        raw.append(env["PWD"])
    try:
        raw.append(os.getcwd())
    except OSError:
        pass

    resolved = []
    for p in raw:
        try:
            resolved.append(os.path.realpath(p))
        except (OSError, ValueError):
            resolved.append(p)

    seen = set()
    starts = []
    for p in raw + resolved:
        n = _norm(p)
        if n not in seen:
            seen.add(n)
            starts.append(n)
    return starts


def find_by_ancestors(start: str, root: Path, debug: bool = False) -> Optional[Path]:
    """Walk ``start`` and each ancestor, returning the first mapped directory.

    The projects root itself is never returned.
    """
    logger = get_logger()
    _trace(debug, f"→ Searching from: {start}")
    current = start
    while True:
        for name in mapped_names(current):
            candidate = root / name
            try:
                found = candidate.is_dir() and candidate != root
            except OSError:
                found = False
            logger.mapping_probe(str(candidate), found)
            if found:
                _trace(debug, f"  ✓ Found mapped dir: {candidate}")
                return candidate
            _trace(debug, f"  ✗ Missing: {candidate}")
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def find_by_suffix(start: str, root: Path, debug: bool = False) -> Optional[Path]:
    """Pick the projects-root directory sharing the longest name suffix with
    the dashed ``start``. Ties keep the earliest directory by name.
    """
    try:
        dirs = sorted((d for d in root.iterdir() if d.is_dir()), key=lambda d: d.name)
    except OSError:
        return None

    target = dashed_from_abs(start)
    best: Optional[Tuple[Path, int]] = None
    for d in dirs:
        name = d.name[1:] if d.name.startswith("~") else d.name
        score = common_suffix_length(name, target)
        if score > 0 and (best is None or score > best[1]):
            best = (d, score)

    if best is None:
        return None
    _trace(debug, f"  ~ Fallback chose: {best[0]} (suffix score {best[1]})")
    return best[0]


def find_mapped_dir(
    starts: Iterable[str], root: Path, debug: bool = False
) -> Optional[Path]:
    """Ancestor walk over every start, then the suffix fallback on the first."""
    starts = list(starts)
    logger = get_logger()
    for start in starts:
        found = find_by_ancestors(start, root, debug)
        if found is not None:
            logger.mapping_resolved(start, str(found), "ancestor")
            return found
    if not starts:
        return None
    found = find_by_suffix(starts[0], root, debug)
    if found is not None:
        logger.mapping_resolved(starts[0], str(found), "suffix")
    return found


def resolve_mapped_dir(
    cwd: Optional[str] = None, root: Optional[Path] = None, debug: bool = False
) -> Path:
    """Resolve the session-log directory for the current (or given) directory.

    Args:
        cwd: Explicit starting directory, tried before PWD and os.getcwd()
        root: Projects root; defaults to PathResolver.projects_root()
        debug: Print the lookup trace to stderr

    Returns:
        The mapped directory

    Raises:
        MappedDirNotFoundError: nothing under ``root`` maps to the start paths
    """
    root = PathResolver.projects_root() if root is None else root
    starts = candidate_start_paths(cwd)
    if debug:
        _trace(debug, f"PWD: {os.environ.get('PWD', '(unset)')}")
        try:
            _trace(debug, f"os.getcwd(): {os.getcwd()}")
        except OSError:
            _trace(debug, "os.getcwd(): (unavailable)")
        _trace(debug, "Start candidates:")
        for s in starts:
            _trace(debug, f"  - {s}")

    found = find_mapped_dir(starts, root, debug)
    if found is None:
        get_logger().mapping_failed(starts, str(root))
        raise MappedDirNotFoundError(starts[0] if starts else "(none)", str(root))
    return found
