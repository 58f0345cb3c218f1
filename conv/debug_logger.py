#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Structured debug logging.

Events are appended as JSON lines to ``<state_dir>/debug.log``. The level
comes from CLAUDE_CONV_DEBUG, else the ``claudeConv.debugLevel`` setting:

    0  nothing is written
    1  command start/end, mapping result, search/export summaries (default)
    2  adds one event per scanned file
    3  adds one event per mapping probe
"""

import json
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from conv.config import SETTINGS_NAMESPACE, get_int_setting
from conv.paths import PathResolver

DEFAULT_LEVEL = 1


def _resolve_level(configured: Optional[int] = None) -> int:
    """CLAUDE_CONV_DEBUG, else ``configured``, else the debugLevel setting."""
    raw = os.environ.get("CLAUDE_CONV_DEBUG")
    if raw is not None and raw.strip():
        try:
            return max(0, int(raw))
        except ValueError:
            return DEFAULT_LEVEL
    if configured is not None:
        return max(0, configured)
    return max(0, get_int_setting(f"{SETTINGS_NAMESPACE}.debugLevel", DEFAULT_LEVEL))


def _project_name() -> str:
    project = os.environ.get("PROJECT_DIR")
    if not project:
        try:
            project = os.getcwd()
        except OSError:
            project = os.environ.get("PWD", "")
    return Path(project).name if project else ""


class DebugLogger:
    """Appends JSON debug events for one process."""

    def __init__(self, log_path: Optional[Path] = None, level: Optional[int] = None):
        self.level = _resolve_level() if level is None else level
        self._log_path = log_path
        self.project = _project_name()
        self.pid = os.getpid()

    @property
    def log_path(self) -> Path:
        if self._log_path is None:
            self._log_path = PathResolver.debug_log()
        return self._log_path

    def _write(self, event: Dict[str, Any]) -> None:
        record = {
            "event": event.pop("event"),
            "level": event.pop("level", "info"),
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "pid": self.pid,
            "project": self.project,
        }
        record.update(event)
        try:
            path = self.log_path
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, default=str) + "\n")
        except (OSError, RuntimeError):
            # Logging must never break a command.
            pass

    # -- level 1 ---------------------------------------------------------

    def command_start(self, command: str) -> float:
        """Log a command start and return its start time for command_end."""
        start = time.perf_counter()
        if self.level >= 1:
            self._write({"event": "command_start", "command": command})
        return start

    def command_end(self, command: str, start_time: float, exit_code: int) -> None:
        if self.level < 1:
            return
        total_ms = (time.perf_counter() - start_time) * 1000
        self._write(
            {
                "event": "command_end",
                "command": command,
                "exit_code": exit_code,
                "total_ms": round(total_ms, 2),
            }
        )

    def mapping_resolved(self, start: str, mapped_dir: str, method: str) -> None:
        if self.level >= 1:
            self._write(
                {
                    "event": "mapping_resolved",
                    "start": start,
                    "mapped_dir": mapped_dir,
                    "method": method,
                }
            )

    def mapping_failed(self, starts: Iterable[str], root: str) -> None:
        if self.level >= 1:
            self._write(
                {
                    "event": "mapping_failed",
                    "level": "warning",
                    "starts": list(starts),
                    "root": root,
                }
            )

    def search_complete(
        self, query: str, roles: str, files: int, hits: int, elapsed_ms: float
    ) -> None:
        if self.level >= 1:
            self._write(
                {
                    "event": "search_complete",
                    "query_length": len(query),
                    "roles": roles,
                    "files": files,
                    "hits": hits,
                    "ms": round(elapsed_ms, 2),
                }
            )

    def export_written(self, destination: str, files: int, markdown: bool, size: int) -> None:
        if self.level >= 1:
            self._write(
                {
                    "event": "export_written",
                    "destination": destination,
                    "files": files,
                    "format": "md" if markdown else "txt",
                    "size": size,
                }
            )

    def clipboard_result(self, tool: Optional[str], ok: bool) -> None:
        if self.level >= 1:
            self._write({"event": "clipboard_result", "tool": tool, "ok": ok})

    def error(self, op: str, err: str) -> None:
        if self.level >= 1:
            self._write({"event": "error", "level": "error", "op": op, "err": err})

    # -- level 2 ---------------------------------------------------------

    def file_scanned(self, path: str, records: int, skipped: int) -> None:
        if self.level >= 2:
            self._write(
                {
                    "event": "file_scanned",
                    "level": "debug",
                    "path": path,
                    "records": records,
                    "skipped": skipped,
                }
            )

    # -- level 3 ---------------------------------------------------------

    def mapping_probe(self, candidate: str, found: bool) -> None:
        if self.level >= 3:
            self._write(
                {
                    "event": "mapping_probe",
                    "level": "trace",
                    "candidate": candidate,
                    "found": found,
                }
            )


_logger: Optional[DebugLogger] = None


def get_logger() -> DebugLogger:
    """Return the process-wide logger, creating it on first use."""
    global _logger
    if _logger is None:
        _logger = DebugLogger()
    return _logger


def reset_logger() -> None:
    """Drop the cached logger so the next get_logger() re-reads settings."""
    global _logger
    _logger = None


def init_logger(configured_level: int) -> DebugLogger:
    """Replace the process-wide logger using the level from loaded settings.

    CLAUDE_CONV_DEBUG still overrides ``configured_level``.
    """
    global _logger
    _logger = DebugLogger(level=_resolve_level(configured_level))
    return _logger
