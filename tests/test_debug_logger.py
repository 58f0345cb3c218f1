"""Tests for the JSON-lines debug logger."""
import json
from pathlib import Path

import pytest


def read_events(path: Path):
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


class TestLevels:
    """Which events are written at which level."""

    def test_level_one_writes_command_events(self, temp_state_dir):
        from conv.debug_logger import DebugLogger

        logger = DebugLogger(level=1)
        started = logger.command_start("latest")
        logger.command_end("latest", started, 0)

        events = read_events(temp_state_dir / "debug.log")
        assert [e["event"] for e in events] == ["command_start", "command_end"]
        assert events[1]["exit_code"] == 0
        assert events[1]["total_ms"] >= 0
        assert events[0]["level"] == "info"
        assert "pid" in events[0] and "timestamp" in events[0]

    def test_level_zero_writes_nothing(self, temp_state_dir):
        from conv.debug_logger import DebugLogger

        logger = DebugLogger(level=0)
        logger.command_start("search")
        logger.error("search", "boom")

        assert not (temp_state_dir / "debug.log").exists()

    def test_file_scanned_needs_level_two(self, temp_state_dir):
        from conv.debug_logger import DebugLogger

        DebugLogger(level=1).file_scanned("/x.jsonl", 3, 1)
        assert read_events(temp_state_dir / "debug.log") == []

        DebugLogger(level=2).file_scanned("/x.jsonl", 3, 1)
        events = read_events(temp_state_dir / "debug.log")
        assert events[0]["event"] == "file_scanned"
        assert events[0]["skipped"] == 1

    def test_mapping_probe_needs_level_three(self, temp_state_dir):
        from conv.debug_logger import DebugLogger

        DebugLogger(level=2).mapping_probe("/root/~a", False)
        DebugLogger(level=3).mapping_probe("/root/a", True)

        events = read_events(temp_state_dir / "debug.log")
        assert len(events) == 1
        assert events[0]["candidate"] == "/root/a"
        assert events[0]["level"] == "trace"


class TestLevelResolution:
    """CLAUDE_CONV_DEBUG and the debugLevel setting."""

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("CLAUDE_CONV_DEBUG", "3")

        from conv.debug_logger import DebugLogger

        assert DebugLogger().level == 3

    def test_bad_env_var_uses_default(self, monkeypatch):
        monkeypatch.setenv("CLAUDE_CONV_DEBUG", "verbose")

        from conv.debug_logger import DEFAULT_LEVEL, DebugLogger

        assert DebugLogger().level == DEFAULT_LEVEL

    def test_setting(self, monkeypatch, tmp_path):
        settings = tmp_path / "settings.json"
        settings.write_text(json.dumps({"claudeConv": {"debugLevel": 2}}))
        monkeypatch.setenv("CLAUDE_CODE_SETTINGS", str(settings))

        from conv.debug_logger import DebugLogger

        assert DebugLogger().level == 2


class TestEventFields:

    def test_search_complete_logs_query_length_only(self, temp_state_dir):
        """The query text itself is not written to the log."""
        from conv.debug_logger import DebugLogger

        DebugLogger(level=1).search_complete("secret words", "assistant,user", 4, 2, 1.234)

        event = read_events(temp_state_dir / "debug.log")[0]
        assert event["query_length"] == len("secret words")
        assert "secret words" not in json.dumps(event)
        assert event["ms"] == 1.23

    def test_export_written_format(self, temp_state_dir):
        from conv.debug_logger import DebugLogger

        DebugLogger(level=1).export_written("/out.md", 2, True, 100)

        event = read_events(temp_state_dir / "debug.log")[0]
        assert event["format"] == "md"
        assert event["files"] == 2

    def test_project_from_env(self, monkeypatch, temp_state_dir):
        monkeypatch.setenv("PROJECT_DIR", "/work/my-project")

        from conv.debug_logger import DebugLogger

        DebugLogger(level=1).command_start("pick")
        assert read_events(temp_state_dir / "debug.log")[0]["project"] == "my-project"

    def test_unwritable_log_is_ignored(self, tmp_path):
        """Logging to a path that cannot be opened never raises."""
        from conv.debug_logger import DebugLogger

        logger = DebugLogger(log_path=tmp_path, level=1)
        logger.command_start("latest")


class TestSingleton:

    def test_get_logger_is_cached_until_reset(self):
        from conv.debug_logger import get_logger, reset_logger

        first = get_logger()
        assert get_logger() is first
        reset_logger()
        assert get_logger() is not first

    def test_project_with_deleted_working_directory(self, monkeypatch, tmp_path):
        from conv.debug_logger import _project_name

        gone = tmp_path / "gone"
        gone.mkdir()
        monkeypatch.chdir(gone)
        gone.rmdir()
        monkeypatch.delenv("PROJECT_DIR", raising=False)
        monkeypatch.setenv("PWD", "/work/shell-project")

        assert _project_name() == "shell-project"


class TestInitLogger:
    """init_logger applies the level from loaded settings."""

    def test_configured_level(self):
        from conv.debug_logger import get_logger, init_logger

        logger = init_logger(2)
        assert logger.level == 2
        assert get_logger() is logger

    def test_env_var_overrides_configured_level(self, monkeypatch):
        monkeypatch.setenv("CLAUDE_CONV_DEBUG", "3")

        from conv.debug_logger import init_logger

        assert init_logger(0).level == 3

    def test_level_zero_disables_writes(self, temp_state_dir):
        from conv.debug_logger import init_logger

        init_logger(0).command_start("latest")
        assert read_events(temp_state_dir / "debug.log") == []
