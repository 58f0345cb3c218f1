"""Tests for clipboard copying through platform tools."""
import subprocess

import pytest


class FakeRun:
    """Stand-in for subprocess.run that fails for the named tools."""

    def __init__(self, failing=()):
        self.failing = dict(failing)
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append((command, kwargs))
        error = self.failing.get(command[0])
        if error is not None:
            raise error
        return subprocess.CompletedProcess(command, 0)


class TestClipboardCommands:

    @pytest.mark.parametrize(
        "platform,first",
        [("darwin", "pbcopy"), ("win32", "clip"), ("linux", "xclip")],
    )
    def test_platform_tools(self, platform, first):
        from conv.clipboard import clipboard_commands

        assert clipboard_commands(platform)[0][0] == first

    def test_linux_falls_back_to_wl_copy(self):
        from conv.clipboard import clipboard_commands

        assert clipboard_commands("linux") == [
            ["xclip", "-selection", "clipboard"],
            ["wl-copy"],
        ]


class TestCopyToClipboard:

    def test_text_is_piped_as_utf8(self, monkeypatch):
        fake = FakeRun()
        monkeypatch.setattr(subprocess, "run", fake)

        from conv.clipboard import copy_to_clipboard

        assert copy_to_clipboard("héllo", platform="darwin") is True
        command, kwargs = fake.calls[0]
        assert command == ["pbcopy"]
        assert kwargs["input"] == "héllo".encode("utf-8")
        assert kwargs["check"] is True

    def test_missing_tool_tries_next(self, monkeypatch):
        fake = FakeRun({"xclip": FileNotFoundError("xclip")})
        monkeypatch.setattr(subprocess, "run", fake)

        from conv.clipboard import copy_to_clipboard

        assert copy_to_clipboard("x", platform="linux") is True
        assert [c[0][0] for c in fake.calls] == ["xclip", "wl-copy"]

    def test_all_tools_fail(self, monkeypatch):
        fake = FakeRun(
            {
                "xclip": subprocess.CalledProcessError(1, "xclip"),
                "wl-copy": subprocess.TimeoutExpired("wl-copy", 5),
            }
        )
        monkeypatch.setattr(subprocess, "run", fake)

        from conv.clipboard import copy_to_clipboard

        assert copy_to_clipboard("x", platform="linux") is False
