"""Tests for transcript rendering and output naming."""
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

EXPORTED_AT = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def rec(role, text, timestamp=None, line=0):
    from conv.models import TranscriptRecord

    return TranscriptRecord(role=role, text=text, timestamp=timestamp, line=line)


class TestSeemsCodeBlock:

    def test_fence_counts_as_code(self):
        from conv.render import seems_code_block

        assert seems_code_block("see ```x```")

    def test_code_lines(self):
        from conv.render import seems_code_block

        text = "def f():\n    return 1\nprint(f())\nplain words"
        assert seems_code_block(text)

    def test_prose(self):
        from conv.render import seems_code_block

        assert not seems_code_block("one line\nanother line\nand a third")

    def test_too_few_lines(self):
        from conv.render import seems_code_block

        assert not seems_code_block("const x = 1;\nlet y = 2;")
        assert seems_code_block("const x = 1;\nlet y = 2;", min_lines=2)

    def test_ratio(self):
        from conv.render import seems_code_block

        text = "x = 1;\nprose\nprose\nprose"
        assert not seems_code_block(text)
        assert seems_code_block(text, ratio=0.25)


class TestBuildTranscriptText:

    def test_markdown_headings_and_existing_fence(self):
        """Text that already has fences is not fenced again."""
        from conv.render import build_transcript_text

        records = [
            rec("user", "Show me code", "2025-01-01T00:00:00Z"),
            rec("assistant", "```py\nprint(1)\n```"),
        ]
        text = build_transcript_text(records, "/p/x.jsonl", True, exported_at=EXPORTED_AT)

        assert text.startswith("# Conversation Export\n\n- Source: /p/x.jsonl\n")
        assert "- Exported: 2025-03-01T12:00:00.000Z" in text
        assert "## user (2025-01-01T00:00:00Z)" in text
        assert "## assistant\n" in text
        assert text.count("```") == 2

    def test_markdown_wraps_code(self):
        from conv.render import build_transcript_text

        code = "import os\nx = 1;\nprint(x)"
        text = build_transcript_text([rec("assistant", code)], "s", True, exported_at=EXPORTED_AT)
        assert f"```\n{code}\n```" in text

    def test_plain_text(self):
        from conv.render import build_transcript_text

        records = [rec("user", "hi", "t1"), rec(None, "raw")]
        text = build_transcript_text(records, "s", False, exported_at=EXPORTED_AT)
        assert text == (
            "Conversation Export\nSource: s\nExported: 2025-03-01T12:00:00.000Z\n"
            "\n"
            "user [t1]:\nhi\n"
            "\n"
            "unknown:\nraw\n"
        )

    def test_same_input_same_output(self):
        from conv.render import build_transcript_text

        records = [rec("user", "a"), rec("assistant", "b")]
        first = build_transcript_text(records, "s", True, exported_at=EXPORTED_AT)
        second = build_transcript_text(records, "s", True, exported_at=EXPORTED_AT)
        assert first == second

    def test_naive_exported_at_treated_as_utc(self):
        from conv.render import build_transcript_text

        text = build_transcript_text([], "s", False, exported_at=datetime(2025, 1, 2, 3, 4, 5))
        assert "Exported: 2025-01-02T03:04:05.000Z" in text


class TestCombined:

    def test_single_transcript_has_no_marker(self):
        from conv.models import Transcript
        from conv.render import combined_transcript_text

        text = combined_transcript_text(
            [Transcript(Path("/p/a.jsonl"), [rec("user", "a")])], True, EXPORTED_AT
        )
        assert "### File:" not in text

    def test_markers_between_files(self):
        from conv.models import Transcript
        from conv.render import combined_transcript_text

        transcripts = [
            Transcript(Path("/p/a.jsonl"), [rec("user", "a")]),
            Transcript(Path("/p/b.jsonl"), [rec("user", "b")]),
        ]
        md = combined_transcript_text(transcripts, True, EXPORTED_AT)
        assert md.index("### File: /p/a.jsonl") < md.index("### File: /p/b.jsonl")
        assert md.count("# Conversation Export") == 2

        txt = combined_transcript_text(transcripts, False, EXPORTED_AT)
        assert "==== File: /p/a.jsonl ====" in txt
        assert "==== File: /p/b.jsonl ====" in txt


class TestTitles:

    def test_first_user_line(self):
        from conv.render import derive_title

        records = [rec("assistant", "greeting"), rec("user", "Fix the parser\ndetails")]
        assert derive_title(records) == "Fix the parser"

    def test_falls_back_to_any_text(self):
        from conv.render import derive_title

        assert derive_title([rec("user", "  "), rec("assistant", "Only me")]) == "Only me"
        assert derive_title([rec("user", "")]) is None

    def test_truncated(self):
        from conv.models import TITLE_MAX_CHARS
        from conv.render import derive_title

        title = derive_title([rec("user", "x" * 80)])
        assert title == "x" * TITLE_MAX_CHARS + "..."

    def test_first_line_splits_on_newlines_only(self):
        from conv.render import derive_title

        assert derive_title([rec("user", "Fix\x0cthe\x1eparser\nmore")]) == "Fix\x0cthe\x1eparser"
        assert derive_title([rec("user", "Windows title\r\nbody")]) == "Windows title"
        assert derive_title([rec("user", "a\u2028b")]) == "a\u2028b"

    @pytest.mark.parametrize(
        "title,slug",
        [
            ("Fix the Parser!", "fix-the-parser"),
            ("  spaced   out  ", "spaced-out"),
            ("a -- b", "a-b"),
            ("???", ""),
        ],
    )
    def test_slugify(self, title, slug):
        from conv.render import slugify_title

        assert slugify_title(title) == slug


class TestOutputPaths:

    def test_default_output_path(self, tmp_path):
        from conv.models import Transcript
        from conv.render import default_output_path

        transcript = Transcript(Path("/p/a.jsonl"), [rec("user", "Fix the Parser!")])
        path = default_output_path(transcript, True, tmp_path, today=date(2025, 3, 1))
        assert path == tmp_path / "ai" / "conv" / "2025-03-01-fix-the-parser.md"

    def test_default_output_path_without_title(self, tmp_path):
        from conv.models import Transcript
        from conv.render import default_output_path

        transcript = Transcript(Path("/p/a.jsonl"), [])
        path = default_output_path(transcript, False, tmp_path, "out", today=date(2025, 3, 1))
        assert path == tmp_path / "out" / "conversation-2025-03-01.txt"

    def test_combined_output_path(self, tmp_path):
        from conv.render import combined_output_path

        assert combined_output_path(False, tmp_path, date(2025, 3, 1)) == (
            tmp_path / "conversation-2025-03-01.txt"
        )
