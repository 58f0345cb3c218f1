"""Builders for session-log fixtures shared by the test modules."""
import json
import os
from pathlib import Path
from typing import Iterable, Union


def write_jsonl(path: Path, lines: Iterable[Union[dict, list, str]]) -> Path:
    """Write JSON values as lines; strings are written verbatim."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write((line if isinstance(line, str) else json.dumps(line)) + "\n")
    return path


def set_mtime(path: Path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


def user(text, **extra) -> dict:
    record = {"type": "user", "message": {"role": "user", "content": text}}
    record.update(extra)
    return record


def assistant(text, **extra) -> dict:
    record = {
        "type": "assistant",
        "message": {"role": "assistant", "content": [{"type": "text", "text": text}]},
    }
    record.update(extra)
    return record
