# SPDX-License-Identifier: MIT
"""Configuration reader for the conversation utilities.

Settings live in the assistant's own settings.json under the
``claudeConv`` key, so users keep a single file of preferences:

    {"claudeConv": {"debugLevel": 2, "exportDir": "notes/conv"}}
"""
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

SETTINGS_NAMESPACE = "claudeConv"


def get_settings_path() -> Path:
    """Get path to settings.json.

    Returns:
        Path to settings.json, respecting CLAUDE_CODE_SETTINGS env var.
    """
    custom = os.environ.get("CLAUDE_CODE_SETTINGS")
    if custom:
        return Path(custom)
    return Path.home() / ".claude" / "settings.json"


def _load_settings_file() -> Any:
    try:
        settings_path = get_settings_path()
    except RuntimeError:
        return None
    if not settings_path.exists():
        return None
    try:
        with open(settings_path) as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError):
        return None


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value by dot-notation key.

    Args:
        key: Dot-notation key like "claudeConv.debugLevel"
        default: Default value if key not found

    Returns:
        Setting value or default
    """
    current = _load_settings_file()
    if current is None:
        return default

    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]

    return current


def get_bool_setting(key: str, default: bool = False) -> bool:
    """Get a boolean setting. Strings "true", "1", "yes" count as True."""
    value = get_setting(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    return bool(value)


def get_int_setting(key: str, default: int = 0) -> int:
    """Get an integer setting, or default if conversion fails."""
    value = get_setting(key, default)
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_float_setting(key: str, default: float = 0.0) -> float:
    """Get a float setting, or default if conversion fails."""
    value = get_setting(key, default)
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass
class ConvSettings:
    """Typed view of the ``claudeConv`` settings block."""

    debug_level: int = 1
    search_limit: int = 1000
    code_line_ratio: float = 0.4
    code_min_lines: int = 3
    export_dir: str = "ai/conv"
    picker_page_size: int = 4
    picker_limit: int = 200


def load_settings() -> ConvSettings:
    """Read all settings once, falling back to defaults for bad values.

    Returns:
        ConvSettings with every field populated.
    """
    defaults = ConvSettings()

    def positive_int(name: str, default: int) -> int:
        value = get_int_setting(f"{SETTINGS_NAMESPACE}.{name}", default)
        return value if value > 0 else default

    ratio = get_float_setting(
        f"{SETTINGS_NAMESPACE}.codeLineRatio", defaults.code_line_ratio
    )
    if not 0 < ratio <= 1:
        ratio = defaults.code_line_ratio

    export_dir = get_setting(f"{SETTINGS_NAMESPACE}.exportDir", defaults.export_dir)
    if not isinstance(export_dir, str) or not export_dir.strip():
        export_dir = defaults.export_dir

    return ConvSettings(
        debug_level=max(
            0, get_int_setting(f"{SETTINGS_NAMESPACE}.debugLevel", defaults.debug_level)
        ),
        search_limit=positive_int("searchLimit", defaults.search_limit),
        code_line_ratio=ratio,
        code_min_lines=positive_int("codeMinLines", defaults.code_min_lines),
        export_dir=export_dir,
        picker_page_size=positive_int("pickerPageSize", defaults.picker_page_size),
        picker_limit=positive_int("pickerLimit", defaults.picker_limit),
    )
