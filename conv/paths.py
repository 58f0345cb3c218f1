# SPDX-License-Identifier: MIT
"""Centralized path resolution for the conversation utilities.

All lookups of the session-log root and the state directory go through
this module so the CLI, the picker and the tests agree on locations.
"""
import os
from pathlib import Path

from conv.errors import HomeNotFoundError


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError as e:
        raise HomeNotFoundError(f"Cannot resolve home directory: {e}") from e


class PathResolver:
    """Resolves paths for conversation utility components."""

    @staticmethod
    def projects_root() -> Path:
        """Get the directory holding one session-log directory per project.

        Resolution order:
        1. CLAUDE_CONV_PROJECTS env var
        2. CLAUDE_CONFIG_DIR/projects
        3. ~/.claude/projects
        """
        explicit = os.environ.get("CLAUDE_CONV_PROJECTS")
        if explicit:
            return Path(explicit)
        config_dir = os.environ.get("CLAUDE_CONFIG_DIR")
        if config_dir:
            return Path(config_dir) / "projects"
        return _home() / ".claude" / "projects"

    @staticmethod
    def state_dir() -> Path:
        """Get the state directory for mutable data (debug log).

        Resolution order:
        1. CLAUDE_CONV_STATE env var
        2. XDG_STATE_HOME/claude-conv
        3. ~/.local/state/claude-conv
        """
        state = os.environ.get("CLAUDE_CONV_STATE")
        if state:
            return Path(state)
        xdg_state = os.environ.get("XDG_STATE_HOME")
        if xdg_state:
            return Path(xdg_state) / "claude-conv"
        return _home() / ".local" / "state" / "claude-conv"

    @staticmethod
    def debug_log() -> Path:
        return PathResolver.state_dir() / "debug.log"
