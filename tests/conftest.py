"""
Pytest configuration and fixtures for conv tests.
"""

import sys
from pathlib import Path

# Ensure project root is in sys.path for 'conv' module imports
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "tui: marks TUI tests")


@pytest.fixture
def temp_state_dir(tmp_path: Path, monkeypatch) -> Path:
    """Create and return a temporary state directory.

    Sets CLAUDE_CONV_STATE and points settings at a file that does not
    exist, then resets the debug logger so it picks up the new paths.
    """
    state_dir = tmp_path / ".local" / "state" / "claude-conv"
    state_dir.mkdir(parents=True)
    monkeypatch.setenv("CLAUDE_CONV_STATE", str(state_dir))
    monkeypatch.setenv("CLAUDE_CODE_SETTINGS", str(tmp_path / "no-settings.json"))
    monkeypatch.delenv("CLAUDE_CONV_DEBUG", raising=False)

    from conv.debug_logger import reset_logger
    reset_logger()

    return state_dir


@pytest.fixture(autouse=True)
def isolate_state_dir(temp_state_dir: Path):
    """Autouse fixture so no test writes the real debug.log or reads real settings."""
    yield temp_state_dir

    from conv.debug_logger import reset_logger
    reset_logger()


@pytest.fixture
def projects_root(tmp_path: Path, monkeypatch) -> Path:
    """An empty projects root, exported through CLAUDE_CONV_PROJECTS."""
    root = tmp_path / "projects"
    root.mkdir()
    monkeypatch.setenv("CLAUDE_CONV_PROJECTS", str(root))
    return root
