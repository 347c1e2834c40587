"""Root conftest — ensures project root is on sys.path for pytest.

Also points every test at a throwaway project directory so hooks never read
or write the real .claude/ files, and resets the cached settings between
tests so environment changes take effect.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Must happen before any local imports so the modules can be collected.
sys.path.insert(0, str(Path(__file__).parent))

from config import get_settings  # noqa: E402

_HOOK_ENV_VARS = (
    "CLAUDE_PROJECT_DIR",
    "TOOL_HOOKS_PROJECT_DIR",
    "TOOL_HOOKS_MEMORY_FILE",
    "TOOL_HOOKS_CODE_FILE",
    "TOOL_HOOKS_CODE_TTL_SECONDS",
    "TOOL_HOOKS_GATED_TOOLS",
    "TOOL_HOOKS_BLOCKED_COMMANDS",
    "TOOL_HOOKS_LOG_LEVEL",
    "TOOL_HOOKS_LOG_FILE",
    "TOOL_HOOKS_LOG_TO_STDERR",
)


@pytest.fixture(autouse=True)
def project_dir(tmp_path, monkeypatch):
    """Empty project root with CLAUDE_PROJECT_DIR pointing at it."""
    for name in _HOOK_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(tmp_path))
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


@pytest.fixture
def memory_note(project_dir):
    """Write the advisory note; returns the file path."""

    def _write(text: str) -> Path:
        path = project_dir / ".claude" / "tool-memory.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def code_file(project_dir):
    return project_dir / ".claude" / "tool-memory.otp"
