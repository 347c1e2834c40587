"""
Hook configuration loaded from environment variables.

Every hook process builds its settings once at startup. Values come from the
environment (prefix TOOL_HOOKS_) or from a .env file in the project
directory. The host already exports CLAUDE_PROJECT_DIR for hook commands, so
no configuration is needed in the common case.

Environment variables (all optional):
  TOOL_HOOKS_PROJECT_DIR       — project root (falls back to CLAUDE_PROJECT_DIR, then cwd)
  TOOL_HOOKS_MEMORY_FILE       — advisory note, relative to the project root
  TOOL_HOOKS_CODE_FILE         — acknowledgment code file, relative to the project root
  TOOL_HOOKS_CODE_TTL_SECONDS  — expire unused codes after this many seconds (unset = never)
  TOOL_HOOKS_GATED_TOOLS       — JSON list of tool names the memory gate challenges
  TOOL_HOOKS_BLOCKED_COMMANDS  — JSON list of extra literal strings the command guard blocks
  TOOL_HOOKS_LOG_LEVEL         — DEBUG / INFO / WARNING / ERROR / CRITICAL
  TOOL_HOOKS_LOG_FILE          — log file, relative to the project root
  TOOL_HOOKS_LOG_TO_STDERR     — also log to stderr (stderr is shown to the agent!)
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Hook settings. Loaded once per process; never mutated at runtime."""

    model_config = SettingsConfigDict(
        env_prefix="TOOL_HOOKS_",
        extra="ignore",  # Silently ignore unrecognised env vars
        case_sensitive=False,
        populate_by_name=True,  # Allow Settings(project_dir=...) in tests
    )

    # -------------------------------------------------------------------------
    # Locations
    # -------------------------------------------------------------------------
    project_dir: Path = Field(
        default_factory=Path.cwd,
        validation_alias=AliasChoices("TOOL_HOOKS_PROJECT_DIR", "CLAUDE_PROJECT_DIR"),
        description="Project root; relative paths below resolve against it",
    )
    memory_file: Path = Field(
        default=Path(".claude/tool-memory.md"),
        description="Operator-maintained advisory note",
    )
    code_file: Path = Field(
        default=Path(".claude/tool-memory.otp"),
        description="Hook-owned file holding the outstanding acknowledgment code",
    )

    # -------------------------------------------------------------------------
    # Memory gate
    # -------------------------------------------------------------------------
    code_ttl_seconds: int | None = Field(default=None, ge=1)
    gated_tools: list[str] = Field(default_factory=lambda: ["Bash"])

    # -------------------------------------------------------------------------
    # Command guard
    # -------------------------------------------------------------------------
    blocked_commands: list[str] = Field(default_factory=list)

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = Field(default="INFO")
    log_file: str | None = Field(default=".claude/logs/tool-hooks.log")
    log_to_stderr: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return upper

    @field_validator("blocked_commands")
    @classmethod
    def _drop_blank_commands(cls, v: list[str]) -> list[str]:
        return [c.strip() for c in v if c.strip()]

    # -------------------------------------------------------------------------
    # Resolved paths
    # -------------------------------------------------------------------------

    def resolve(self, path: Path | str) -> Path:
        """Return ``path`` anchored at the project root unless already absolute."""
        p = Path(path).expanduser()
        return p if p.is_absolute() else self.project_dir / p

    @property
    def memory_path(self) -> Path:
        return self.resolve(self.memory_file)

    @property
    def code_path(self) -> Path:
        return self.resolve(self.code_file)

    @property
    def log_path(self) -> Path | None:
        return self.resolve(self.log_file) if self.log_file else None


def _project_env_file() -> Path:
    root = os.environ.get("TOOL_HOOKS_PROJECT_DIR") or os.environ.get("CLAUDE_PROJECT_DIR")
    return Path(root or Path.cwd()) / ".env"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the singleton Settings instance.

    Loads the project's .env first (real environment variables win). Raises
    ValidationError if a value is invalid; the hook runtime treats that as an
    internal fault and fails open.
    """
    load_dotenv(_project_env_file(), override=False)
    return Settings()
