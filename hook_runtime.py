"""
Shared runtime for every hook script.

Contains:
  - HookInput: the validated Invocation Record the host pipes to stdin
  - Decision / HookResult: what a hook body returns
  - run_hook: the single entry point that reads stdin, runs a hook body,
    writes the explanation to stderr and exits with the decision's code

Exit codes (the host reads nothing else):
  0 = allow the tool action (or acknowledge a post-action report)
  2 = block the tool action; stderr is shown to the agent as the reason

Fail-open policy: any internal fault (empty or malformed stdin, invalid
settings, unreadable files, a bug in a hook body) is logged and converted to
exit 0. Hooks are auxiliary tooling and must never wedge the primary action
pipeline. Intentional denials are HookResult(BLOCK), never exceptions.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, TextIO

import structlog
from pydantic import BaseModel, ConfigDict, Field

from config import Settings, get_settings
from logging_config import configure_logging

log = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class HookInput(BaseModel):
    """
    Invocation Record for one tool call.

    Only tool_name and tool_input matter here. The host also sends
    session_id, cwd, hook_event_name, tool_response, etc.; those are kept
    as extras and otherwise ignored.
    """

    model_config = ConfigDict(extra="allow")

    tool_name: str = Field(..., min_length=1)
    tool_input: dict[str, Any] = Field(default_factory=dict)

    @property
    def command(self) -> str:
        """Shell command for Bash-style tools; empty string otherwise."""
        command = self.tool_input.get("command", "")
        return command if isinstance(command, str) else ""


class Decision(IntEnum):
    ALLOW = 0
    BLOCK = 2


@dataclass(frozen=True)
class HookResult:
    decision: Decision
    message: str = ""

    @classmethod
    def allow(cls, message: str = "") -> "HookResult":
        return cls(Decision.ALLOW, message)

    @classmethod
    def block(cls, message: str) -> "HookResult":
        return cls(Decision.BLOCK, message)

    @property
    def blocked(self) -> bool:
        return self.decision is Decision.BLOCK


HookBody = Callable[[HookInput, Settings], HookResult]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def read_hook_input(stream: TextIO) -> HookInput | None:
    """
    Read the whole stream and validate it as a HookInput.

    The host always writes UTF-8, so a real stdin is decoded from its byte
    buffer rather than with the locale encoding.

    Returns None for empty input. Raises pydantic ValidationError on malformed
    JSON, a non-object payload or a missing tool_name, and UnicodeDecodeError
    on non-UTF-8 bytes; evaluate turns any of those into an allow.
    """
    buffer = getattr(stream, "buffer", None)
    raw = buffer.read().decode("utf-8") if buffer is not None else stream.read()
    if not raw.strip():
        return None
    return HookInput.model_validate_json(raw)


def evaluate(body: HookBody, stream: TextIO, hook_name: str) -> HookResult:
    """
    Run ``body`` against the record on ``stream``; faults become an allow.

    Separated from run_hook so tests can check the decision without
    catching SystemExit.
    """
    try:
        configure_logging("WARNING")  # null sink until settings load
        settings = get_settings()
        configure_logging(settings.log_level, settings.log_path, settings.log_to_stderr)
        record = read_hook_input(stream)
        if record is None:
            log.debug("hook_empty_input", hook=hook_name)
            return HookResult.allow()

        structlog.contextvars.bind_contextvars(hook=hook_name, tool_name=record.tool_name)
        result = body(record, settings)
        log.info(
            "hook_decision",
            decision=result.decision.name,
            command=record.command,
        )
        return result
    except Exception as e:  # noqa: BLE001 — fail open on every internal fault
        log.warning(
            "hook_failed_open",
            hook=hook_name,
            error_type=type(e).__name__,
            error=str(e),
        )
        return HookResult.allow()
    finally:
        structlog.contextvars.clear_contextvars()


def report(message: str, stream: TextIO) -> None:
    """Write ``message`` to ``stream`` as UTF-8. A failed write is logged, not raised."""
    data = message + "\n"
    try:
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            stream.flush()
            buffer.write(data.encode("utf-8"))
            buffer.flush()
        else:
            stream.write(data)
            stream.flush()
    except (OSError, ValueError) as e:
        log.warning("hook_report_failed", error_type=type(e).__name__, error=str(e))


def run_hook(body: HookBody, hook_name: str) -> None:
    """Read stdin, evaluate ``body``, report on stderr and exit. Never returns."""
    result = evaluate(body, sys.stdin, hook_name)
    if result.message:
        report(result.message, sys.stderr)
    sys.exit(int(result.decision))
