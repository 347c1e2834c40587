"""
Structured logging configuration using structlog.

Guarantees enforced here:
  - Acknowledgment codes are REDACTED before any output, so the agent can
    never recover a live code by reading the hook log
  - Logs go to a file by default; stderr is reserved for the text the host
    shows the agent when a hook blocks
  - JSON output format, one event per line
"""
from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Any

import structlog

# ---------------------------------------------------------------------------
# Fields that must never appear in logs in plaintext
# Checked case-insensitively against all log event_dict keys
# ---------------------------------------------------------------------------
_REDACTED_FIELDS: frozenset[str] = frozenset(
    {
        "code",
        "otp",
        "submitted_code",
        "stored_code",
        "new_code",
        "password",
        "token",
        "secret",
        "api_key",
    }
)

_MAX_COMMAND_CHARS = 200
_OTP_PREFIX = re.compile(r"^OTP=[0-9]{6}(?= )")


def _scrub_sensitive(
    logger: Any,  # noqa: ANN401 — structlog typing requirement
    method: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor: replace sensitive field values with [REDACTED]."""
    for key in list(event_dict.keys()):
        if key.lower() in _REDACTED_FIELDS:
            event_dict[key] = "[REDACTED]"
    return event_dict


def _mask_command(
    logger: Any,  # noqa: ANN401
    method: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor: hide a submitted code and truncate logged commands."""
    command = event_dict.get("command")
    if isinstance(command, str):
        command = _OTP_PREFIX.sub("OTP=[REDACTED]", command)
        if len(command) > _MAX_COMMAND_CHARS:
            command = command[:_MAX_COMMAND_CHARS] + "..."
        event_dict["command"] = command
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    log_file: Path | str | None = None,
    to_stderr: bool = False,
) -> None:
    """
    Configure structlog for structured JSON logging.

    Call once per hook process before any log calls are made.

    Args:
        log_level: One of DEBUG / INFO / WARNING / ERROR / CRITICAL.
        log_file:  Optional file path. Parent directories are created if needed.
        to_stderr: Also write to stderr. Off by default because the host
                   surfaces a blocking hook's stderr to the agent verbatim.
    """
    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            log_file = None  # Logging must never be the reason a hook fails

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _scrub_sensitive,
        _mask_command,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.ExceptionRenderer(),
    ]

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )

    handlers: list[logging.Handler] = []

    if to_stderr:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        handlers.append(stderr_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError:
            file_handler = None
        if file_handler is not None:
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    root = logging.getLogger()
    for old in root.handlers:
        if isinstance(old, logging.FileHandler):
            old.close()
    root.handlers = handlers
    root.setLevel(getattr(logging, log_level, logging.INFO))
