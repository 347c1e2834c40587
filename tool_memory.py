"""
Tool memory acknowledgment gate.

An operator writes notes the agent must read before running commands in this
project (the advisory note, .claude/tool-memory.md by default). The gate
makes the agent prove it has seen the current notes with a one-time code:

  1. Agent runs `git commit -m x` while the note is non-empty.
  2. memory_gate blocks, shows the note and a fresh 6-digit code.
  3. Agent retries as `OTP=482913 git commit -m x`.
  4. memory_gate allows because the code matches the stored one.
  5. memory_clear (post-action) sees the code on the executed command and
     deletes the stored code, so the next plain command is challenged again.

States: IDLE (no stored code) and CHALLENGED (one stored code). A new plain
command while CHALLENGED replaces the code; a wrong code leaves it alone.
Codes never expire unless code_ttl_seconds is configured.

The code is a convenience acknowledgment, not a security mechanism.
"""
from __future__ import annotations

import re
import secrets
from pathlib import Path

import structlog

from code_store import CodeStore
from hook_runtime import HookInput, HookResult

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_OTP_PATTERN = re.compile(r"^OTP=([0-9]{6}) ")
_CODE_MIN = 100000
_CODE_MAX = 999999


# ---------------------------------------------------------------------------
# Command envelope
# ---------------------------------------------------------------------------


def parse_code(command: str) -> tuple[str | None, str]:
    """
    Split an `OTP=<6 digits> <command>` envelope.

    Returns (code, rest). code is None when the command carries no prefix,
    in which case rest is the command unchanged.
    """
    match = _OTP_PATTERN.match(command)
    if match is None:
        return None, command
    return match.group(1), command[match.end():]


def generate_code() -> str:
    """Uniform 6-digit code in 100000–999999 (never a leading zero)."""
    return str(_CODE_MIN + secrets.randbelow(_CODE_MAX - _CODE_MIN + 1))


def read_note(path: Path) -> str:
    """Trimmed advisory note text; empty when the file is missing."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8").strip()


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


def _challenge_message(note: str, code: str, command: str) -> str:
    return (
        "BLOCKED: This project has tool memory you must acknowledge first.\n"
        "\n"
        "--- tool memory ---\n"
        f"{note}\n"
        "-------------------\n"
        "\n"
        "Follow the notes above. If the command is still appropriate, retry it "
        f"with acknowledgment code {code}:\n"
        "\n"
        f"OTP={code} {command}"
    )


def _invalid_code_message(submitted: str) -> str:
    return (
        f"BLOCKED: invalid code OTP={submitted}. It does not match the "
        "outstanding acknowledgment code. Use the code from the most recent "
        "tool memory prompt, or rerun the command without the OTP= prefix "
        "to get a new one."
    )


_NO_CODE_REQUESTED = (
    "BLOCKED: no code was requested. There is no outstanding tool memory "
    "acknowledgment, so an OTP= prefix is not valid here. Rerun the command "
    "without the OTP= prefix."
)

_CODE_EXPIRED = (
    "BLOCKED: code has expired. Rerun the command without the OTP= prefix "
    "to see the current tool memory and get a new code."
)


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------


def check_memory_gate(
    record: HookInput,
    note_path: Path,
    store: CodeStore,
    gated_tools: list[str] | None = None,
    code_ttl_seconds: int | None = None,
) -> HookResult:
    """
    Pre-action check: allow, or block with the note and a fresh code.

    Args:
        record:           Invocation Record from the host.
        note_path:        Advisory note file.
        store:            Where the outstanding code lives.
        gated_tools:      Tool names to challenge; None challenges every tool.
        code_ttl_seconds: Refuse codes older than this; None means no expiry.
    """
    if gated_tools is not None and record.tool_name not in gated_tools:
        return HookResult.allow()

    command = record.command
    submitted, _ = parse_code(command)

    if submitted is not None:
        stored = store.read()
        if stored is None:
            log.info("memory_gate_unrequested_code")
            return HookResult.block(_NO_CODE_REQUESTED)

        if code_ttl_seconds is not None and stored.age() > code_ttl_seconds:
            store.delete()
            log.info("memory_gate_code_expired", ttl_seconds=code_ttl_seconds)
            return HookResult.block(_CODE_EXPIRED)

        if stored.value != submitted:
            log.info("memory_gate_invalid_code")
            return HookResult.block(_invalid_code_message(submitted))

        # Cleanup is memory_clear's job once the command has actually run.
        log.info("memory_gate_acknowledged")
        return HookResult.allow()

    note = read_note(note_path)
    if not note:
        return HookResult.allow()

    code = generate_code()
    store.write(code)
    log.info("memory_gate_challenged", note_chars=len(note))
    return HookResult.block(_challenge_message(note, code, command))


def clear_memory_code(record: HookInput, store: CodeStore) -> HookResult:
    """Post-action cleanup: drop the stored code once a gated command ran."""
    submitted, _ = parse_code(record.command)
    if submitted is not None and store.exists():
        store.delete()
        log.info("memory_code_cleared")
    return HookResult.allow()
