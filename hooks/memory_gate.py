#!/usr/bin/env python3
"""
Hook: Tool Memory Gate (PreToolUse Hook)
Purpose: Make the agent acknowledge the project's tool memory before running commands.
Trigger: Runs before every Bash tool use.

Exit code 0 = allow the command
Exit code 2 = block the command (tool memory and a one-time code on stderr)

Retry a blocked command as `OTP=<code> <command>`; hooks/memory_clear.py
consumes the code after the command has run.
"""
import sys
from pathlib import Path

# Hooks run as plain scripts; make the project modules importable.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from code_store import FileCodeStore  # noqa: E402
from hook_runtime import run_hook  # noqa: E402
from tool_memory import check_memory_gate  # noqa: E402


def gate(record, settings):
    return check_memory_gate(
        record,
        note_path=settings.memory_path,
        store=FileCodeStore(settings.code_path),
        gated_tools=settings.gated_tools,
        code_ttl_seconds=settings.code_ttl_seconds,
    )


def main():
    run_hook(gate, "memory_gate")


if __name__ == "__main__":
    main()
