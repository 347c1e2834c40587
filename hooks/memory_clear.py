#!/usr/bin/env python3
"""
Hook: Tool Memory Clear (PostToolUse Hook)
Purpose: Consume the acknowledgment code once an OTP-prefixed command has run.
Trigger: Runs after every Bash tool use.

Always exits 0. The next command without a code is challenged again.
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from code_store import FileCodeStore  # noqa: E402
from hook_runtime import run_hook  # noqa: E402
from tool_memory import clear_memory_code  # noqa: E402


def clear(record, settings):
    return clear_memory_code(record, FileCodeStore(settings.code_path))


def main():
    run_hook(clear, "memory_clear")


if __name__ == "__main__":
    main()
