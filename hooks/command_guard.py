#!/usr/bin/env python3
"""
Hook: Command Guard (PreToolUse Hook)
Purpose: Block dangerous commands before they execute.
Trigger: Runs before every Bash tool use.

Exit code 0 = allow the command
Exit code 2 = block the command (with reason on stderr)

Extra strings to block: TOOL_HOOKS_BLOCKED_COMMANDS='["terraform destroy"]'
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from command_rules import check_blocked_command  # noqa: E402
from hook_runtime import run_hook  # noqa: E402


def guard(record, settings):
    return check_blocked_command(record, settings.blocked_commands)


def main():
    run_hook(guard, "command_guard")


if __name__ == "__main__":
    main()
