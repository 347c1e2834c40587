#!/usr/bin/env python3
"""
Hook: Database Guard (PreToolUse Hook)
Purpose: Block destructive database commands before they execute.
Trigger: Runs before Bash and database MCP tool use.

Exit code 0 = allow the command
Exit code 2 = block the command (with reason on stderr)
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from command_rules import check_database_command  # noqa: E402
from hook_runtime import run_hook  # noqa: E402


def main():
    run_hook(lambda record, settings: check_database_command(record), "db_guard")


if __name__ == "__main__":
    main()
