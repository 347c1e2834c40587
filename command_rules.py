"""
Ordered (pattern, reason) rule lists for the stateless command guards.

Each list is evaluated top to bottom and the first matching rule wins, so
more specific rules go first. Patterns are case-insensitive and searched
anywhere in the command.

Used by: hooks/db_guard.py, hooks/command_guard.py.
"""
from __future__ import annotations

import re
from typing import Iterable, NamedTuple

from hook_runtime import HookInput, HookResult


class Rule(NamedTuple):
    pattern: re.Pattern[str]
    reason: str


def _rule(pattern: str, reason: str) -> Rule:
    return Rule(re.compile(pattern, re.IGNORECASE), reason)


def first_match(rules: Iterable[Rule], text: str) -> Rule | None:
    """Return the first rule whose pattern occurs in ``text``."""
    for rule in rules:
        if rule.pattern.search(text):
            return rule
    return None


# ---------------------------------------------------------------------------
# Destructive database commands
# ---------------------------------------------------------------------------

DATABASE_RULES: tuple[Rule, ...] = (
    _rule(r"\bdrop\s+(database|schema)\b", "drops an entire database or schema"),
    _rule(r"\bdrop\s+table\b", "drops a table"),
    _rule(r"\btruncate\s+table\b", "truncates a table"),
    # DELETE FROM <table> with no WHERE before the statement ends
    _rule(r"\bdelete\s+from\s+[\w.\"`\[\]]+\s*(;|$|[\"'])", "deletes every row (DELETE without WHERE)"),
    _rule(r"(^|[\s;&|(])dropdb\b", "drops a PostgreSQL database (dropdb)"),
    _rule(r"\bprisma\s+migrate\s+reset\b", "resets the database (prisma migrate reset)"),
    _rule(r"\bprisma\s+db\s+push\b.*--force-reset", "resets the database (prisma db push --force-reset)"),
    _rule(r"\b(rails|rake)\s+db:(drop|reset|purge)\b", "drops or resets the Rails database"),
    _rule(r"\bmanage\.py\s+(flush|reset_db)\b", "wipes the Django database"),
    _rule(r"\bredis-cli\b.*\bflush(all|db)\b", "flushes Redis data"),
    _rule(r"\.dropDatabase\s*\(", "drops a MongoDB database"),
    _rule(r"\bsupabase\s+db\s+reset\b", "resets the Supabase database"),
)

# tool_input keys that carry SQL for database MCP tools (mcp__<server>__<tool>)
_SQL_KEYS = ("sql", "query", "statement")


def _database_texts(record: HookInput) -> list[str]:
    texts = [record.command] if record.command else []
    if not record.tool_name.startswith("mcp__"):
        return texts
    for key in _SQL_KEYS:
        value = record.tool_input.get(key)
        if isinstance(value, str) and value:
            texts.append(value)
    return texts


def check_database_command(record: HookInput) -> HookResult:
    """Block destructive database operations; allow everything else."""
    for text in _database_texts(record):
        rule = first_match(DATABASE_RULES, text)
        if rule is not None:
            return HookResult.block(
                f"BLOCKED: This command {rule.reason}. Destructive database "
                "operations are blocked by guardrail rules. If this is really "
                "needed, ask the user to run it themselves."
            )
    return HookResult.allow()


# ---------------------------------------------------------------------------
# Specific dangerous command strings
# ---------------------------------------------------------------------------

COMMAND_RULES: tuple[Rule, ...] = (
    _rule(r"\brm\s+-(rf|fr)\s+/\*?(\s|$)", "deletes the filesystem root (rm -rf /)"),
    _rule(r"\brm\s+-(rf|fr)\s+~/?(\s|$)", "deletes the home directory (rm -rf ~)"),
    _rule(r"\brm\s+-(rf|fr)\s+\.(\s|$)", "deletes the working directory (rm -rf .)"),
    _rule(r"\bgit\s+push\b.*\s(--force|-f)(\s|$)", "force-pushes (git push --force)"),
    _rule(r"\bgit\s+reset\s+--hard\b", "discards local changes (git reset --hard)"),
    _rule(r"--no-verify\b", "skips git hooks (--no-verify)"),
)

# Files that should never be deleted
PROTECTED_FILES: tuple[str, ...] = (
    ".env",
    "credentials.json",
    "token.json",
    "CLAUDE.md",
    "tool-memory.md",
    "tool-memory.otp",
)

_DELETE_PATTERN = re.compile(r"(^|[\s;&|(])(rm|unlink|shred)\s|\bdelete\b", re.IGNORECASE)


def protected_file_rules(files: Iterable[str] = PROTECTED_FILES) -> tuple[Rule, ...]:
    """One rule per protected file name (matched as a whole path component)."""
    return tuple(
        _rule(rf"(^|[\s/'\"]){re.escape(name)}($|[\s'\";])", f"deletes protected file '{name}'")
        for name in files
    )


def configured_rules(blocked_commands: Iterable[str]) -> tuple[Rule, ...]:
    """Literal operator-configured strings, blocked wherever they appear."""
    return tuple(
        _rule(re.escape(text), f"contains blocked command '{text}'")
        for text in blocked_commands
    )


def check_blocked_command(record: HookInput, blocked_commands: Iterable[str] = ()) -> HookResult:
    """Block known-dangerous commands, protected-file deletes and configured strings."""
    command = record.command.strip()
    if not command:
        return HookResult.allow()

    rule = first_match(COMMAND_RULES + configured_rules(blocked_commands), command)
    if rule is None and _DELETE_PATTERN.search(command):
        rule = first_match(protected_file_rules(), command)

    if rule is not None:
        return HookResult.block(
            f"BLOCKED: This command {rule.reason}. This is blocked by guardrail "
            "rules. If you need to do this, ask the user for explicit "
            "confirmation first."
        )
    return HookResult.allow()
