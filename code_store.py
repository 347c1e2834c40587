"""
Single-slot storage for the outstanding acknowledgment code.

The memory gate and memory clear hooks run as separate processes; the only
thing they share is this one value. At most one code is live at a time:
``write`` overwrites, it never appends.

Known limitation: the file store uses no locking and no atomic rename. The
host invokes hooks serially around a single tool call, so a read-modify-write
race is only possible if it dispatches tool calls concurrently.

Usage:
    store = FileCodeStore(settings.code_path)
    store.write("482913")
    current = store.read()       # StoredCode(value="482913", issued_at=...)
    store.delete()
"""
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StoredCode:
    """An outstanding code and when it was issued (epoch seconds)."""

    value: str
    issued_at: float

    def age(self, now: float | None = None) -> float:
        return (time.time() if now is None else now) - self.issued_at


class CodeStore(ABC):
    """Read-current / write-new / delete over a single persisted value."""

    @abstractmethod
    def read(self) -> StoredCode | None:
        """Return the outstanding code, or None when no challenge is pending."""

    @abstractmethod
    def write(self, code: str) -> None:
        """Replace any outstanding code with ``code``."""

    @abstractmethod
    def delete(self) -> bool:
        """Remove the outstanding code. Returns True if one was removed."""

    def exists(self) -> bool:
        return self.read() is not None


class FileCodeStore(CodeStore):
    """Keeps the code as the sole content of a text file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read(self) -> StoredCode | None:
        if not self.path.exists():
            return None
        value = self.path.read_text(encoding="utf-8").strip()
        return StoredCode(value=value, issued_at=self.path.stat().st_mtime)

    def write(self, code: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(code, encoding="utf-8")
        log.debug("code_written", path=str(self.path))

    def delete(self) -> bool:
        if not self.path.exists():
            return False
        self.path.unlink(missing_ok=True)
        log.debug("code_deleted", path=str(self.path))
        return True


class InMemoryCodeStore(CodeStore):
    """Process-local store, for tests and for embedding the gate elsewhere."""

    def __init__(self, code: str | None = None, issued_at: float | None = None) -> None:
        self._current: StoredCode | None = None
        if code is not None:
            self._current = StoredCode(code, time.time() if issued_at is None else issued_at)

    def read(self) -> StoredCode | None:
        return self._current

    def write(self, code: str) -> None:
        self._current = StoredCode(code, time.time())

    def delete(self) -> bool:
        removed = self._current is not None
        self._current = None
        return removed
