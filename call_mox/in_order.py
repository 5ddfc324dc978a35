"""Shared cursor for verifying call order across mocks."""

from __future__ import annotations

import threading

from .invocation import Invocation


class InOrderContext:
    """Cursor shared by in-order verifications, possibly across mocks.

    Each successful in-order verification moves the cursor to the last
    invocation it matched. A later verification fails when its earliest
    match lies at or before the cursor.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cursor: Invocation | None = None
        self._description = ""

    @property
    def cursor(self) -> int | None:
        """Return the sequence number at the cursor, or ``None``."""
        return None if self._cursor is None else self._cursor.seq

    @property
    def last_verified(self) -> Invocation | None:
        """Return the invocation the cursor points at."""
        return self._cursor

    @property
    def description(self) -> str:
        """Return how the call at the cursor was described when verified."""
        return self._description

    def precedes_cursor(self, invocation: Invocation) -> bool:
        """Return ``True`` when *invocation* is at or before the cursor."""
        cursor = self.cursor
        return cursor is not None and invocation.seq <= cursor

    def advance(self, invocation: Invocation, description: str) -> None:
        """Move the cursor to *invocation*."""
        with self._lock:
            if self._cursor is None or invocation.seq > self._cursor.seq:
                self._cursor = invocation
                self._description = description

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"InOrderContext(cursor={self.cursor!r})"


__all__ = ["InOrderContext"]
