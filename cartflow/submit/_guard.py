"""
In-flight guard — at most one pending submission per checkout session.
"""

from __future__ import annotations

from datetime import datetime


class InFlightGuard:
    """
    Registry of sessions with a submission in flight.

    Note: acquire() is a plain check-and-set with no await in between, so on
    a single event loop it is atomic. It is refusal, not debouncing: the
    second caller gets False and must not dispatch anything.
    """

    def __init__(self) -> None:
        self._pending: dict[str, datetime] = {}

    def acquire(self, key: str) -> bool:
        """Returns True if registered, False if key is already in flight."""
        if key in self._pending:
            return False
        self._pending[key] = datetime.now()
        return True

    def release(self, key: str) -> None:
        self._pending.pop(key, None)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def pending_since(self, key: str) -> datetime | None:
        return self._pending.get(key)

    def __len__(self) -> int:
        return len(self._pending)


__all__ = ("InFlightGuard",)
