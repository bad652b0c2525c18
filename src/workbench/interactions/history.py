"""Bounded history of submitted interactions with a bidirectional cursor."""

from __future__ import annotations

__all__ = ["InteractionHistory"]


class InteractionHistory:
    """Submitted inputs, oldest first, plus a navigation cursor.

    The cursor ranges over ``0 .. len(history)``; ``len(history)`` means "past
    the newest entry", where the pending line is whatever the user is typing.
    """

    def __init__(self, limit: int = 500) -> None:
        self._entries: list[str] = []
        self._limit = max(1, limit)
        self._cursor = 0

    def add(self, entry: str) -> None:
        """Append ``entry`` and move the cursor past it."""

        self._entries.append(entry)
        if len(self._entries) > self._limit:
            del self._entries[: len(self._entries) - self._limit]
        self._cursor = len(self._entries)

    def move_end(self) -> None:
        self._cursor = len(self._entries)

    def has_previous(self) -> bool:
        return self._cursor > 0

    def has_next(self) -> bool:
        return self._cursor < len(self._entries)

    def previous(self) -> str:
        """Step back and return the entry now under the cursor.

        Raises:
            IndexError: There is no earlier entry.
        """

        if not self.has_previous():
            raise IndexError("No previous history entry")
        self._cursor -= 1
        return self._entries[self._cursor]

    def next(self) -> str:
        """Step forward; stepping past the newest entry returns ``""``.

        Raises:
            IndexError: The cursor is already past the newest entry.
        """

        if not self.has_next():
            raise IndexError("No next history entry")
        self._cursor += 1
        return self.current()

    def current(self) -> str:
        if self._cursor >= len(self._entries):
            return ""
        return self._entries[self._cursor]

    @property
    def cursor(self) -> int:
        return self._cursor

    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
