"""CommandHistory: append-only command log with an undo/redo cursor."""

from __future__ import annotations

import logging

from calc_history.core.errors import InvalidCount
from calc_history.core.models import HistoryEntry

_log = logging.getLogger(__name__)


class CommandHistory:
    """Ordered log of executed commands.

    Entries ``[0, cursor)`` are applied, entries ``[cursor, len)`` are undone
    and can be redone until the next ``record()`` discards them.

    The history never runs a command itself: the engine asks which entries to
    replay, runs them, then commits the cursor move once per batch.
    """

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []
        self._cursor = 0

    def record(self, entry: HistoryEntry) -> None:
        """Append an already-executed entry. Clears the redoable entries."""
        stale = len(self._entries) - self._cursor
        if stale:
            _log.debug("Discarding %d redoable entries", stale)
            del self._entries[self._cursor:]
        self._entries.append(entry)
        self._cursor += 1

    def undo_steps(self, count: int) -> list[HistoryEntry]:
        """Entries to undo for *count* steps, most recent first."""
        n = min(_check_count(count), self._cursor)
        return self._entries[self._cursor - n:self._cursor][::-1]

    def redo_steps(self, count: int) -> list[HistoryEntry]:
        """Entries to redo for *count* steps, oldest first."""
        n = min(_check_count(count), self.redo_count)
        return self._entries[self._cursor:self._cursor + n]

    def commit_undo(self, steps: int) -> None:
        if not 0 <= steps <= self._cursor:
            raise IndexError(f"cannot undo {steps} of {self._cursor} applied entries")
        self._cursor -= steps

    def commit_redo(self, steps: int) -> None:
        if not 0 <= steps <= self.redo_count:
            raise IndexError(f"cannot redo {steps} of {self.redo_count} undone entries")
        self._cursor += steps

    @property
    def cursor(self) -> int:
        """Number of entries currently applied."""
        return self._cursor

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def undo_count(self) -> int:
        """Number of entries that can be undone."""
        return self._cursor

    @property
    def redo_count(self) -> int:
        """Number of entries that can be redone."""
        return len(self._entries) - self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries)

    @property
    def undo_description(self) -> str | None:
        return self._entries[self._cursor - 1].description if self.can_undo else None

    @property
    def redo_description(self) -> str | None:
        return self._entries[self._cursor].description if self.can_redo else None

    def clear(self) -> None:
        self._entries.clear()
        self._cursor = 0


def _check_count(count: int) -> int:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidCount(count)
    return count
