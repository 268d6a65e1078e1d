"""Change-tracking port and a headless undo recorder."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol, runtime_checkable

__all__ = ["ChangeTracker", "UndoTracker", "suspended"]

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class ChangeTracker(Protocol):
    """Undo registration and modification-state controller."""

    @property
    def is_dirty(self) -> bool:
        ...

    def suspend(self) -> None:
        ...

    def resume(self) -> None:
        ...

    def mark_clean(self) -> None:
        ...

    def mark_dirty(self) -> None:
        ...


@contextmanager
def suspended(tracker: ChangeTracker | None) -> Iterator[None]:
    """Suspend ``tracker`` for the duration of the block, resuming on every exit path."""

    if tracker is None:
        yield
        return
    tracker.suspend()
    try:
        yield
    finally:
        tracker.resume()


class UndoTracker:
    """In-memory tracker used when no editor widget owns undo history.

    Suspensions nest; edits recorded while suspended leave neither undo
    history nor a dirty flag behind.
    """

    def __init__(self) -> None:
        self._suspend_depth = 0
        self._undo: list[str] = []
        self._dirty = False

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def is_recording(self) -> bool:
        return self._suspend_depth == 0

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    def suspend(self) -> None:
        self._suspend_depth += 1

    def resume(self) -> None:
        if self._suspend_depth == 0:
            LOGGER.warning("resume() called without a matching suspend()")
            return
        self._suspend_depth -= 1

    def record(self, previous_text: str) -> None:
        """Register an edit whose prior contents were ``previous_text``."""

        if not self.is_recording:
            return
        self._undo.append(previous_text)
        self._dirty = True

    def pop_undo(self) -> str | None:
        if not self._undo:
            return None
        return self._undo.pop()

    def mark_clean(self) -> None:
        self._dirty = False

    def mark_dirty(self) -> None:
        self._dirty = True

    def suspended(self) -> ContextManager[None]:
        return suspended(self)
