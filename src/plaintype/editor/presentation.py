"""Presentation-surface port and the headless text buffer."""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from .change_tracking import UndoTracker

__all__ = ["PresentationSurface", "TextBuffer"]


@runtime_checkable
class PresentationSurface(Protocol):
    """Whatever displays the document text to the user."""

    def get_text(self) -> str:
        ...

    def set_text(self, text: str) -> None:
        ...


class TextBuffer:
    """In-memory surface used in headless sessions and tests."""

    def __init__(self, text: str = "", *, tracker: UndoTracker | None = None) -> None:
        self._text = text
        self._tracker = tracker
        self._listeners: list[Callable[[str], None]] = []

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if self._tracker is not None and text != self._text:
            self._tracker.record(self._text)
        self._text = text
        self._notify(text)

    def undo(self) -> bool:
        if self._tracker is None:
            return False
        previous = self._tracker.pop_undo()
        if previous is None:
            return False
        self._text = previous
        self._notify(previous)
        return True

    def add_listener(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[str], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, text: str) -> None:
        for listener in list(self._listeners):
            listener(text)
