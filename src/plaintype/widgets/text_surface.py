"""Adapters exposing a ``QPlainTextEdit`` as surface and change tracker."""

from __future__ import annotations

import logging

from PySide6.QtWidgets import QPlainTextEdit

__all__ = ["QtTextSurface", "QtChangeTracker"]

LOGGER = logging.getLogger(__name__)


class QtTextSurface:
    """Presentation surface writing into a plain-text editor widget."""

    __slots__ = ("_editor",)

    def __init__(self, editor: QPlainTextEdit) -> None:
        self._editor = editor

    @property
    def editor(self) -> QPlainTextEdit:
        return self._editor

    def get_text(self) -> str:
        return self._editor.toPlainText()

    def set_text(self, text: str) -> None:
        self._editor.setPlainText(text)


class QtChangeTracker:
    """Maps suspend/resume onto the editor's undo stack and dirty flag.

    Disabling undo/redo on a ``QTextDocument`` also clears its history, so a
    loaded file never becomes an undoable edit.
    """

    __slots__ = ("_editor", "_suspend_depth")

    def __init__(self, editor: QPlainTextEdit) -> None:
        self._editor = editor
        self._suspend_depth = 0

    @property
    def is_dirty(self) -> bool:
        return self._editor.document().isModified()

    @property
    def is_recording(self) -> bool:
        return self._editor.isUndoRedoEnabled()

    def suspend(self) -> None:
        if self._suspend_depth == 0:
            self._editor.setUndoRedoEnabled(False)
        self._suspend_depth += 1

    def resume(self) -> None:
        if self._suspend_depth == 0:
            LOGGER.warning("resume() called without a matching suspend()")
            return
        self._suspend_depth -= 1
        if self._suspend_depth == 0:
            self._editor.setUndoRedoEnabled(True)

    def mark_clean(self) -> None:
        self._editor.document().setModified(False)

    def mark_dirty(self) -> None:
        self._editor.document().setModified(True)
