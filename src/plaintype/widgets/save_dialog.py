"""Save dialog with an optional read-only accessory message."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QDialog, QFileDialog, QGridLayout, QLabel, QWidget

__all__ = ["DEFAULT_FILE_FILTER", "SaveFileDialog", "QtSaveDialogProvider"]

DEFAULT_FILE_FILTER = "Text Files (*.txt *.text *.md *.log);;All Files (*)"


class SaveFileDialog:
    """Wraps a non-native :class:`QFileDialog` so an accessory label can be added."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        caption: str = "Save Document",
        start_dir: Path | str | None = None,
        suggested_name: str | None = None,
        file_filter: str | None = None,
        default_suffix: str = "txt",
    ) -> None:
        directory = Path(start_dir) if start_dir else Path.home()
        if suggested_name:
            directory = directory / suggested_name
        self._dialog = QFileDialog(parent, caption, str(directory), file_filter or DEFAULT_FILE_FILTER)
        self._dialog.setAcceptMode(QFileDialog.AcceptMode.AcceptSave)
        self._dialog.setFileMode(QFileDialog.FileMode.AnyFile)
        self._dialog.setOption(QFileDialog.Option.DontUseNativeDialog, True)
        if default_suffix:
            self._dialog.setDefaultSuffix(default_suffix)
        self._accessory: QLabel | None = None

    @property
    def dialog(self) -> QFileDialog:
        return self._dialog

    @property
    def accessory(self) -> QLabel | None:
        return self._accessory

    def set_accessory_message(self, text: str) -> None:
        """Show ``text`` below the file chooser as a plain, non-interactive label."""

        if self._accessory is None:
            label = QLabel(self._dialog)
            label.setObjectName("accessory_label")
            label.setWordWrap(True)
            label.setTextInteractionFlags(Qt.TextInteractionFlag.NoTextInteraction)
            layout = self._dialog.layout()
            if isinstance(layout, QGridLayout):
                layout.addWidget(label, layout.rowCount(), 0, 1, layout.columnCount())
            elif layout is not None:
                layout.addWidget(label)
            self._accessory = label
        self._accessory.setText(text)

    def run(self) -> Path | None:
        accepted = self._dialog.exec() == int(QDialog.DialogCode.Accepted)
        if not accepted:
            return None
        selected = self._dialog.selectedFiles()
        if not selected:
            return None
        return Path(selected[0])


class QtSaveDialogProvider:
    """Builds :class:`SaveFileDialog` instances for the document controller."""

    __slots__ = ("_parent_provider", "_file_filter", "_default_suffix")

    def __init__(
        self,
        *,
        parent_provider: Callable[[], QWidget | None] | None = None,
        file_filter: str | None = None,
        default_suffix: str = "txt",
    ) -> None:
        self._parent_provider = parent_provider
        self._file_filter = file_filter
        self._default_suffix = default_suffix

    def create_save_dialog(
        self,
        *,
        start_dir: Path | None = None,
        suggested_name: str | None = None,
    ) -> SaveFileDialog:
        parent = self._parent_provider() if self._parent_provider else None
        return SaveFileDialog(
            parent,
            start_dir=start_dir,
            suggested_name=suggested_name,
            file_filter=self._file_filter,
            default_suffix=self._default_suffix,
        )
