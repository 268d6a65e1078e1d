"""Modal encoding picker backed by a Qt combo box."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from ..editor.detector import PickResult
from ..editor.encodings import KNOWN_ENCODINGS, TextEncoding

__all__ = ["EncodingPickerDialog", "QtEncodingPicker"]

LOGGER = logging.getLogger(__name__)


class EncodingPickerDialog(QDialog):
    """Dialog listing the known encodings with OK/Cancel buttons."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        encodings: Sequence[TextEncoding] = KNOWN_ENCODINGS,
        current: TextEncoding | None = None,
        prompt: str = "Choose the text encoding:",
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Select Encoding")
        self.setModal(True)
        self._encodings = tuple(encodings)

        layout = QVBoxLayout(self)
        header = QLabel(prompt)
        header.setWordWrap(True)
        layout.addWidget(header)

        self._combo = QComboBox()
        self._combo.setObjectName("encoding_combo")
        for encoding in self._encodings:
            self._combo.addItem(encoding.label)
        layout.addWidget(self._combo)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.setObjectName("encoding_buttons")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        if current is not None:
            self.select_encoding(current)

    def encodings(self) -> tuple[TextEncoding, ...]:
        return self._encodings

    def select_encoding(self, encoding: TextEncoding) -> bool:
        try:
            index = self._encodings.index(encoding)
        except ValueError:
            return False
        self._combo.setCurrentIndex(index)
        return True

    def selected_encoding(self) -> TextEncoding | None:
        index = self._combo.currentIndex()
        if index < 0:
            return None
        return self._encodings[index]


class QtEncodingPicker:
    """:class:`~plaintype.editor.detector.EncodingPicker` implemented with a dialog."""

    __slots__ = ("_parent_provider", "_encodings")

    def __init__(
        self,
        *,
        parent_provider: Callable[[], QWidget | None] | None = None,
        encodings: Sequence[TextEncoding] = KNOWN_ENCODINGS,
    ) -> None:
        self._parent_provider = parent_provider
        self._encodings = tuple(encodings)

    def create_dialog(self, current: TextEncoding | None = None) -> EncodingPickerDialog:
        parent = self._parent_provider() if self._parent_provider else None
        return EncodingPickerDialog(parent, encodings=self._encodings, current=current)

    def pick_encoding(self, current: TextEncoding | None = None) -> PickResult:
        dialog = self.create_dialog(current)
        accepted = dialog.exec() == int(QDialog.DialogCode.Accepted)
        encoding = dialog.selected_encoding()
        dialog.deleteLater()
        if not accepted or encoding is None:
            return PickResult.cancelled()
        LOGGER.debug("User picked encoding %s", encoding.label)
        return PickResult.chosen(encoding)
