"""PySide6 adapters for the document ports."""

from .encoding_picker import EncodingPickerDialog, QtEncodingPicker
from .printing import QtPrintHandler, print_document
from .save_dialog import QtSaveDialogProvider, SaveFileDialog
from .text_surface import QtChangeTracker, QtTextSurface

__all__ = [
    "EncodingPickerDialog",
    "QtChangeTracker",
    "QtEncodingPicker",
    "QtPrintHandler",
    "QtSaveDialogProvider",
    "QtTextSurface",
    "SaveFileDialog",
    "print_document",
]
