"""Render :class:`PrintJob` values with Qt's print support."""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QSizeF
from PySide6.QtGui import QPageLayout, QTextDocument
from PySide6.QtPrintSupport import QPrintDialog, QPrinter
from PySide6.QtWidgets import QDialog, QWidget

from ..editor.document_model import PrintJob

__all__ = ["build_text_document", "print_document", "QtPrintHandler"]

LOGGER = logging.getLogger(__name__)


def build_text_document(job: PrintJob, *, page_size: QSizeF | None = None) -> QTextDocument:
    """Lay the job's content out as plain text.

    Text is anchored at the top of the page unless the job asks for vertical
    centering and ``page_size`` (in points) is known.
    """

    document = QTextDocument()
    document.setPlainText(job.content)
    document.setMetaInformation(QTextDocument.MetaInformation.DocumentTitle, job.title)
    if page_size is not None and job.vertically_centered:
        _center_vertically(document, page_size)
    elif page_size is not None:
        document.setPageSize(page_size)
    return document


def print_document(job: PrintJob, printer: QPrinter) -> None:
    printer.setDocName(job.title)
    page_size = None
    if job.vertically_centered:
        page_size = printer.pageLayout().paintRect(QPageLayout.Unit.Point).size()
    document = build_text_document(job, page_size=page_size)
    document.print_(printer)
    LOGGER.info("Printed %s (%d chars)", job.title, len(job.content))


def _center_vertically(document: QTextDocument, page_size: QSizeF) -> None:
    # Measure unpaginated first; once a page height is set size() counts whole pages.
    document.setTextWidth(page_size.width())
    content_height = document.size().height()
    document.setPageSize(page_size)
    page_height = page_size.height()
    if content_height >= page_height:
        return
    root = document.rootFrame()
    frame_format = root.frameFormat()
    frame_format.setTopMargin(frame_format.topMargin() + (page_height - content_height) / 2)
    root.setFrameFormat(frame_format)


class QtPrintHandler:
    """Shows the platform print dialog and prints the accepted job."""

    __slots__ = ("_parent_provider",)

    def __init__(self, *, parent_provider: Callable[[], QWidget | None] | None = None) -> None:
        self._parent_provider = parent_provider

    def __call__(self, job: PrintJob) -> bool:
        parent = self._parent_provider() if self._parent_provider else None
        printer = QPrinter(QPrinter.PrinterMode.HighResolution)
        printer.setDocName(job.title)
        dialog = QPrintDialog(printer, parent)
        dialog.setWindowTitle(f"Print {job.title}")
        if dialog.exec() != int(QDialog.DialogCode.Accepted):
            return False
        print_document(job, printer)
        return True
