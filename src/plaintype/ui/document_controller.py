"""Host-side document lifecycle built on top of :class:`TextDocument`.

The controller plays the part of the application framework: it turns menu
actions (open, save, save as, revert, print, reopen/save with encoding) into
calls on the document model, runs the save dialog between
``prepare_save_dialog`` and ``write``, and reports failures instead of
letting them escape into the event loop.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Protocol

from ..editor.document_model import PrintJob, SaveDialog, TextDocument
from ..editor.encodings import TextEncoding
from ..editor.errors import DocumentError
from ..editor.storage import Location
from ..services.settings import Settings, SettingsStore, remember_recent_file

__all__ = [
    "SaveDialogSession",
    "SaveDialogProvider",
    "DocumentController",
]

LOGGER = logging.getLogger(__name__)

ErrorReporter = Callable[[str, Exception], None]
PrintHandler = Callable[[PrintJob], bool]


class SaveDialogSession(SaveDialog, Protocol):
    """A save dialog that has been built but not shown yet."""

    def run(self) -> Path | None:
        """Show the dialog modally; return the chosen path or ``None`` on cancel."""
        ...


class SaveDialogProvider(Protocol):
    """Builds save dialogs for the controller."""

    def create_save_dialog(
        self,
        *,
        start_dir: Path | None = None,
        suggested_name: str | None = None,
    ) -> SaveDialogSession:
        ...


class DocumentController:
    """Drives one document through the host application's lifecycle."""

    __slots__ = (
        "_document",
        "_save_dialogs",
        "_print_handler",
        "_error_reporter",
        "_settings_store",
        "_settings",
    )

    def __init__(
        self,
        document: TextDocument,
        *,
        save_dialogs: SaveDialogProvider | None = None,
        print_handler: PrintHandler | None = None,
        error_reporter: ErrorReporter | None = None,
        settings_store: SettingsStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            document: The document this controller owns.
            save_dialogs: Provider used by save-as flows.
            print_handler: Callable rendering a print job; returns ``False`` if cancelled.
            error_reporter: Callable receiving a title and the failure to show the user.
            settings_store: Store used to persist the recent-files list.
            settings: Current settings; loaded from ``settings_store`` when omitted.
        """
        self._document = document
        self._save_dialogs = save_dialogs
        self._print_handler = print_handler
        self._error_reporter = error_reporter
        self._settings_store = settings_store
        if settings is None and settings_store is not None:
            settings = settings_store.load()
        self._settings = settings
        document.set_save_as_handler(self.save_as)

    @property
    def document(self) -> TextDocument:
        return self._document

    @property
    def settings(self) -> Settings | None:
        return self._settings

    # ------------------------------------------------------------------
    # Lifecycle actions
    # ------------------------------------------------------------------
    def open(self, path: Path | str | Location) -> bool:
        document = self._document
        try:
            document.load(path)
        except DocumentError as exc:
            self._report("Could not load file", exc)
            return False
        document.flush()
        document.tracker.mark_clean()
        self._remember(document.location)
        return True

    def save(self) -> bool:
        """Write to the current durable location, or ask where to save."""

        location = self._document.location
        if location is None or not location.is_durable:
            return self.save_as()
        return self._write(location)

    def save_as(self) -> bool:
        document = self._document
        if self._save_dialogs is None:
            LOGGER.warning("Save As requested without a save dialog provider")
            document.discard_pending()
            return False
        dialog = self._save_dialogs.create_save_dialog(
            start_dir=self._start_dir(),
            suggested_name=document.display_name,
        )
        document.prepare_save_dialog(dialog)
        path = dialog.run()
        if path is None:
            LOGGER.debug("Save As cancelled")
            # An unconsumed override must not leak into a later plain save.
            document.discard_pending()
            return False
        return self._write(Location.file(path))

    def revert(self) -> bool:
        try:
            self._document.revert()
        except DocumentError as exc:
            self._report("Could not restore file", exc)
            return False
        return True

    def print_document(self) -> bool:
        try:
            job = self._document.prepare_print_job()
        except DocumentError as exc:
            self._report("Could not print", exc)
            return False
        if self._print_handler is None:
            LOGGER.warning("Print requested without a print handler")
            return False
        return bool(self._print_handler(job))

    def reopen_with_encoding(self) -> TextEncoding | None:
        return self._document.reopen_with_encoding_override()

    def save_as_with_encoding(self) -> bool:
        return self._document.save_as_asking_for_encoding()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _write(self, location: Location) -> bool:
        document = self._document
        try:
            document.write(location)
        except (DocumentError, OSError) as exc:
            self._report("Could not save file", exc)
            return False
        document.tracker.mark_clean()
        self._remember(location)
        return True

    def _remember(self, location: Location | None) -> None:
        if location is None or not location.is_durable or self._settings is None:
            return
        self._settings = remember_recent_file(self._settings, location.path)
        if self._settings_store is None:
            return
        try:
            self._settings_store.save(self._settings)
        except OSError as exc:
            LOGGER.warning("Failed to persist recent files: %s", exc)

    def _start_dir(self) -> Path | None:
        location = self._document.location
        if location is not None and location.is_durable:
            return location.path.parent
        if self._settings is not None:
            for entry in self._settings.recent_files:
                candidate = Path(entry).expanduser()
                if candidate.parent.is_dir():
                    return candidate.parent
        return Path.home()

    def _report(self, title: str, exc: Exception) -> None:
        LOGGER.warning("%s: %s", title, exc)
        if self._error_reporter is not None:
            self._error_reporter(title, exc)
