"""Application bootstrap for the plaintype editor."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Callable, Sequence

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QApplication, QMessageBox, QPlainTextEdit, QWidget

from .editor.detector import EncodingDetector
from .editor.document_model import TextDocument
from .editor.errors import DocumentError
from .editor.storage import LocalStorage
from .services.settings import Settings, SettingsStore, logging_level
from .ui.document_controller import DocumentController
from .utils import logging as logging_utils
from .widgets import (
    QtChangeTracker,
    QtEncodingPicker,
    QtPrintHandler,
    QtSaveDialogProvider,
    QtTextSurface,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class EditorSession:
    """Everything :func:`build_session` wires together for one open document."""

    editor: QPlainTextEdit
    document: TextDocument
    controller: DocumentController

    def refresh_title(self) -> None:
        self.editor.setWindowTitle(f"{self.document.display_name}[*] - plaintype")
        self.editor.setWindowModified(self.document.is_dirty)


def configure_logging(settings: Settings, *, force: bool = False) -> Path:
    """Configure logging at the level the settings ask for."""

    level = logging_level(settings)
    log_path = logging_utils.setup_logging(level, force=force)
    logging_utils.capture_qt_messages()
    _LOGGER.debug("Logging configured (level=%s, file=%s)", logging.getLevelName(level), log_path)
    return log_path


def load_settings(path: Path | None = None, *, store: SettingsStore | None = None) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load()
    except OSError as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def build_session(
    settings: Settings,
    *,
    settings_store: SettingsStore | None = None,
    parent: QWidget | None = None,
) -> EditorSession:
    """Create the editor widget and connect a document and controller to it."""

    editor = QPlainTextEdit(parent)
    editor.setObjectName("document_editor")

    def window() -> QWidget:
        return editor.window()

    storage = LocalStorage(atomic=settings.atomic_writes)
    document = TextDocument(
        settings=settings,
        storage=storage,
        detector=EncodingDetector.from_settings(settings, storage),
        picker=QtEncodingPicker(parent_provider=window),
        tracker=QtChangeTracker(editor),
        surface=QtTextSurface(editor),
    )
    controller = DocumentController(
        document,
        save_dialogs=QtSaveDialogProvider(parent_provider=window),
        print_handler=QtPrintHandler(parent_provider=window),
        error_reporter=_message_box_reporter(window),
        settings_store=settings_store,
        settings=settings,
    )
    session = EditorSession(editor=editor, document=document, controller=controller)
    _install_actions(session)
    editor.document().modificationChanged.connect(lambda _modified: session.refresh_title())
    session.refresh_title()
    return session


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the ``plaintype`` console script."""

    args = _parse_args(argv)
    settings_path = Path(args.settings_path).expanduser() if args.settings_path else None
    store = SettingsStore(settings_path)
    settings = load_settings(store=store)
    if args.debug:
        settings = replace(settings, debug_logging=True)

    if args.dump_settings:
        print(json.dumps(asdict(settings), indent=2, sort_keys=True))
        return 0

    configure_logging(settings)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    app.setApplicationName("plaintype")
    session = build_session(settings, settings_store=store)

    target = args.path or (settings.last_open_file if args.reopen_last else None)
    if target:
        session.controller.open(target)
        session.refresh_title()

    session.editor.resize(800, 600)
    session.editor.show()
    return app.exec()


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="plaintype", description="Plain-text editor")
    parser.add_argument("path", nargs="?", help="File to open")
    parser.add_argument("--settings-path", help="Settings file to use instead of ~/.plaintype/settings.json")
    parser.add_argument("--reopen-last", action="store_true", help="Open the most recently used file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--dump-settings", action="store_true", help="Print the effective settings and exit")
    return parser.parse_args(argv)


def _install_actions(session: EditorSession) -> None:
    controller = session.controller
    specs: tuple[tuple[str, str, QKeySequence, Callable[[], object]], ...] = (
        ("save_action", "Save", QKeySequence(QKeySequence.StandardKey.Save), controller.save),
        ("save_as_action", "Save As...", QKeySequence(QKeySequence.StandardKey.SaveAs), controller.save_as),
        ("revert_action", "Revert to Saved", QKeySequence("Ctrl+Shift+R"), controller.revert),
        ("print_action", "Print...", QKeySequence(QKeySequence.StandardKey.Print), controller.print_document),
        (
            "reopen_encoding_action",
            "Reopen with Encoding...",
            QKeySequence("Ctrl+Shift+E"),
            controller.reopen_with_encoding,
        ),
        (
            "save_encoding_action",
            "Save with Encoding...",
            QKeySequence("Ctrl+Alt+S"),
            controller.save_as_with_encoding,
        ),
    )
    for name, text, shortcut, handler in specs:
        action = QAction(text, session.editor)
        action.setObjectName(name)
        action.setShortcut(shortcut)
        action.triggered.connect(_after(handler, session.refresh_title))
        session.editor.addAction(action)


def _after(handler: Callable[[], object], follow_up: Callable[[], None]) -> Callable[..., None]:
    def _run(*_args: object) -> None:
        handler()
        follow_up()

    return _run


def _message_box_reporter(parent_provider: Callable[[], QWidget]) -> Callable[[str, Exception], None]:
    def _report(title: str, exc: Exception) -> None:
        message = exc.message if isinstance(exc, DocumentError) else str(exc)
        log_path = logging_utils.get_log_path()
        if log_path is not None:
            message = f"{message}\n\nDetails were written to {log_path}."
        QMessageBox.warning(parent_provider(), title, message)

    return _report


if __name__ == "__main__":  # pragma: no cover - manual launch
    raise SystemExit(main())
