"""Shared test helpers and stub classes.

Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from plaintype.editor.detector import PickResult
from plaintype.editor.encodings import TextEncoding
from plaintype.editor.storage import LocalStorage, Location


class RecordingTracker:
    """Change tracker that logs every call in order."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self._dirty = False
        self.depth = 0

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def suspend(self) -> None:
        self.depth += 1
        self.calls.append("suspend")

    def resume(self) -> None:
        self.depth -= 1
        self.calls.append("resume")

    def mark_clean(self) -> None:
        self._dirty = False
        self.calls.append("mark_clean")

    def mark_dirty(self) -> None:
        self._dirty = True
        self.calls.append("mark_dirty")


class RecordingSurface:
    """Surface remembering what it received and whether tracking was suspended."""

    def __init__(self, text: str = "", *, tracker: RecordingTracker | None = None) -> None:
        self.text = text
        self.received: list[str] = []
        self.suspended_during_set: list[bool] = []
        self._tracker = tracker

    def get_text(self) -> str:
        return self.text

    def set_text(self, text: str) -> None:
        self.received.append(text)
        if self._tracker is not None:
            self.suspended_during_set.append(self._tracker.depth > 0)
        self.text = text


class ExplodingSurface(RecordingSurface):
    def set_text(self, text: str) -> None:
        raise RuntimeError("widget destroyed")


class ScriptedPicker:
    """Picker returning queued results; counts how often it was shown."""

    def __init__(self, results: Iterable[TextEncoding | None]) -> None:
        self._results = list(results)
        self.calls = 0
        self.currents: list[TextEncoding | None] = []

    def pick_encoding(self, current: TextEncoding | None = None) -> PickResult:
        self.calls += 1
        self.currents.append(current)
        if not self._results:
            return PickResult.cancelled()
        choice = self._results.pop(0)
        if choice is None:
            return PickResult.cancelled()
        return PickResult.chosen(choice)


class FailingStorage(LocalStorage):
    """Local storage whose writes fail until ``fail_writes`` is cleared."""

    def __init__(self) -> None:
        super().__init__(atomic=False)
        self.fail_writes = True
        self.writes: list[Location] = []

    def write_bytes(self, location: Location, data: bytes) -> None:
        self.writes.append(location)
        if self.fail_writes:
            raise PermissionError(f"read-only volume: {location}")
        super().write_bytes(location, data)


class RecordingDelegate:
    def __init__(self) -> None:
        self.events: list[tuple[object, TextEncoding]] = []

    def on_encoding_changed(self, document: object, new_encoding: TextEncoding) -> None:
        self.events.append((document, new_encoding))


class StubSaveDialog:
    """Save dialog returning a preset path (``None`` simulates Cancel)."""

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self.accessory_messages: list[str] = []
        self.ran = False

    def set_accessory_message(self, text: str) -> None:
        self.accessory_messages.append(text)

    def run(self) -> Path | None:
        self.ran = True
        return self._path


class StubSaveDialogProvider:
    def __init__(self, *paths: Path | None) -> None:
        self._paths = list(paths)
        self.dialogs: list[StubSaveDialog] = []
        self.requests: list[dict] = []

    def create_save_dialog(self, *, start_dir=None, suggested_name=None) -> StubSaveDialog:
        self.requests.append({"start_dir": start_dir, "suggested_name": suggested_name})
        path = self._paths.pop(0) if self._paths else None
        dialog = StubSaveDialog(path)
        self.dialogs.append(dialog)
        return dialog
