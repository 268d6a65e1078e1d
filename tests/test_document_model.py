"""Tests for the TextDocument load/save pipelines."""

from __future__ import annotations

from pathlib import Path

import pytest

from plaintype.editor.change_tracking import UndoTracker
from plaintype.editor.detector import EncodingDetector
from plaintype.editor.document_model import PrintJob, TextDocument
from plaintype.editor.encodings import (
    LATIN_1,
    UTF_8,
    UTF_16,
    UTF_32,
    WINDOWS_1252,
    TextEncoding,
)
from plaintype.editor.errors import (
    LoadFailure,
    NoContentFailure,
    RevertFailure,
    SerializeFailure,
)
from plaintype.editor.pending import AccessoryMessage, EncodingOverride
from plaintype.editor.presentation import TextBuffer
from plaintype.editor.storage import LocalStorage, Location
from plaintype.services.settings import Settings

from tests.helpers import (
    ExplodingSurface,
    FailingStorage,
    RecordingDelegate,
    RecordingSurface,
    RecordingTracker,
    ScriptedPicker,
    StubSaveDialog,
)


def _document_with(storage: LocalStorage, tracker: RecordingTracker, **kwargs) -> TextDocument:
    detector = EncodingDetector(storage, fallbacks=(LATIN_1,), use_chardet=False)
    return TextDocument(storage=storage, detector=detector, tracker=tracker, **kwargs)


# ----------------------------------------------------------------------
# Load pipeline & flush
# ----------------------------------------------------------------------
def test_new_document_defaults_to_utf8(document: TextDocument) -> None:
    assert document.encoding == UTF_8
    assert document.buffered_text is None
    assert document.location is None
    assert document.display_name == "Untitled"


def test_default_encoding_comes_from_settings() -> None:
    assert TextDocument(settings=Settings(default_encoding="latin-1")).encoding == LATIN_1
    assert TextDocument(settings=Settings(default_encoding="bogus")).encoding == UTF_8


def test_load_then_flush_scenario(
    document: TextDocument, surface: RecordingSurface, tracker: RecordingTracker, utf8_file: Path
) -> None:
    text, encoding = document.load(utf8_file)

    assert (text, encoding) == ("hello", UTF_8)
    assert document.buffered_text == "hello"
    assert document.encoding == UTF_8
    assert surface.received == []

    document.attach_surface(surface)

    assert surface.received == ["hello"]
    assert surface.suspended_during_set == [True]
    assert document.buffered_text is None
    assert tracker.calls == ["suspend", "resume"]
    assert tracker.depth == 0


def test_flush_without_buffered_text_is_noop(
    document: TextDocument, surface: RecordingSurface, tracker: RecordingTracker
) -> None:
    document.attach_surface(surface)
    document.flush()
    document.flush()

    assert surface.received == []
    assert tracker.calls == []


def test_flush_resumes_tracking_when_surface_fails(
    storage: LocalStorage, tracker: RecordingTracker, utf8_file: Path
) -> None:
    document = _document_with(storage, tracker)
    document.load(utf8_file)

    with pytest.raises(RuntimeError):
        document.attach_surface(ExplodingSurface())

    assert tracker.calls == ["suspend", "resume"]
    assert document.buffered_text == "hello"


def test_flush_does_not_record_undo_history(storage: LocalStorage, utf8_file: Path) -> None:
    tracker = UndoTracker()
    buffer = TextBuffer(tracker=tracker)
    detector = EncodingDetector(storage, use_chardet=False)
    document = TextDocument(storage=storage, detector=detector, tracker=tracker)
    document.load(utf8_file)

    document.attach_surface(buffer)

    assert buffer.get_text() == "hello"
    assert tracker.undo_depth == 0
    assert not document.is_dirty
    assert tracker.is_recording

    buffer.set_text("hello world")

    assert document.is_dirty
    assert buffer.undo()
    assert buffer.get_text() == "hello"


def test_text_buffer_listeners_see_flush_and_undo(storage: LocalStorage, utf8_file: Path) -> None:
    tracker = UndoTracker()
    buffer = TextBuffer(tracker=tracker)
    seen: list[str] = []
    buffer.add_listener(seen.append)
    document = TextDocument(
        storage=storage, detector=EncodingDetector(storage, use_chardet=False), tracker=tracker
    )
    document.attach_surface(buffer)

    document.load(utf8_file)
    document.flush()
    buffer.set_text("edited")
    buffer.undo()
    buffer.remove_listener(seen.append)
    buffer.set_text("unobserved")

    assert seen == ["hello", "edited", "hello"]


def test_load_failure_leaves_state_untouched(
    document: TextDocument, utf8_file: Path, tmp_path: Path
) -> None:
    document.load(utf8_file)

    with pytest.raises(LoadFailure):
        document.load(tmp_path / "missing.txt")

    assert document.buffered_text == "hello"
    assert document.encoding == UTF_8
    assert document.location == Location.file(utf8_file)


def test_display_name_follows_location(document: TextDocument, utf8_file: Path) -> None:
    document.load(utf8_file)

    assert document.display_name == "hello.txt"


# ----------------------------------------------------------------------
# Revert
# ----------------------------------------------------------------------
def test_revert_reloads_durable_file(
    document: TextDocument, surface: RecordingSurface, tracker: RecordingTracker, utf8_file: Path
) -> None:
    document.load(utf8_file)
    document.attach_surface(surface)
    surface.text = "edited"
    tracker.mark_dirty()
    utf8_file.write_bytes("on disk".encode("utf-8"))

    document.revert()

    assert surface.text == "on disk"
    assert not document.is_dirty
    assert tracker.calls[-1] == "mark_clean"


@pytest.mark.parametrize(
    "location",
    [Location.memory("scratch"), Location.autosave("hello.txt")],
)
def test_revert_non_durable_location_fails_without_mutation(
    document: TextDocument, utf8_file: Path, location: Location
) -> None:
    document.load(utf8_file)

    with pytest.raises(RevertFailure) as excinfo:
        document.revert(location)

    assert excinfo.value.message == "Could not restore file"
    assert document.buffered_text == "hello"
    assert document.encoding == UTF_8


def test_revert_without_location_fails(document: TextDocument) -> None:
    with pytest.raises(RevertFailure):
        document.revert()

    assert document.buffered_text is None
    assert document.encoding == UTF_8


# ----------------------------------------------------------------------
# Reopen with encoding override
# ----------------------------------------------------------------------
def _latin_file(tmp_path: Path) -> Path:
    target = tmp_path / "latin.txt"
    target.write_bytes("smörgåsbord".encode("latin-1"))
    return target


@pytest.mark.parametrize("failures", [0, 1, 3])
def test_reopen_retries_until_a_decodable_choice(
    storage: LocalStorage,
    tracker: RecordingTracker,
    surface: RecordingSurface,
    tmp_path: Path,
    failures: int,
) -> None:
    target = _latin_file(tmp_path)
    picker = ScriptedPicker([UTF_8] * failures + [LATIN_1])
    document = _document_with(storage, tracker, picker=picker, surface=surface)
    document.load(target)
    tracker.mark_dirty()

    adopted = document.reopen_with_encoding_override()

    assert adopted == LATIN_1
    assert picker.calls == failures + 1
    assert document.encoding == LATIN_1
    assert surface.text == "smörgåsbord"
    assert not document.is_dirty


def test_reopen_cancel_leaves_state_unchanged(
    storage: LocalStorage, tracker: RecordingTracker, surface: RecordingSurface, tmp_path: Path
) -> None:
    target = _latin_file(tmp_path)
    picker = ScriptedPicker([None])
    document = _document_with(storage, tracker, picker=picker, surface=surface)
    document.load(target)
    received_before = list(surface.received)

    assert document.reopen_with_encoding_override() is None

    assert picker.calls == 1
    assert document.encoding == LATIN_1
    assert surface.received == received_before


def test_reopen_offers_current_encoding_as_default(
    storage: LocalStorage, tracker: RecordingTracker, utf8_file: Path
) -> None:
    picker = ScriptedPicker([WINDOWS_1252])
    document = _document_with(storage, tracker, picker=picker)
    document.load(utf8_file)

    document.reopen_with_encoding_override()

    assert picker.currents == [UTF_8]
    assert document.encoding == WINDOWS_1252
    assert document.buffered_text == "hello"


def test_reopen_without_location_never_prompts(document: TextDocument) -> None:
    picker = ScriptedPicker([LATIN_1])
    document.set_picker(picker)

    assert document.reopen_with_encoding_override() is None
    assert picker.calls == 0


def test_reopen_without_picker_is_an_error(document: TextDocument, utf8_file: Path) -> None:
    document.load(utf8_file)

    with pytest.raises(RuntimeError, match="picker"):
        document.reopen_with_encoding_override()


# ----------------------------------------------------------------------
# Save pipeline
# ----------------------------------------------------------------------
def test_serialize_uses_active_encoding(document: TextDocument) -> None:
    document.attach_surface(RecordingSurface("café"))

    assert document.serialize() == "café".encode("utf-8")


def test_serialize_reports_unrepresentable_characters(document: TextDocument, tmp_path: Path) -> None:
    document.load(_latin_file(tmp_path))
    surface = RecordingSurface()
    document.attach_surface(surface)
    surface.text = "snowman ☃"

    with pytest.raises(SerializeFailure) as excinfo:
        document.serialize()

    assert excinfo.value.details["character"] == "☃"
    assert excinfo.value.details["position"] == 8


def test_write_without_override_keeps_encoding_and_stays_quiet(
    document: TextDocument, tmp_path: Path
) -> None:
    delegate = RecordingDelegate()
    document.add_delegate(delegate)
    document.attach_surface(RecordingSurface("plain"))
    target = tmp_path / "out.txt"

    document.write(target)

    assert target.read_bytes() == b"plain"
    assert document.encoding == UTF_8
    assert document.location == Location.file(target)
    assert delegate.events == []


def test_save_with_encoding_override_scenario(document: TextDocument, tmp_path: Path) -> None:
    delegate = RecordingDelegate()
    document.add_delegate(delegate)
    document.attach_surface(RecordingSurface("Grüße"))
    dialog = StubSaveDialog(tmp_path / "out.txt")
    target = tmp_path / "out.txt"

    def save_as() -> bool:
        assert list(document.pending) == [
            AccessoryMessage("Saving file with new encoding: Latin-1"),
            EncodingOverride(LATIN_1),
        ]
        document.prepare_save_dialog(dialog)
        assert document.pending.peek(AccessoryMessage) is None
        document.write(dialog.run())
        return True

    document.set_save_as_handler(save_as)

    assert document.save_with_encoding_override(LATIN_1) is True

    assert dialog.accessory_messages == ["Saving file with new encoding: Latin-1"]
    assert len(document.pending) == 0
    assert document.encoding == LATIN_1
    assert target.read_bytes() == "Grüße".encode("latin-1")
    assert delegate.events == [(document, LATIN_1)]


def test_prepare_save_dialog_without_message_leaves_dialog_alone(document: TextDocument) -> None:
    dialog = StubSaveDialog(None)

    assert document.prepare_save_dialog(dialog) is True
    assert dialog.accessory_messages == []


def test_write_failure_rolls_back_encoding(tmp_path: Path, tracker: RecordingTracker) -> None:
    storage = FailingStorage()
    document = _document_with(storage, tracker)
    document.attach_surface(RecordingSurface("text"))
    delegate = RecordingDelegate()
    document.add_delegate(delegate)
    document.pending.enqueue(EncodingOverride(UTF_16))

    with pytest.raises(PermissionError):
        document.write(tmp_path / "out.txt")

    assert document.encoding == UTF_8
    assert delegate.events == []
    assert document.location is None
    assert document.pending.peek(EncodingOverride) is None


def test_retry_after_failed_write_uses_previous_encoding(
    tmp_path: Path, tracker: RecordingTracker
) -> None:
    storage = FailingStorage()
    document = _document_with(storage, tracker)
    document.attach_surface(RecordingSurface("text"))
    document.pending.enqueue(EncodingOverride(UTF_32))
    target = tmp_path / "out.txt"

    with pytest.raises(PermissionError):
        document.write(target)
    storage.fail_writes = False
    document.write(target)

    assert document.encoding == UTF_8
    assert target.read_bytes() == b"text"


def test_serialize_failure_during_override_rolls_back(document: TextDocument, tmp_path: Path) -> None:
    document.attach_surface(RecordingSurface("日本語"))
    delegate = RecordingDelegate()
    document.add_delegate(delegate)
    document.pending.enqueue(EncodingOverride(LATIN_1))
    target = tmp_path / "out.txt"

    with pytest.raises(SerializeFailure):
        document.write(target)

    assert document.encoding == UTF_8
    assert not target.exists()
    assert delegate.events == []


def test_delegate_errors_do_not_undo_a_successful_write(
    document: TextDocument, tmp_path: Path
) -> None:
    class BrokenDelegate:
        def on_encoding_changed(self, document, new_encoding):
            raise RuntimeError("status bar gone")

    survivor = RecordingDelegate()
    document.add_delegate(BrokenDelegate())
    document.add_delegate(survivor)
    document.attach_surface(RecordingSurface("abc"))
    document.pending.enqueue(EncodingOverride(WINDOWS_1252))

    document.write(tmp_path / "out.txt")

    assert document.encoding == WINDOWS_1252
    assert survivor.events == [(document, WINDOWS_1252)]


def test_save_with_encoding_override_replaces_stale_directives(document: TextDocument) -> None:
    document.save_with_encoding_override(LATIN_1)

    assert document.save_with_encoding_override("utf-16") is False

    assert list(document.pending) == [
        AccessoryMessage("Saving file with new encoding: UTF-16"),
        EncodingOverride(UTF_16),
    ]


def test_save_as_asking_for_encoding(document: TextDocument) -> None:
    calls: list[str] = []
    document.set_save_as_handler(lambda: calls.append("save_as") or True)
    document.set_picker(ScriptedPicker([None, WINDOWS_1252]))

    assert document.save_as_asking_for_encoding() is False
    assert calls == []
    assert len(document.pending) == 0

    assert document.save_as_asking_for_encoding() is True
    assert calls == ["save_as"]
    assert document.pending.peek(EncodingOverride) == EncodingOverride(WINDOWS_1252)


@pytest.mark.parametrize(
    ("encoding", "text"),
    [
        (UTF_8, "hello wörld ✓"),
        (UTF_16, "hello wörld ✓"),
        (TextEncoding("utf-16-le"), "hello wörld ✓"),
        (TextEncoding("utf-16-be"), "line one\nline two"),
        (UTF_32, "line one\nline two"),
        (LATIN_1, "smörgåsbord"),
        (TextEncoding("utf-8-sig"), "with a mark"),
    ],
)
def test_write_then_load_round_trip(
    storage: LocalStorage,
    tracker: RecordingTracker,
    tmp_path: Path,
    encoding: TextEncoding,
    text: str,
) -> None:
    target = tmp_path / "round.txt"
    writer = _document_with(storage, tracker, surface=RecordingSurface(text))
    writer.pending.enqueue(EncodingOverride(encoding))
    writer.write(target)

    reader = _document_with(storage, RecordingTracker())
    loaded_text, loaded_encoding = reader.load(target)

    assert loaded_text == text
    assert loaded_encoding == encoding


def test_write_to_transient_location(document: TextDocument, storage: LocalStorage) -> None:
    document.attach_surface(RecordingSurface("draft"))
    location = Location.autosave("draft")

    document.write(location)

    assert storage.read_bytes(location) == b"draft"
    assert document.location == location
    with pytest.raises(RevertFailure):
        document.revert()


def test_autosave_write_keeps_durable_location(
    document: TextDocument, storage: LocalStorage, utf8_file: Path
) -> None:
    surface = RecordingSurface()
    document.attach_surface(surface)
    document.load(utf8_file)
    document.flush()
    surface.set_text("unsaved edits")
    autosave = Location.autosave(utf8_file.name)

    document.write(autosave)

    assert storage.read_bytes(autosave) == b"unsaved edits"
    assert document.location == Location.file(utf8_file)
    assert document.display_name == "hello.txt"
    assert utf8_file.read_bytes() == b"hello"

    document.revert()

    assert surface.get_text() == "hello"


# ----------------------------------------------------------------------
# Printing & lifecycle
# ----------------------------------------------------------------------
def test_prepare_print_job_requires_surface(document: TextDocument) -> None:
    with pytest.raises(NoContentFailure) as excinfo:
        document.prepare_print_job()

    assert excinfo.value.message == "Could not retrieve data to print"


def test_prepare_print_job_uses_surface_and_display_name(
    document: TextDocument, utf8_file: Path
) -> None:
    document.load(utf8_file)
    surface = RecordingSurface()
    document.attach_surface(surface)
    surface.text = "printed text"

    job = document.prepare_print_job()

    assert job == PrintJob(content="printed text", title="hello.txt", vertically_centered=False)


def test_close_drops_transient_state(document: TextDocument, utf8_file: Path) -> None:
    document.load(utf8_file)
    document.add_delegate(RecordingDelegate())
    document.save_with_encoding_override(LATIN_1)

    document.close()

    assert document.buffered_text is None
    assert document.surface is None
    assert len(document.pending) == 0
