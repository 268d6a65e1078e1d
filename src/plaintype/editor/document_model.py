"""Document model owning the encoding state and the load/save pipelines.

:class:`TextDocument` is the one long-lived object per open file. The host
application drives it through small capability interfaces (``Loadable``,
``Savable``, ``Revertible``, ``Printable``) rather than subclassing a host
document class. User encoding actions talk to the save pipeline through the
:class:`~plaintype.editor.pending.PendingOperationQueue`: the directives they
enqueue are consumed, exactly once, by :meth:`TextDocument.prepare_save_dialog`
and :meth:`TextDocument.write` when the host's save-as flow runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol, runtime_checkable

from ..services.settings import Settings
from .change_tracking import ChangeTracker, UndoTracker, suspended
from .detector import EncodingDetector, EncodingPicker
from .encodings import UTF_8, TextEncoding, resolve_encoding
from .errors import LoadFailure, NoContentFailure, RevertFailure, SerializeFailure
from .pending import AccessoryMessage, EncodingOverride, PendingOperationQueue
from .presentation import PresentationSurface
from .storage import Location, Storage

__all__ = [
    "SAVE_WITH_ENCODING_MESSAGE",
    "EncodingDelegate",
    "SaveDialog",
    "PrintJob",
    "Loadable",
    "Savable",
    "Revertible",
    "Printable",
    "TextDocument",
]

LOGGER = logging.getLogger(__name__)

SAVE_WITH_ENCODING_MESSAGE = "Saving file with new encoding: {label}"

LocationLike = Location | Path | str


class EncodingDelegate(Protocol):
    """Observer told about encoding changes that reached storage."""

    def on_encoding_changed(self, document: "TextDocument", new_encoding: TextEncoding) -> None:
        ...


@runtime_checkable
class SaveDialog(Protocol):
    """The part of the host save dialog the document is allowed to touch."""

    def set_accessory_message(self, text: str) -> None:
        ...


@dataclass(slots=True, frozen=True)
class PrintJob:
    """Content and page options handed to the printing backend."""

    content: str
    title: str
    vertically_centered: bool = False


class Loadable(Protocol):
    def load(self, location: LocationLike) -> tuple[str, TextEncoding]:
        ...


class Savable(Protocol):
    def serialize(self) -> bytes:
        ...

    def write(self, location: LocationLike) -> None:
        ...

    def prepare_save_dialog(self, dialog: SaveDialog) -> bool:
        ...


class Revertible(Protocol):
    def revert(self, location: LocationLike | None = None) -> None:
        ...


class Printable(Protocol):
    def prepare_print_job(self) -> PrintJob:
        ...


class TextDocument:
    """A plain-text document and the encoding it is stored in."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        storage: Storage | None = None,
        detector: EncodingDetector | None = None,
        picker: EncodingPicker | None = None,
        tracker: ChangeTracker | None = None,
        surface: PresentationSurface | None = None,
        save_as_handler: Callable[[], bool] | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._detector = detector or EncodingDetector.from_settings(self._settings, storage)
        self._storage: Storage = storage or self._detector.storage
        self._picker = picker
        self._tracker: ChangeTracker = tracker if tracker is not None else UndoTracker()
        self._surface: PresentationSurface | None = None
        self._save_as_handler = save_as_handler
        self._buffered_text: str | None = None
        self._encoding = _default_encoding(self._settings)
        self._location: Location | None = None
        self._pending = PendingOperationQueue()
        self._delegates: list[EncodingDelegate] = []
        if surface is not None:
            self.attach_surface(surface)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def encoding(self) -> TextEncoding:
        """Encoding of the last successful load or save."""

        return self._encoding

    @property
    def buffered_text(self) -> str | None:
        return self._buffered_text

    @property
    def location(self) -> Location | None:
        return self._location

    @property
    def pending(self) -> PendingOperationQueue:
        return self._pending

    @property
    def surface(self) -> PresentationSurface | None:
        return self._surface

    @property
    def tracker(self) -> ChangeTracker:
        return self._tracker

    @property
    def is_dirty(self) -> bool:
        return self._tracker.is_dirty

    @property
    def display_name(self) -> str:
        if self._location is None:
            return self._settings.untitled_name
        return self._location.name

    @property
    def text(self) -> str:
        """Current text: the surface contents, or the buffered load when detached."""

        if self._surface is not None:
            return self._surface.get_text()
        return self._buffered_text or ""

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------
    def attach_surface(self, surface: PresentationSurface) -> None:
        """Bind the presentation surface and push any buffered text into it."""

        self._surface = surface
        self.flush()

    def detach_surface(self) -> None:
        self._surface = None

    def set_picker(self, picker: EncodingPicker | None) -> None:
        self._picker = picker

    def set_save_as_handler(self, handler: Callable[[], bool] | None) -> None:
        self._save_as_handler = handler

    def add_delegate(self, delegate: EncodingDelegate) -> None:
        if delegate not in self._delegates:
            self._delegates.append(delegate)

    def remove_delegate(self, delegate: EncodingDelegate) -> None:
        if delegate in self._delegates:
            self._delegates.remove(delegate)

    def close(self) -> None:
        """Drop transient state and detach every collaborator."""

        self.discard_pending()
        self._buffered_text = None
        self._surface = None
        self._delegates.clear()
        self._save_as_handler = None

    # ------------------------------------------------------------------
    # Load pipeline
    # ------------------------------------------------------------------
    def load(self, location: LocationLike) -> tuple[str, TextEncoding]:
        """Read ``location`` with automatic encoding detection.

        The decoded text is buffered until :meth:`flush`. Raises
        :class:`LoadFailure` without touching any state when the location is
        unreadable or undecodable.
        """

        target = Location.coerce(location)
        text, encoding = self._detector.detect(target)
        self._buffered_text = text
        self._encoding = encoding
        self._location = target
        LOGGER.info("Loaded %s as %s (%d chars)", target, encoding.label, len(text))
        return text, encoding

    def revert(self, location: LocationLike | None = None) -> None:
        """Reload from durable storage, discarding unsaved edits."""

        target = Location.coerce(location) if location is not None else self._location
        if target is None or not target.is_durable:
            LOGGER.warning("Refusing to revert from non-durable location %s", target)
            raise RevertFailure(details={"location": str(target) if target else None})
        self.load(target)
        self.flush()
        self._tracker.mark_clean()

    def reopen_with_encoding_override(self) -> TextEncoding | None:
        """Ask for an encoding until the stored bytes decode or the user cancels.

        Returns the adopted encoding, or ``None`` when nothing changed.
        """

        location = self._location
        if location is None:
            LOGGER.debug("Reopen requested for a document that was never stored")
            return None
        picker = self._require_picker()
        while True:
            result = picker.pick_encoding(self._encoding)
            if result.is_cancelled or result.encoding is None:
                LOGGER.debug("Encoding picker cancelled; keeping %s", self._encoding.label)
                return None
            try:
                text = self._detector.decode(location, result.encoding)
            except LoadFailure:
                continue
            self._buffered_text = text
            self._encoding = result.encoding
            self.flush()
            self._tracker.mark_clean()
            LOGGER.info("Reopened %s as %s", location, result.encoding.label)
            return result.encoding

    def flush(self) -> None:
        """Push buffered text to the surface with change tracking suspended."""

        if self._buffered_text is None or self._surface is None:
            return
        with suspended(self._tracker):
            self._surface.set_text(self._buffered_text)
        self._buffered_text = None

    # ------------------------------------------------------------------
    # Save pipeline
    # ------------------------------------------------------------------
    def serialize(self) -> bytes:
        """Encode the current text with :attr:`encoding`."""

        try:
            return self._encoding.encode(self.text)
        except UnicodeEncodeError as exc:
            raise SerializeFailure(
                message=f"The text cannot be saved as {self._encoding.label}",
                details={
                    "encoding": self._encoding.label,
                    "position": exc.start,
                    "character": exc.object[exc.start : exc.end],
                },
            ) from exc

    def write(self, location: LocationLike) -> None:
        """Serialize and persist the text, applying a pending encoding override.

        When anything fails the previous encoding is restored before the
        original exception propagates. A consumed override is not re-queued.
        Writing to a transient location keeps an existing durable location.
        """

        target = Location.coerce(location)
        previous = self._encoding
        override = self._pending.take_first(EncodingOverride)
        if override is not None:
            self._encoding = override.encoding
        try:
            data = self.serialize()
            self._storage.write_bytes(target, data)
        except Exception:
            if self._encoding != previous:
                LOGGER.warning(
                    "Write to %s failed; restoring encoding %s", target, previous.label
                )
            self._encoding = previous
            raise
        if target.is_durable or self._location is None:
            self._location = target
        LOGGER.info("Saved %s as %s (%d bytes)", target, self._encoding.label, len(data))
        if override is not None:
            self._notify_encoding_changed()

    def prepare_save_dialog(self, dialog: SaveDialog) -> bool:
        message = self._pending.take_first(AccessoryMessage)
        if message is not None:
            dialog.set_accessory_message(message.text)
        return True

    def save_with_encoding_override(self, new_encoding: TextEncoding | str) -> bool:
        """Queue an encoding switch and run the host's save-as flow."""

        encoding = resolve_encoding(new_encoding)
        if self._pending:
            LOGGER.warning("Discarding stale directives: %r", self._pending)
            self._pending.clear()
        self._pending.enqueue(AccessoryMessage(SAVE_WITH_ENCODING_MESSAGE.format(label=encoding.label)))
        self._pending.enqueue(EncodingOverride(encoding))
        LOGGER.debug("Queued encoding override to %s", encoding.label)
        if self._save_as_handler is None:
            return False
        return self._save_as_handler()

    def save_as_asking_for_encoding(self) -> bool:
        result = self._require_picker().pick_encoding(self._encoding)
        if result.is_cancelled or result.encoding is None:
            return False
        return self.save_with_encoding_override(result.encoding)

    def discard_pending(self) -> None:
        if self._pending:
            LOGGER.debug("Dropping pending directives: %r", self._pending)
        self._pending.clear()

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------
    def prepare_print_job(self) -> PrintJob:
        if self._surface is None:
            raise NoContentFailure(details={"document": self.display_name})
        return PrintJob(
            content=self._surface.get_text(),
            title=self.display_name,
            vertically_centered=False,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_picker(self) -> EncodingPicker:
        if self._picker is None:
            raise RuntimeError("No encoding picker is attached to this document")
        return self._picker

    def _notify_encoding_changed(self) -> None:
        for delegate in list(self._delegates):
            try:
                delegate.on_encoding_changed(self, self._encoding)
            except Exception:
                LOGGER.exception("Encoding delegate %r failed", delegate)


def _default_encoding(settings: Settings) -> TextEncoding:
    try:
        return resolve_encoding(settings.default_encoding)
    except LookupError:
        LOGGER.warning("Unknown default encoding %r; using UTF-8", settings.default_encoding)
        return UTF_8
