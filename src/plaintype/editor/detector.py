"""Encoding detection and the interactive encoding-picker port."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Protocol, runtime_checkable

import chardet

from ..utils import file_io
from .encodings import UTF_8, TextEncoding, resolve_encoding
from .errors import LoadFailure
from .storage import LocalStorage, Location, Storage

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..services.settings import Settings

__all__ = [
    "PickStatus",
    "PickResult",
    "EncodingPicker",
    "EncodingDetector",
]

LOGGER = logging.getLogger(__name__)


class PickStatus(Enum):
    CHOSEN = "chosen"
    CANCELLED = "cancelled"


@dataclass(slots=True, frozen=True)
class PickResult:
    """Outcome of presenting the encoding picker."""

    status: PickStatus
    encoding: TextEncoding | None = None

    @classmethod
    def chosen(cls, encoding: TextEncoding) -> "PickResult":
        return cls(PickStatus.CHOSEN, encoding)

    @classmethod
    def cancelled(cls) -> "PickResult":
        return cls(PickStatus.CANCELLED)

    @property
    def is_cancelled(self) -> bool:
        return self.status is PickStatus.CANCELLED


@runtime_checkable
class EncodingPicker(Protocol):
    """Asks the user for an encoding; blocks until they choose or cancel."""

    def pick_encoding(self, current: TextEncoding | None = None) -> PickResult:
        ...


class EncodingDetector:
    """Decodes stored bytes, guessing the encoding when none is forced.

    Candidates are tried in order: the encoding named by a byte-order mark
    (or UTF-16 recognised from its NUL-byte pattern when there is no mark),
    UTF-8, chardet's guess (when confident enough), then the configured
    fallbacks. The first one that decodes strictly wins.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        *,
        fallbacks: Iterable[TextEncoding | str] = (),
        use_chardet: bool = True,
        confidence_threshold: float = 0.7,
    ) -> None:
        self._storage: Storage = storage or LocalStorage()
        self._fallbacks = tuple(resolve_encoding(item) for item in fallbacks)
        self._use_chardet = use_chardet
        self._confidence_threshold = confidence_threshold

    @classmethod
    def from_settings(cls, settings: Settings, storage: Storage | None = None) -> "EncodingDetector":
        fallbacks: list[TextEncoding] = []
        for name in settings.fallback_encodings:
            try:
                fallbacks.append(resolve_encoding(name))
            except LookupError:
                LOGGER.warning("Ignoring unknown fallback encoding %r", name)
        return cls(
            storage or LocalStorage(atomic=settings.atomic_writes),
            fallbacks=fallbacks,
            use_chardet=settings.use_chardet,
            confidence_threshold=settings.detection_confidence,
        )

    @property
    def storage(self) -> Storage:
        return self._storage

    def detect(self, location: Location) -> tuple[str, TextEncoding]:
        """Return the decoded text of ``location`` and the encoding that decoded it."""

        raw = self._read(location)
        for candidate in self.candidates(raw):
            try:
                text = candidate.decode(raw)
            except UnicodeDecodeError:
                continue
            LOGGER.debug("Decoded %s as %s", location, candidate.label)
            return file_io.strip_bom(text), candidate
        LOGGER.warning("No candidate encoding could decode %s", location)
        raise LoadFailure(details={"location": str(location), "reason": "undecodable"})

    def decode(self, location: Location, encoding: TextEncoding) -> str:
        """Decode ``location`` with a user-forced ``encoding``."""

        raw = self._read(location)
        try:
            text = encoding.decode(raw)
        except UnicodeDecodeError as exc:
            LOGGER.info("%s is not valid %s", location, encoding.label)
            raise LoadFailure(
                details={"location": str(location), "encoding": encoding.label, "reason": "undecodable"}
            ) from exc
        return file_io.strip_bom(text)

    def candidates(self, raw: bytes) -> list[TextEncoding]:
        ordered: list[TextEncoding] = []

        def _add(encoding: TextEncoding | None) -> None:
            if encoding is not None and encoding not in ordered:
                ordered.append(encoding)

        bom_codec = file_io.detect_bom(raw)
        if bom_codec is not None:
            _add(resolve_encoding(bom_codec))
        else:
            wide_codec = file_io.sniff_utf16(raw)
            if wide_codec is not None:
                _add(resolve_encoding(wide_codec))
        _add(UTF_8)
        if self._use_chardet and raw:
            _add(self._guess(raw))
        for fallback in self._fallbacks:
            _add(fallback)
        return ordered

    def _guess(self, raw: bytes) -> TextEncoding | None:
        result = chardet.detect(raw)
        name = result.get("encoding")
        confidence = result.get("confidence") or 0.0
        if not name or confidence < self._confidence_threshold:
            return None
        try:
            return resolve_encoding(name)
        except LookupError:
            LOGGER.debug("chardet suggested unknown codec %r", name)
            return None

    def _read(self, location: Location) -> bytes:
        try:
            return self._storage.read_bytes(location)
        except OSError as exc:
            LOGGER.warning("Could not read %s: %s", location, exc)
            raise LoadFailure(details={"location": str(location), "reason": "unreadable"}) from exc
