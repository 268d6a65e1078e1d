"""Shared pytest fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from plaintype.editor.detector import EncodingDetector
from plaintype.editor.document_model import TextDocument
from plaintype.editor.encodings import LATIN_1
from plaintype.editor.storage import LocalStorage
from plaintype.services.settings import Settings

from tests.helpers import RecordingSurface, RecordingTracker


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("PLAINTYPE_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def storage() -> LocalStorage:
    return LocalStorage(atomic=False)


@pytest.fixture
def detector(storage: LocalStorage) -> EncodingDetector:
    """Deterministic detector: UTF-8, then Latin-1, no statistical guessing."""

    return EncodingDetector(storage, fallbacks=(LATIN_1,), use_chardet=False)


@pytest.fixture
def tracker() -> RecordingTracker:
    return RecordingTracker()


@pytest.fixture
def surface(tracker: RecordingTracker) -> RecordingSurface:
    return RecordingSurface(tracker=tracker)


@pytest.fixture
def document(storage: LocalStorage, detector: EncodingDetector, tracker: RecordingTracker) -> TextDocument:
    return TextDocument(settings=Settings(), storage=storage, detector=detector, tracker=tracker)


@pytest.fixture
def utf8_file(tmp_path: Path) -> Path:
    target = tmp_path / "hello.txt"
    target.write_bytes("hello".encode("utf-8"))
    return target
