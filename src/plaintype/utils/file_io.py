"""Byte-level file IO helpers used by the storage layer."""

from __future__ import annotations

import codecs
import os
import tempfile
from pathlib import Path

__all__ = [
    "read_bytes",
    "write_bytes",
    "detect_bom",
    "strip_bom",
    "sniff_utf16",
    "ensure_parent_dir",
]

# Longest marks first so UTF-32 LE is not mistaken for UTF-16 LE.
_BOM_MAP: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def read_bytes(path: Path | str) -> bytes:
    """Return the raw contents of ``path``."""

    return Path(path).expanduser().read_bytes()


def write_bytes(path: Path | str, data: bytes, *, atomic: bool = True) -> Path:
    """Write ``data`` to ``path``, replacing the target atomically by default."""

    target = ensure_parent_dir(path)
    if not atomic:
        with target.open("wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        return target

    descriptor, tmp_name = tempfile.mkstemp(
        dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(descriptor, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    finally:
        if os.path.exists(tmp_name):  # pragma: no cover - cleanup path
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
    return target


def detect_bom(raw: bytes) -> str | None:
    """Return the codec implied by a byte-order mark at the start of ``raw``."""

    for bom, encoding in _BOM_MAP:
        if raw.startswith(bom):
            return encoding
    return None


def sniff_utf16(raw: bytes, *, sample_size: int = 4096) -> str | None:
    """Guess the byte order of BOM-less UTF-16 from where its NUL bytes fall.

    Mostly-Latin UTF-16 text has a NUL in every other byte: odd offsets for
    little-endian, even offsets for big-endian. Both sides of the pattern are
    valid UTF-8, so this must run before UTF-8 is attempted.
    """

    sample = raw[:sample_size]
    if len(sample) < 2:
        return None
    sample = sample[: len(sample) - len(sample) % 2]
    units = len(sample) // 2
    even_nuls = sample[0::2].count(0)
    odd_nuls = sample[1::2].count(0)
    if odd_nuls * 4 >= units and even_nuls * 10 <= odd_nuls:
        return "utf-16-le"
    if even_nuls * 4 >= units and odd_nuls * 10 <= even_nuls:
        return "utf-16-be"
    return None


def strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


def ensure_parent_dir(path: Path | str) -> Path:
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    return target
