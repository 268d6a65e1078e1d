"""Text encoding identifiers and the catalogue offered to users."""

from __future__ import annotations

import codecs
from dataclasses import dataclass, field

__all__ = [
    "TextEncoding",
    "UTF_8",
    "UTF_8_BOM",
    "UTF_16",
    "UTF_32",
    "LATIN_1",
    "WINDOWS_1252",
    "KNOWN_ENCODINGS",
    "resolve_encoding",
]


def _normalize_codec(name: str) -> str:
    return codecs.lookup(name).name


@dataclass(slots=True, frozen=True)
class TextEncoding:
    """Opaque identifier for a character encoding.

    Two identifiers are equal when they name the same Python codec, whatever
    alias or label was used to build them.
    """

    codec: str
    label: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "codec", _normalize_codec(self.codec))
        if not self.label:
            object.__setattr__(self, "label", self.codec.upper())

    def encode(self, text: str) -> bytes:
        return text.encode(self.codec)

    def decode(self, data: bytes) -> str:
        return data.decode(self.codec)

    def __str__(self) -> str:
        return self.label


UTF_8 = TextEncoding("utf-8", "UTF-8")
UTF_8_BOM = TextEncoding("utf-8-sig", "UTF-8 with BOM")
UTF_16 = TextEncoding("utf-16", "UTF-16")
UTF_32 = TextEncoding("utf-32", "UTF-32")
LATIN_1 = TextEncoding("latin-1", "Latin-1")
WINDOWS_1252 = TextEncoding("cp1252", "Windows-1252")

KNOWN_ENCODINGS: tuple[TextEncoding, ...] = (
    UTF_8,
    UTF_8_BOM,
    UTF_16,
    TextEncoding("utf-16-le", "UTF-16 Little Endian"),
    TextEncoding("utf-16-be", "UTF-16 Big Endian"),
    UTF_32,
    TextEncoding("ascii", "ASCII"),
    LATIN_1,
    TextEncoding("iso8859-15", "Latin-9"),
    WINDOWS_1252,
    TextEncoding("mac-roman", "Mac OS Roman"),
    TextEncoding("cp1251", "Cyrillic (Windows-1251)"),
    TextEncoding("koi8-r", "Cyrillic (KOI8-R)"),
    TextEncoding("shift_jis", "Japanese (Shift JIS)"),
    TextEncoding("euc-jp", "Japanese (EUC)"),
    TextEncoding("gb18030", "Chinese Simplified (GB 18030)"),
    TextEncoding("big5", "Chinese Traditional (Big 5)"),
    TextEncoding("euc-kr", "Korean (EUC)"),
)
_BY_CODEC: dict[str, TextEncoding] = {encoding.codec: encoding for encoding in KNOWN_ENCODINGS}


def resolve_encoding(value: TextEncoding | str) -> TextEncoding:
    """Return the catalogue entry for ``value``, or a new identifier for unknown codecs.

    Raises ``LookupError`` when Python has no codec by that name.
    """

    if isinstance(value, TextEncoding):
        return value
    codec = _normalize_codec(value)
    known = _BY_CODEC.get(codec)
    if known is not None:
        return known
    return TextEncoding(codec)
