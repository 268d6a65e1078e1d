"""Single-use directives queued by user actions for the save pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator, TypeVar, Union

from .encodings import TextEncoding

__all__ = [
    "DirectiveKind",
    "AccessoryMessage",
    "EncodingOverride",
    "Directive",
    "PendingOperationQueue",
]


class DirectiveKind(Enum):
    """Tag identifying which slot a directive occupies."""

    ACCESSORY_MESSAGE = "accessory_message"
    ENCODING_OVERRIDE = "encoding_override"


@dataclass(slots=True, frozen=True)
class AccessoryMessage:
    """Informational text rendered in the next save dialog."""

    kind: ClassVar[DirectiveKind] = DirectiveKind.ACCESSORY_MESSAGE

    text: str


@dataclass(slots=True, frozen=True)
class EncodingOverride:
    """Encoding adopted by the next successful write."""

    kind: ClassVar[DirectiveKind] = DirectiveKind.ENCODING_OVERRIDE

    encoding: TextEncoding


Directive = Union[AccessoryMessage, EncodingOverride]
_D = TypeVar("_D", AccessoryMessage, EncodingOverride)


class PendingOperationQueue:
    """Holds at most one outstanding directive per kind.

    Each kind has its own slot, so :meth:`take_first` is a direct lookup. A
    sequence number per slot keeps iteration in enqueue order.
    """

    __slots__ = ("_slots", "_sequence")

    def __init__(self) -> None:
        self._slots: dict[DirectiveKind, tuple[int, Directive]] = {}
        self._sequence = 0

    def enqueue(self, directive: Directive) -> None:
        kind = directive.kind
        if kind in self._slots:
            raise ValueError(f"A {kind.value} directive is already pending")
        self._sequence += 1
        self._slots[kind] = (self._sequence, directive)

    def take_first(self, kind: type[_D]) -> _D | None:
        """Remove and return the pending directive of ``kind``, if any."""

        entry = self._slots.pop(kind.kind, None)
        if entry is None:
            return None
        return entry[1]  # type: ignore[return-value]

    def peek(self, kind: type[_D]) -> _D | None:
        entry = self._slots.get(kind.kind)
        if entry is None:
            return None
        return entry[1]  # type: ignore[return-value]

    def clear(self) -> None:
        self._slots.clear()

    def __len__(self) -> int:
        return len(self._slots)

    def __bool__(self) -> bool:
        return bool(self._slots)

    def __iter__(self) -> Iterator[Directive]:
        for _, directive in sorted(self._slots.values(), key=lambda entry: entry[0]):
            yield directive

    def __repr__(self) -> str:
        return f"PendingOperationQueue({list(self)!r})"
