"""Storage locations and the byte-level storage port."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Protocol, runtime_checkable

from ..utils import file_io

__all__ = [
    "FILE_SCHEME",
    "MEMORY_SCHEME",
    "AUTOSAVE_SCHEME",
    "Location",
    "Storage",
    "LocalStorage",
]

LOGGER = logging.getLogger(__name__)

FILE_SCHEME = "file"
MEMORY_SCHEME = "memory"
AUTOSAVE_SCHEME = "autosave"


@dataclass(slots=True, frozen=True)
class Location:
    """Reference to where a document's bytes live.

    Only ``file`` locations are durable; ``memory`` and ``autosave`` targets
    may disappear with the process and cannot be reverted to.
    """

    scheme: str
    target: str

    @classmethod
    def file(cls, path: Path | str) -> "Location":
        return cls(FILE_SCHEME, str(Path(path).expanduser()))

    @classmethod
    def memory(cls, name: str) -> "Location":
        return cls(MEMORY_SCHEME, name)

    @classmethod
    def autosave(cls, name: str) -> "Location":
        return cls(AUTOSAVE_SCHEME, name)

    @classmethod
    def coerce(cls, value: "Location | Path | str") -> "Location":
        """Accept a location or a filesystem path."""

        if isinstance(value, Location):
            return value
        return cls.file(value)

    @property
    def is_durable(self) -> bool:
        return self.scheme == FILE_SCHEME

    @property
    def path(self) -> Path:
        """Return the filesystem path of a durable location."""

        if not self.is_durable:
            raise ValueError(f"{self.scheme} location has no filesystem path")
        return Path(self.target)

    @property
    def name(self) -> str:
        return PurePath(self.target).name or self.target

    def __str__(self) -> str:
        return f"{self.scheme}:{self.target}"


@runtime_checkable
class Storage(Protocol):
    """Reads and writes raw document bytes."""

    def read_bytes(self, location: Location) -> bytes:
        ...

    def write_bytes(self, location: Location, data: bytes) -> None:
        ...


class LocalStorage:
    """Filesystem-backed storage with an in-process area for transient targets."""

    def __init__(self, *, atomic: bool = True) -> None:
        self._atomic = atomic
        self._transient: dict[Location, bytes] = {}

    def read_bytes(self, location: Location) -> bytes:
        if location.is_durable:
            return file_io.read_bytes(location.path)
        try:
            return self._transient[location]
        except KeyError:
            raise FileNotFoundError(str(location)) from None

    def write_bytes(self, location: Location, data: bytes) -> None:
        if location.is_durable:
            file_io.write_bytes(location.path, data, atomic=self._atomic)
        else:
            self._transient[location] = bytes(data)
        LOGGER.debug("Wrote %d bytes to %s", len(data), location)

    def discard(self, location: Location) -> None:
        """Forget a transient target; durable files are left alone."""

        self._transient.pop(location, None)
