"""Error types raised by the document pipelines.

Every failure carries a machine-readable ``error_code`` and the user-facing
message the host surfaces in its alert. Storage write failures are not
wrapped: :meth:`TextDocument.write` re-raises them unchanged after rolling
back the encoding.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class ErrorCode:
    """Constants for error codes used by the document pipelines."""

    LOAD_FAILED = "load_failed"
    REVERT_FAILED = "revert_failed"
    SERIALIZE_FAILED = "serialize_failed"
    NO_CONTENT = "no_content"


@dataclass
class DocumentError(Exception):
    """Base exception class for all document pipeline errors.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for logging and status reporting."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


@dataclass
class LoadFailure(DocumentError):
    """The location could not be read or no candidate encoding decoded it."""

    error_code: str = field(default=ErrorCode.LOAD_FAILED)
    message: str = field(default="Could not load file")
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class RevertFailure(DocumentError):
    """Revert was requested against a location that cannot be re-read."""

    error_code: str = field(default=ErrorCode.REVERT_FAILED)
    message: str = field(default="Could not restore file")
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class SerializeFailure(DocumentError):
    """The text contains characters outside the active encoding's repertoire."""

    error_code: str = field(default=ErrorCode.SERIALIZE_FAILED)
    message: str = field(default="Could not encode text")
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class NoContentFailure(DocumentError):
    """Printing was requested while no presentation surface is attached."""

    error_code: str = field(default=ErrorCode.NO_CONTENT)
    message: str = field(default="Could not retrieve data to print")
    details: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "ErrorCode",
    "DocumentError",
    "LoadFailure",
    "RevertFailure",
    "SerializeFailure",
    "NoContentFailure",
]
