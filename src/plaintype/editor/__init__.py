"""Editor package containing the document model and its pipelines."""

from .document_model import PrintJob, TextDocument
from .encodings import KNOWN_ENCODINGS, TextEncoding, resolve_encoding
from .errors import DocumentError, LoadFailure, NoContentFailure, RevertFailure, SerializeFailure
from .storage import LocalStorage, Location

__all__ = [
    "KNOWN_ENCODINGS",
    "DocumentError",
    "LoadFailure",
    "LocalStorage",
    "Location",
    "NoContentFailure",
    "PrintJob",
    "RevertFailure",
    "SerializeFailure",
    "TextDocument",
    "TextEncoding",
    "resolve_encoding",
]
