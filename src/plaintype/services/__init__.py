"""Service layer helpers (settings persistence)."""

from .settings import (
    DEFAULT_FALLBACK_ENCODINGS,
    Settings,
    SettingsStore,
    logging_level,
    remember_recent_file,
)

__all__ = [
    "DEFAULT_FALLBACK_ENCODINGS",
    "Settings",
    "SettingsStore",
    "logging_level",
    "remember_recent_file",
]
