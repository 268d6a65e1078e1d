"""Settings dataclasses and persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = [
    "Settings",
    "SettingsStore",
    "DEFAULT_FALLBACK_ENCODINGS",
    "remember_recent_file",
    "logging_level",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".plaintype"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_ENV_OVERRIDES: Mapping[str, str] = {
    "PLAINTYPE_DEFAULT_ENCODING": "default_encoding",
    "PLAINTYPE_UNTITLED_NAME": "untitled_name",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "PLAINTYPE_USE_CHARDET": "use_chardet",
    "PLAINTYPE_ATOMIC_WRITES": "atomic_writes",
    "PLAINTYPE_DEBUG_LOGGING": "debug_logging",
}
_FLOAT_ENV_OVERRIDES: Mapping[str, str] = {
    "PLAINTYPE_DETECTION_CONFIDENCE": "detection_confidence",
}
_INT_ENV_OVERRIDES: Mapping[str, str] = {
    "PLAINTYPE_MAX_RECENT_FILES": "max_recent_files",
}
_LIST_ENV_OVERRIDES: Mapping[str, str] = {
    "PLAINTYPE_FALLBACK_ENCODINGS": "fallback_encodings",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
DEFAULT_FALLBACK_ENCODINGS: tuple[str, ...] = ("cp1252", "latin-1")


@dataclass(slots=True)
class Settings:
    """User-configurable settings persisted between sessions."""

    default_encoding: str = "utf-8"
    fallback_encodings: list[str] = field(default_factory=lambda: list(DEFAULT_FALLBACK_ENCODINGS))
    use_chardet: bool = True
    detection_confidence: float = 0.7
    atomic_writes: bool = True
    untitled_name: str = "Untitled"
    recent_files: list[str] = field(default_factory=list)
    max_recent_files: int = 10
    last_open_file: str | None = None
    debug_logging: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings from disk, applying CLI/environment overrides when present."""

        payload = self._read_payload()
        settings = Settings()
        if payload:
            data = _filter_fields(payload)
            try:
                settings = Settings(**data)
            except TypeError as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = Settings()
            LOGGER.debug("Settings loaded from %s (keys=%s)", self._path, sorted(data))

        version_mismatch = bool(payload) and payload.get("version") != _SETTINGS_VERSION
        if version_mismatch:
            try:
                self.save(settings)
            except OSError as exc:  # pragma: no cover - defensive guard
                LOGGER.warning("Failed to migrate settings payload: %s", exc)

        if overrides:
            settings = self._apply_overrides(settings, overrides, source="CLI")

        return self._apply_env_overrides(settings)

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with atomic file writes."""

        payload = self._serialize(settings)
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _serialize(self, settings: Settings) -> Dict[str, Any]:
        data = asdict(settings)
        data["version"] = _SETTINGS_VERSION
        return data

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            payload = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Settings file %s does not contain an object", self._path)
            return {}
        return payload

    def _apply_overrides(
        self,
        settings: Settings,
        overrides: Mapping[str, Any],
        *,
        source: str = "runtime",
    ) -> Settings:
        allowed = {field.name for field in fields(Settings)}
        filtered: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in allowed or value is None:
                continue
            filtered[key] = value
        metadata_override = filtered.get("metadata")
        if isinstance(metadata_override, Mapping):
            merged_metadata = dict(settings.metadata or {})
            merged_metadata.update(metadata_override)
            filtered["metadata"] = merged_metadata
        if filtered:
            LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
            settings = replace(settings, **filtered)
        return settings

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        for env_name, field_name in _INT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = int(value, 10)
            except ValueError:
                LOGGER.warning(
                    "Environment override %s=%s is not a valid integer",
                    env_name,
                    value,
                )
        for env_name, field_name in _FLOAT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = float(value)
            except ValueError:
                LOGGER.warning(
                    "Environment override %s=%s is not a valid float", env_name, value
                )
        for env_name, field_name in _LIST_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            overrides[field_name] = [item.strip() for item in value.split(",") if item.strip()]
        if overrides:
            settings = self._apply_overrides(settings, overrides, source="environment")
        return settings


def remember_recent_file(settings: Settings, path: Path | str) -> Settings:
    """Move ``path`` to the front of the recent-files list, trimming the tail."""

    entry = str(Path(path).expanduser())
    recent = [item for item in settings.recent_files if item != entry]
    recent.insert(0, entry)
    limit = max(0, settings.max_recent_files)
    return replace(settings, recent_files=recent[:limit], last_open_file=entry)


def logging_level(settings: Settings) -> int:
    """Return the root log level to pass to ``setup_logging``."""

    return logging.DEBUG if settings.debug_logging else logging.INFO


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {field.name for field in fields(Settings)}
    result: Dict[str, Any] = {}
    for key, value in payload.items():
        if key not in allowed:
            continue
        result[key] = value
    return result
