"""Logging setup for the plaintype application."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

__all__ = ["setup_logging", "capture_qt_messages", "get_log_path"]

LOG_FILE_NAME = "plaintype.log"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_LOG_DIR = Path.home() / ".plaintype" / "logs"
_CHARDET_LOGGERS: tuple[str, ...] = ("chardet", "chardet.charsetprober", "chardet.universaldetector")
_LOG_PATH: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Send root logging to a rotating ``plaintype.log`` and, optionally, stderr.

    Repeated calls are no-ops returning the active log file unless ``force``
    is set, which rebuilds the handlers (used when settings raise the level).
    """

    global _LOG_PATH
    if _LOG_PATH is not None and not force:
        return _LOG_PATH

    log_path = _resolve_log_dir(log_dir) / LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    # chardet logs every candidate it scores at DEBUG.
    chardet_level = max(level, logging.WARNING)
    for name in _CHARDET_LOGGERS:
        logging.getLogger(name).setLevel(chardet_level)

    _LOG_PATH = log_path
    return log_path


def capture_qt_messages() -> None:
    """Route Qt's own debug/warning output into the ``PySide6`` logger."""

    from PySide6.QtCore import QtMsgType, qInstallMessageHandler

    level_map = {
        QtMsgType.QtDebugMsg: logging.DEBUG,
        QtMsgType.QtInfoMsg: logging.INFO,
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }
    qt_logger = logging.getLogger("PySide6")

    def _handler(mode, context, message):  # type: ignore[no-untyped-def]
        del context
        qt_logger.log(level_map.get(mode, logging.INFO), message)

    qInstallMessageHandler(_handler)


def get_log_path() -> Path | None:
    """Return the active log file, or ``None`` before :func:`setup_logging` ran."""

    return _LOG_PATH


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    env_override = os.environ.get("PLAINTYPE_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()
