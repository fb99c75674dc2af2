"""
Structured JSON Logging Module.

Every service receives a ``StructuredLogger`` by injection.  Records are
written as one JSON object per line so order, cart and auth events can
be grepped and parsed after the fact.

Handlers are installed once, on the ``storefront`` parent logger, by
:func:`configure_logging`.  Each ``StructuredLogger`` wraps a child of
that logger and propagates to it, so every module shares one console
stream and one rotating file.
"""

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO

ROOT_LOGGER_NAME = "storefront"

# ``extra`` keys containing any of these are written as "***".
_SENSITIVE_KEY_PARTS: tuple[str, ...] = ("password", "token", "secret", "anon_key", "api_key")

_configure_lock = threading.Lock()


class JSONFormatter(logging.Formatter):
    """Formats log records as structured JSON objects.

    Each log entry contains:
        - timestamp  (ISO-8601, UTC)
        - level
        - logger_name
        - message
        - extra      (fields passed via the ``extra`` kwarg, credentials masked)
        - exception  (formatted traceback, when present)
    """

    # Attribute names every LogRecord carries; anything else came from ``extra``.
    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        extra_fields = {
            key: _mask(key, value)
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra_fields:
            entry["extra"] = extra_fields

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        # Decimal, datetime and enum values fall back to str().
        return json.dumps(entry, ensure_ascii=False, default=str)


def _mask(key: str, value: Any) -> Any:
    lowered = key.lower()
    if any(part in lowered for part in _SENSITIVE_KEY_PARTS):
        return "***"
    return value


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    max_bytes: Optional[int] = None,
    backup_count: Optional[int] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Install the console and file handlers on the ``storefront`` logger.

    Safe to call more than once; only the first call installs handlers.
    Unset file parameters come from ``AppConfig``.  When the log file
    cannot be opened the application keeps logging to the console.

    Returns
    -------
    logging.Logger
        The configured parent logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    with _configure_lock:
        if root.handlers:
            return root

        root.setLevel(level)
        root.propagate = False
        formatter = JSONFormatter()

        stream_handler = logging.StreamHandler(stream or sys.stdout)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

        if log_file is None or max_bytes is None or backup_count is None:
            # Lazy import: config logs through the stdlib logger at import time.
            from storefront.config import get_config
            cfg = get_config()
            log_file = log_file or cfg.LOG_FILE
            max_bytes = max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES
            backup_count = backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT

        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError as exc:
            root.warning(
                "Could not open log file '%s': %s. Logging to the console only.",
                log_file,
                exc,
            )
    return root


class StructuredLogger:
    """Injectable wrapper around one child of the ``storefront`` logger.

    Usage::

        log = get_logger("checkout")
        log.info("Order placed", extra={"order_id": order.id})
    """

    def __init__(self, name: str = ROOT_LOGGER_NAME, level: Optional[int] = None) -> None:
        configure_logging()
        self._logger: logging.Logger = logging.getLogger(name)
        if level is not None:
            self._logger.setLevel(level)

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = ROOT_LOGGER_NAME) -> StructuredLogger:
    """Return a ``StructuredLogger`` under the ``storefront`` namespace.

    ``get_logger("checkout")`` and ``get_logger("storefront.checkout")``
    name the same logger.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return StructuredLogger(name=name)
