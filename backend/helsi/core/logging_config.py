"""
Logging setup for the Helsi backend.

Console output is colored and human-readable; the optional log file is
rotated and written as one JSON object per line. Structured fields are passed
with ``extra={"extra_fields": {...}}`` and end up as top-level JSON keys.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

SENSITIVE_KEYS = ('password', 'token', 'secret', 'authorization', 'api_key', 'api-key')

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PLAIN_FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "multipart")


class ColoredFormatter(logging.Formatter):
    """Adds ANSI colors to the level name."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        # Work on a copy so the file handler still sees the bare level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname:8s}{self.RESET}"
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """Formats a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            log_data.update(filter_sensitive_data(extra_fields))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(config: Any) -> None:
    """
    Configure the root logger from a settings object.

    Args:
        config: Object exposing the ``log_*`` settings fields
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if config.log_console_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if config.log_file_enabled:
        log_path = Path(config.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # 5 MB per file, 3 backups
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        if config.log_json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(PLAIN_FILE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(
        f"Logging initialized: level={config.log_level.upper()}, "
        f"console={config.log_console_enabled}, file={config.log_file_enabled}"
    )


def filter_sensitive_data(data: Any, sensitive_keys: Optional[Iterable[str]] = None) -> Any:
    """
    Mask values whose key looks like a credential.

    Args:
        data: dict, list or primitive to filter
        sensitive_keys: Key fragments to mask (defaults to SENSITIVE_KEYS)

    Returns:
        A filtered copy with masked values replaced by "***FILTERED***"
    """
    keys = tuple(sensitive_keys) if sensitive_keys is not None else SENSITIVE_KEYS

    if isinstance(data, dict):
        return {
            key: "***FILTERED***" if any(fragment in str(key).lower() for fragment in keys)
            else filter_sensitive_data(value, keys)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [filter_sensitive_data(item, keys) for item in data]
    return data


def truncate_large_data(data: str, max_length: int = 2000) -> str:
    """Cut long strings (model prompts, document text) before logging them."""
    if len(data) <= max_length:
        return data
    return data[:max_length] + f"... (truncated, total length: {len(data)})"
