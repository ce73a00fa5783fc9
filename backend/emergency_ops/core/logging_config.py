"""
Logging setup: colored console output for development, JSON lines for
log shippers, and an optional rotating log file.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import LoggingConfig, get_config

# Record attributes attached through ``extra=`` by the incident engine
CONTEXT_FIELDS = ("incident_id", "user_id", "action")

NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "asyncio", "sqlalchemy")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ColorFormatter(logging.Formatter):
    """Console formatter coloring the whole line by level."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        return f"{color}{text}{self.RESET}" if color else text


def _console_handler(config: LoggingConfig) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if config.json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ColorFormatter(fmt=config.format, datefmt=config.date_format))
    return handler


def _file_handler(config: LoggingConfig, file_path: str) -> logging.Handler:
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        filename=file_path,
        maxBytes=config.max_file_size,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    # No color codes in files
    if config.json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=config.format, datefmt=config.date_format))
    return handler


def setup_logging(
    config: Optional[LoggingConfig] = None,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        config: Logging configuration, defaults to the application config
        log_file: Log file path, overrides ``config.file_path``
    """
    config = config or get_config().logging
    level = config.level.value

    handlers: List[logging.Handler] = [_console_handler(config)]
    file_path = log_file or config.file_path
    if file_path:
        handlers.append(_file_handler(config, file_path))
    for handler in handlers:
        handler.setLevel(level)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured at {level}")


def get_logger(name: str, extra: Optional[Dict[str, Any]] = None) -> logging.Logger | logging.LoggerAdapter:
    """Logger for ``name``, bound to ``extra`` context when given."""
    logger = logging.getLogger(name)
    if extra:
        return logging.LoggerAdapter(logger, extra)
    return logger
