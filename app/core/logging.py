"""
Structured logging configuration.
Every module logs through a StructuredLogger so extra fields end up as k=v pairs.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from app.core.config import settings


_RESERVED_ATTRS = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
    'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'message',
    'timestamp', 'taskName',
})

# selenium logs every webdriver command at DEBUG
NOISY_LOGGERS = ("selenium", "urllib3", "WDM")


class StructuredLogger:
    """Structured logger with consistent formatting and levels."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def debug(self, message: str, **kwargs):
        """Log debug message with structured data."""
        self.logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with structured data."""
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with structured data."""
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, exc: Optional[Exception] = None, **kwargs):
        """Log error message with structured data."""
        if exc:
            self.logger.error(message, exc_info=exc, extra=kwargs)
        else:
            self.logger.error(message, extra=kwargs)


class StructuredFormatter(logging.Formatter):
    """Formatter that appends extra fields as `key=value` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, 'timestamp'):
            record.timestamp = self.formatTime(record, self.default_time_format)

        base_format = f"[{record.timestamp}] {record.levelname} {record.name}: {record.getMessage()}"

        extra_fields = [
            f"{key}={value}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        ]
        if extra_fields:
            base_format = f"{base_format} | {' | '.join(extra_fields)}"

        if record.exc_info:
            base_format = f"{base_format}\n{self.formatException(record.exc_info)}"

        return base_format


def configure_logging(
    level: str = "INFO",
    format_type: str = "structured",
    enable_console: bool = True,
    enable_file: bool = False,
    log_file: Optional[str] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Replace the root handlers with console and/or file handlers.

    `format_type` is "structured" (k=v extras) or "simple". Loggers named in
    `quiet` are capped at WARNING.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    formatter = (
        StructuredFormatter()
        if format_type == "structured"
        else logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    handlers: List[logging.Handler] = []
    if enable_console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if enable_file and log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance for the given name."""
    return StructuredLogger(name)


app_logger = get_logger("app")
api_logger = get_logger("api")
store_logger = get_logger("store")
export_logger = get_logger("export")


def init_app_logging():
    """Initialize application logging based on settings."""
    log_config = {
        "level": settings.LOG_LEVEL,
        "format_type": "structured",
        "enable_console": True,
        "enable_file": settings.LOG_TO_FILE,
        "log_file": settings.LOG_FILE_PATH,
    }

    configure_logging(**log_config)
    app_logger.info("Application logging initialized", **log_config)
