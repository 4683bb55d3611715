"""
Shared Logger

Logging setup for the fulfillment core. Use cases and stores log through
``ContextLogger`` so every line about an order carries its identifiers
(order_id, action, actor_role, error_code...) as structured context.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Context keys worth repeating on a console line, in display order
CONSOLE_CONTEXT_KEYS = ("order_id", "action", "actor_role", "courier_id", "error_code")


class JSONFormatter(logging.Formatter):
    """One JSON object per record; context goes under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data["extra"] = extra_data

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Plain text formatter that appends the order context as ``key=value`` pairs."""

    def __init__(self):
        super().__init__(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra_data = getattr(record, "extra_data", None) or {}
        pairs = [f"{key}={extra_data[key]}" for key in CONSOLE_CONTEXT_KEYS if extra_data.get(key) is not None]
        return f"{line} [{' '.join(pairs)}]" if pairs else line


class ColoredFormatter(ConsoleFormatter):
    """Console formatter with the level name colored."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JSONFormatter,
    "colored": ColoredFormatter,
    "plain": ConsoleFormatter,
}


class ContextLogger:
    """
    Logger carrying a fixed context.

    Context fields travel in ``record.extra_data``; keyword arguments passed
    to a single call are merged over the logger's own context.
    """

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        self._logger = logging.getLogger(name)
        self._context = context or {}

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def context(self) -> dict[str, Any]:
        return dict(self._context)

    def with_context(self, **kwargs) -> "ContextLogger":
        """New logger with ``kwargs`` added to this one's context."""
        return ContextLogger(self._logger.name, {**self._context, **kwargs})

    def _log(self, level: int, message: str, **kwargs) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, extra={"extra_data": {**self._context, **kwargs}})

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, **kwargs)


def configure_logging(
    level: str = "INFO",
    format_type: str = "colored",
    log_file: str | None = None,
) -> None:
    """
    Configure root logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Console format, one of ``FORMATTERS``
        log_file: Optional path; the file always receives JSON lines
    """
    numeric_level = getattr(logging, level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(FORMATTERS.get(format_type, ConsoleFormatter)())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)


def get_logger(name: str, context: dict[str, Any] | None = None) -> ContextLogger:
    return ContextLogger(name, context)


def get_use_case_logger(use_case_name: str) -> ContextLogger:
    """Logger for an application use case (``use_case.<name>``)."""
    return get_logger(f"use_case.{use_case_name}", {"component": "use_case", "use_case": use_case_name})


def get_repository_logger(repo_name: str) -> ContextLogger:
    """Logger for a persistence adapter (``repository.<name>``)."""
    return get_logger(f"repository.{repo_name}", {"component": "repository", "repository": repo_name})
