"""Logging configuration for the ViRA services.

All application loggers live under the "vira" namespace. The API process
also routes the uvicorn loggers through the same handlers, and keeps the
HTTP client libraries used by the OpenAI SDK at WARNING unless debugging.
Log lines never carry the project scope text itself; use ``query_fields``
to describe a query.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

APP_LOGGER = "vira"
SERVER_LOGGERS = ("uvicorn",)
CLIENT_LOGGERS = ("openai", "httpx", "httpcore")

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3


class _ViraHandler:
    """Marker mixin for handlers installed by setup_logging."""


class _ConsoleHandler(_ViraHandler, logging.StreamHandler):
    pass


class _FileHandler(_ViraHandler, RotatingFileHandler):
    pass


def _reset(logger: logging.Logger) -> None:
    for handler in [h for h in logger.handlers if isinstance(h, _ViraHandler)]:
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """Configure logging for the application and the API server.

    Safe to call more than once; handlers from an earlier call are replaced.

    Args:
        level: Logging level name; defaults to settings.log_level
        log_file: Optional path for a rotating log file; defaults to settings.log_file
        format_string: Optional custom format string

    Returns:
        The "vira" logger
    """
    if level is None or log_file is None:
        from vira.settings import settings

        level = level or settings.log_level
        log_file = log_file or settings.log_file

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DATE_FORMAT)

    handlers = [_ConsoleHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _FileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)

    for name in (APP_LOGGER,) + SERVER_LOGGERS:
        logger = logging.getLogger(name)
        _reset(logger)
        logger.setLevel(numeric_level)
        for handler in handlers:
            logger.addHandler(handler)

    # Request-level chatter from the model client
    client_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(client_level)

    return logging.getLogger(APP_LOGGER)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., "ai.ranker", "chat.service")

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{APP_LOGGER}.{name}")


def query_fields(category: str, project_scope: str) -> str:
    """Loggable description of a match query: category and scope length only."""
    return f"category={category} scope_len={len(project_scope or '')}"
