"""Structured logging setup shared by every component."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

import structlog

_LOG_STREAM: Optional[TextIO] = None


def configure_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> None:
    """
    Configure structlog for the process.

    Events go to stderr unless ``log_file`` is given, in which case they are
    appended to that file so the interactive menu is not interleaved with logs.
    """
    global _LOG_STREAM

    logger_factory = _stderr_logger
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        if _LOG_STREAM is not None and not _LOG_STREAM.closed:
            _LOG_STREAM.close()
        _LOG_STREAM = log_file.open("a", encoding="utf-8")
        logger_factory = structlog.WriteLoggerFactory(file=_LOG_STREAM)

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(
                key_order=["timestamp", "level", "component", "event"],
                drop_missing=True,
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )


def close_log_file() -> None:
    """Close the log file opened by ``configure_logging`` and log to stderr again."""
    global _LOG_STREAM

    if _LOG_STREAM is None:
        return
    if not _LOG_STREAM.closed:
        _LOG_STREAM.close()
    _LOG_STREAM = None
    structlog.configure(logger_factory=_stderr_logger)


def _stderr_logger(*_args):
    # sys.stderr is looked up per logger, not at configure time
    return structlog.PrintLogger(file=sys.stderr)


def get_logger(name: str):
    return structlog.get_logger(component=name)
