"""Structured logging configuration using structlog."""

import logging
import sys
from pathlib import Path

import structlog

from medication_reminder.config import Settings


def _build_handlers(log_dir: str | None) -> list[logging.Handler]:
    """stdout always; combined.log and error.log when a log directory is set."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)

        handlers.append(logging.FileHandler(directory / "combined.log", encoding="utf-8"))

        error_handler = logging.FileHandler(directory / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    return handlers


def configure_logging(settings: Settings) -> None:
    """Configure structured logging for the application."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        handlers=_build_handlers(settings.log_dir),
        level=level,
        force=True,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if settings.is_development:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        # JSONRenderer cannot serialize exc_info itself
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    # Configure structlog
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
