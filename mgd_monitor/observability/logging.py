"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    level: int = logging.INFO,
    output: TextIO | None = None,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the application.

    Logs go to stderr by default so stdout carries only line protocol.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: the current stderr).
        json_format: Whether to use JSON format (default: True).
    """
    output = output or sys.stderr
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )


def parse_log_level(name: str) -> int:
    """Translate a level name such as ``debug`` into a logging level.

    Args:
        name: Level name, case-insensitive.

    Returns:
        Logging level number.

    Raises:
        ValueError: If the name is not a known level.
    """
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {name}"
        raise ValueError(msg)
    return level


def bind_pass_context(pass_id: str) -> None:
    """Bind the gather pass identifier to all subsequent log messages.

    Args:
        pass_id: Unique pass identifier.
    """
    structlog.contextvars.bind_contextvars(pass_id=pass_id)


def clear_pass_context() -> None:
    """Clear the gather pass identifier from log messages."""
    structlog.contextvars.unbind_contextvars("pass_id")
