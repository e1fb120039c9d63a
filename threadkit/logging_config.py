"""Structured logging for threadkit.

Library modules only ever call ``get_logger(__name__)`` and emit
``event_name, key=value`` pairs. Rendering is left to the application,
which calls ``configure_logging()`` directly or ``configure_from_env()``
to read the ``THREADKIT_LOG_*`` variables:

- ``THREADKIT_LOG_LEVEL``: DEBUG, INFO, WARNING, ERROR or CRITICAL
- ``THREADKIT_LOG_JSON``: render one JSON object per line when truthy
- ``THREADKIT_LOG_FILE``: append to this file instead of stderr

Reconfiguring replaces (and closes) the handlers installed earlier.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LEVEL_ENV = "THREADKIT_LOG_LEVEL"
JSON_ENV = "THREADKIT_LOG_JSON"
FILE_ENV = "THREADKIT_LOG_FILE"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name not in _LEVELS:
        raise ValueError(f"Unknown log level {level!r}, expected one of {', '.join(_LEVELS)}")
    return getattr(logging, name)


def _handler_options(log_file: Path | None) -> dict[str, Any]:
    # basicConfig owns the file it opens, so force=True closes it again.
    if log_file is None:
        return {"stream": sys.stderr}
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return {"filename": str(log_file), "filemode": "a", "encoding": "utf-8"}


def _processors(json_output: bool, colors: bool) -> list[structlog.types.Processor]:
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors)

    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def configure_logging(
    level: str | int = "INFO",
    json_output: bool = False,
    log_file: Path | None = None,
    colors: bool = True,
) -> None:
    """Route threadkit's structlog events through the stdlib root logger.

    Args:
        level: Level name or number; names are case-insensitive
        json_output: Render JSON lines instead of console output
        log_file: Append to this file instead of writing to stderr
        colors: Colorize console output (ignored for JSON)

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    logging.basicConfig(
        format="%(message)s",
        level=_resolve_level(level),
        force=True,
        **_handler_options(log_file),
    )

    structlog.configure(
        processors=_processors(json_output, colors),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def configure_from_env(environ: dict[str, str] | None = None) -> None:
    """Configure logging from ``THREADKIT_LOG_*`` environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ``
    """
    env = os.environ if environ is None else environ
    json_output = _env_flag(env.get(JSON_ENV))
    log_file = env.get(FILE_ENV)

    configure_logging(
        level=env.get(LEVEL_ENV, "INFO"),
        json_output=json_output,
        log_file=Path(log_file) if log_file else None,
        colors=not json_output,
    )
