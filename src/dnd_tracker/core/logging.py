"""structlog setup for the character tracker.

Every module logs through ``get_logger(__name__)``. Output is a colored
console stream while developing and one JSON object per line otherwise;
which one is used follows ``Settings.json_logs`` (console when
``Settings.debug`` is set) unless overridden.

The id of the character being played is carried in structlog's
contextvars, so engine and storage lines can be filtered per character
without threading the id through every call.

Example:
    >>> from dnd_tracker.core.logging import character_context, get_logger
    >>> logger = get_logger(__name__)
    >>> with character_context("tolvis"):
    ...     logger.info("Resource spent", resource_id="spell_slot_1")
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor

from dnd_tracker.core.exceptions import ConfigurationError


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from dnd_tracker.core.config import Settings


APP_NAME = "dnd_tracker"

# Libraries whose stdlib loggers are too chatty at DEBUG
_QUIET_LOGGERS = ("tenacity", "asyncio")


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ConfigurationError(f"Unknown log level {level!r}", config_key="log_level")
    return number


def tag_app(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """structlog processor stamping every entry with the application name."""
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def configure_logging(
    settings: Settings | None = None,
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Explicit arguments win over ``settings``; with neither, INFO-level
    console output is used.

    Args:
        settings: Application settings supplying ``log_level`` and
            ``json_logs``; ``debug`` forces console output.
        level: Logging level name.
        json_format: Emit JSON lines instead of console output.
        log_file: Also append stdlib log records to this file.

    Raises:
        ConfigurationError: If ``level`` is not a logging level name.
    """
    if level is None:
        level = settings.log_level if settings else "INFO"
    if json_format is None:
        json_format = settings.json_logs and not settings.debug if settings else False
    threshold = _level_number(level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        tag_app,
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=threshold,
        handlers=handlers,
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(threshold, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach key/values to every later log line in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def character_context(character_id: str) -> Iterator[None]:
    """Tag log lines inside the block with ``character_id``.

    The previous binding, if any, is restored on exit.
    """
    with structlog.contextvars.bound_contextvars(character_id=character_id):
        yield


__all__ = [
    "APP_NAME",
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "character_context",
    "tag_app",
]
