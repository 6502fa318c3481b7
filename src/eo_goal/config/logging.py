"""Structured logging for scheduled goal-tracker runs."""

import logging
import sys
import uuid
from typing import Any, Literal

import structlog

from eo_goal.config.settings import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _renderer(format: LogFormat) -> list[structlog.types.Processor]:
    if format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    # Cron mails stdout verbatim, so colours only on a terminal.
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(level: LogLevel | None = None, format: LogFormat | None = None) -> None:
    """Route structlog events through stdlib logging on stdout.

    Args:
        level: Minimum level to emit. Defaults to ``LOG_LEVEL``.
        format: ``json`` for log shippers, ``console`` for people. Defaults
            to ``LOG_FORMAT``.
    """
    if level is None or format is None:
        settings = get_settings()
        level = level or settings.log_level
        format = format or settings.log_format

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *_renderer(format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_run_context(**values: Any) -> str:
    """Tag every following event with a fresh run id and ``values``.

    Context left over from an earlier run in the same process is dropped.
    ``None`` values are not bound.
    """
    run_id = uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        run_id=run_id,
        **{key: value for key, value in values.items() if value is not None},
    )
    return run_id
