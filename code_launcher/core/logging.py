"""Structured logging configuration (structlog over stdlib logging)."""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

DEFAULT_LEVEL = "WARNING"


def _resolve_level(level: str | None) -> str:
    name = (level or os.environ.get("CODE_LAUNCHER_LOG_LEVEL") or DEFAULT_LEVEL).upper()
    # Unknown names would make dictConfig fail before any command runs
    if not isinstance(logging.getLevelName(name), int):
        return DEFAULT_LEVEL
    return name


def _renderer(log_format: str) -> list[structlog.types.Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=False)]


def setup_logging(level: str | None = None) -> None:
    """Route structlog events and stdlib records to one stderr handler.

    *level* wins over ``CODE_LAUNCHER_LOG_LEVEL`` (default WARNING).
    ``CODE_LAUNCHER_LOG_FORMAT`` picks ``console`` (default) or ``json``.
    """
    log_level = _resolve_level(level)
    log_format = os.environ.get("CODE_LAUNCHER_LOG_FORMAT", "console").lower()

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdout carries command output (--json), so logs go to stderr
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        *_renderer(log_format),
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "loggers": {
                "code_launcher": {
                    "handlers": ["stderr"],
                    "level": log_level,
                    "propagate": False,
                },
                "asyncio": {"handlers": ["stderr"], "level": "WARNING", "propagate": False},
            },
        }
    )
