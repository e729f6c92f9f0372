"""Structured logging setup using structlog.

One shared processor chain feeds either a coloured ConsoleRenderer
(development) or a JSONRenderer (production, or ``json_output=True``).
Standard-library ``logging`` goes through the same chain, so records from
uvicorn, httpx, chromadb and the OpenAI SDK look like our own events.

Pipelines wrap their work in :func:`document_context` so that every event
they emit, including events from providers, carries the document id.
"""

import logging
import os
import sys
from contextlib import AbstractContextManager

import structlog

# Chatty third-party loggers; raised to WARNING unless running at DEBUG.
_NOISY_LOGGERS = ("chromadb", "httpx", "httpcore", "openai", "multipart")


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.
        json_output: Force JSON rendering.  ``APP_ENV=production`` also
                     selects JSON.

    Returns:
        A configured structlog BoundLogger.
    """
    level = log_level.upper()
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    third_party_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a named structlog logger, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)


def document_context(document_id: str, **extra: str) -> AbstractContextManager[None]:
    """Bind ``document_id`` (and *extra*) to every event logged in the block."""
    return structlog.contextvars.bound_contextvars(document_id=document_id, **extra)
