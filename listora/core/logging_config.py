"""
Structured logging configuration for Listora.

structlog wraps stdlib logging: every module keeps using
``logging.getLogger(__name__)`` and the root handler renders the records
as colored console lines in development or JSON lines elsewhere.

Publish calls bind ``user_id`` / ``platform`` / ``sku`` into the structlog
context so every log line emitted while a listing is being published can be
correlated, including lines from the classifier and transport.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from listora.config import AppEnv

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore")


def setup_logging(
    app_env: AppEnv,
    log_level: str = "INFO",
    log_format: str = "auto",
) -> None:
    """
    Configure structured logging for the application.

    Args:
        app_env: Current environment (development, staging, production).
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR).
        log_format: ``"json"``, ``"console"``, or ``"auto"``
                    (auto = console in dev, json otherwise).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: structlog.types.Processor
    if _should_use_json(app_env, log_format):
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def _should_use_json(app_env: AppEnv, log_format: str) -> bool:
    """Determine whether to use JSON output."""
    if log_format == "json":
        return True
    if log_format == "console":
        return False
    return app_env != AppEnv.DEVELOPMENT


@contextmanager
def publish_log_context(**fields: object) -> Iterator[None]:
    """Bind ``fields`` to every log line emitted inside the block."""
    clean = {k: str(v) for k, v in fields.items() if v is not None}
    with structlog.contextvars.bound_contextvars(**clean):
        yield
