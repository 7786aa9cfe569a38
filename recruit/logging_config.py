"""Logging setup for the API process.

Modules log through the stdlib ``logging`` module; this routes those records
through structlog's ``ProcessorFormatter`` when JSON output is selected.
"""
from __future__ import annotations

import logging
import sys

import structlog

from .config import settings

_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _build_formatter(fmt: str) -> logging.Formatter:
    if fmt.lower() != "json":
        return logging.Formatter(_TEXT_FORMAT)

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
    )


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    log_file: str | None = None,
) -> None:
    """Configure root logging from settings (arguments override)."""
    level = level or settings.logging.level
    fmt = fmt or settings.logging.format
    log_file = log_file or settings.logging.file

    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = _build_formatter(fmt)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    # Quieter third-party loggers
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db.echo else logging.WARNING
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
