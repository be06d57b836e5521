"""
Logging configuration
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import structlog

_configured = False


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    fmt: str = "console"
) -> None:
    """
    Configure stdlib logging and structlog once per process.

    Args:
        level: Log level name
        log_file: Optional file to mirror log output to
        fmt: "console" for human-readable output, "json" for one JSON object per line
    """
    global _configured

    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=handlers,
        force=True
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False
    )
    _configured = True


def setup_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a structured logger, configuring logging from the environment on first use.
    """
    if not _configured:
        configure_logging(
            level=os.getenv("LOG_LEVEL", "INFO"),
            fmt=os.getenv("LOG_FORMAT", "console")
        )
    return structlog.get_logger(name)
