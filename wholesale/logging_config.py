"""
logging_config.py — Loguru setup for the wholesale API

Services log through stdlib loggers named "wholesale.<area>". This module
makes Loguru the only sink and forwards those stdlib records into it, so
quote, payment and chat events share one format and carry the request id
bound by the middleware in main.py.

Business Rules:
- One stdout sink, replaced on every call
- JSON lines when APP_URL points at the production domain, colour otherwise
- LOG_LEVEL env var wins over the INFO default
- Records outside a request show request_id "-"

Called by: wholesale/main.py (create_app)
Depends on: LOG_LEVEL and APP_URL environment variables
"""

import logging
import os
import sys

from loguru import logger

PRODUCTION_DOMAIN = "wholesale-b2b.com"

DEV_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)

# Third-party loggers that flood INFO with per-request chatter
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "multipart")


def _is_production() -> bool:
    return PRODUCTION_DOMAIN in os.getenv("APP_URL", "")


def setup_logging() -> None:
    """Install the stdout sink and route stdlib logging through Loguru."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    production = _is_production()

    logger.remove()
    logger.configure(extra={"request_id": "-"})
    if production:
        logger.add(sys.stdout, level=level, format="{message}", serialize=True)
    else:
        logger.add(sys.stdout, level=level, format=DEV_FORMAT, colorize=True)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging ready: level={} json={}", level, production)


class _InterceptHandler(logging.Handler):
    """Forward a stdlib record to Loguru at the matching level."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk past logging's own frames so {name}:{line} points at the caller
        frame, depth = logging.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())
