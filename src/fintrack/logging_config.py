"""Structured logging setup.

Library modules only call ``structlog.get_logger(__name__)``; the CLI (or an
embedding application) calls ``configure_logging`` once at startup.
"""

import logging
import os
import sys
from typing import Optional

import structlog

LOG_LEVEL_ENV = "FINTRACK_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging(level: Optional[str] = None, json: bool = False) -> None:
    """Route structlog through stdlib logging on stderr.

    Args:
        level: Level name; falls back to FINTRACK_LOG_LEVEL, then WARNING
        json: Render one JSON object per line instead of console output
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level, force=True)

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
