"""
Logging utilities for the MCP Hello World server.

Everything is rendered as one JSON object per line on stderr, including
records from aiohttp and asyncio, so stdout carries nothing but
protocol messages in stdio mode.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog

# Chatty below WARNING under normal operation
_QUIET_LOGGERS = ("aiohttp.access", "aiohttp.server", "asyncio")


def setup_logging(log_level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """
    Set up structured logging for the MCP server.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Destination for log lines (defaults to stderr)
    """
    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(),
            ],
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper()))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
