"""
Logging configuration for the webhook response node using structlog.

Configures structlog with:
- Pretty console output (human-readable, colored)
- JSON-lines file output (machine-readable, structured)
- Daily log file rotation (UTC)

LOG_DIR selects the log directory (default: ./logs) and LOG_LEVEL the
console level (default: INFO). The file handler always records DEBUG.
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

from .env import get_env


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
    ]


def setup_logging(log_dir: Optional[str] = None, console_level: Optional[str] = None) -> Path:
    """
    Configure structlog with pretty console and JSON file output.

    Call once at process startup. After that, modules use:
    logger = structlog.get_logger(__name__)

    Args:
        log_dir: Directory for the rotating JSON log (overrides LOG_DIR).
        console_level: Console level name (overrides LOG_LEVEL).

    Returns:
        Path of the active JSON log file.
    """
    logs_dir = Path(log_dir or get_env("LOG_DIR", "logs"))
    logs_dir.mkdir(parents=True, exist_ok=True)
    level_name = (console_level or get_env("LOG_LEVEL", "INFO")).upper()

    shared_processors = _shared_processors()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level_name, logging.INFO))
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=shared_processors,
        )
    )
    root_logger.addHandler(console_handler)

    log_file = logs_dir / "respond_to_webhook.jsonl"
    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=30,
        encoding="utf-8",
        utc=True,
    )
    file_handler.suffix = "%Y-%m-%d.jsonl"
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=shared_processors,
        )
    )
    root_logger.addHandler(file_handler)

    return log_file
