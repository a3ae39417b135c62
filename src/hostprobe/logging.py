"""Structlog configuration for hostprobe.

Library modules log with ``structlog.get_logger()`` and snake_case event
names. Nothing is configured on import; an embedding application calls
configure() if it wants hostprobe's output. Handlers are attached to the
"hostprobe" stdlib logger, which stops propagating; the root logger is left
alone. structlog.configure() is still process-wide.

- Console: Rich-formatted, human-readable
- File (optional): JSON Lines with rotation, machine-parseable
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from hostprobe.config import Config

LOGGER_NAME = "hostprobe"


def _add_source(source: str) -> structlog.types.Processor:
    """Create a processor that adds a source field to log events."""

    def processor(
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        event_dict["source"] = source
        return event_dict

    return processor


def configure(config: Config, console: Console | None = None) -> None:
    """Configure structlog with console output and optional JSON file.

    Args:
        config: Config whose ``logging`` section sets level and file path
        console: Rich console for human output (stderr by default)
    """
    level = logging.getLevelName(config.logging.level)

    stdlib_logger = logging.getLogger(LOGGER_NAME)
    stdlib_logger.setLevel(level)
    stdlib_logger.propagate = False

    # Replace handlers from an earlier configure()
    for handler in stdlib_logger.handlers:
        handler.close()
    stdlib_logger.handlers.clear()

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _add_source("hostprobe"),
    ]

    console_handler = RichHandler(
        console=console or Console(stderr=True, highlight=False),
        show_path=False,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
            foreign_pre_chain=pre_chain,
        )
    )
    stdlib_logger.addHandler(console_handler)

    if config.logging.log_path:
        log_path = Path(config.logging.log_path).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Set up rotating file handler for JSON output
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config.logging.log_max_bytes,
            backupCount=config.logging.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=[
                    *pre_chain,
                    structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
                    structlog.processors.format_exc_info,
                ],
            )
        )
        stdlib_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
            structlog.processors.add_log_level,
            _add_source("hostprobe"),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_structlog() -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to the hostprobe stdlib logger."""
    return structlog.get_logger(LOGGER_NAME)
