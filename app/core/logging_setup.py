"""Logging configuration driven by LOG_LEVEL and LOG_FORMAT."""

import logging
import sys

import structlog

from app.core.config import LogFormatEnum, Settings


def shared_processors() -> list:
    """Processors applied to both structlog and stdlib log records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def build_formatter(log_format: LogFormatEnum) -> structlog.stdlib.ProcessorFormatter:
    if log_format == LogFormatEnum.json:
        final = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors(),
        processors=final,
    )


def setup_logging(config: Settings) -> None:
    """Configure the root logger once for the process.

    Records from ``logging.getLogger`` and ``structlog.get_logger`` go through
    the same formatter, so both pick up context bound with
    ``structlog.contextvars.bind_contextvars`` (the request ID, for one).
    """
    structlog.configure(
        processors=[
            *shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(config.log_format))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(config.log_level.value)

    # SQLAlchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if config.debug else logging.WARNING
    )
