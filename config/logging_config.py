"""structlog setup with a stdlib bridge so library logs share the same output."""

import logging
import logging.config

import structlog

from config.settings import settings


def setup_logging(log_level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Root level name; defaults to settings.log_level.
        json_logs: JSON lines when True, colored console output when False;
            defaults to settings.json_logs.
    """
    level = (log_level or settings.log_level).upper()
    use_json = settings.json_logs if json_logs is None else json_logs

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer = structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["default"], "level": level},
        "loggers": {
            "httpx": {"level": "WARNING"},
            "openai": {"level": "WARNING"},
        },
    })

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
