"""structlog setup for the POS.

Every request gets an id (see ``middleware.logging``) that is carried in a
context var, so log lines from checkout, background deduction jobs and
Sentry events can be tied back to the same register action.

Environment:
    LOG_LEVEL   stdlib level name, default INFO
    LOG_FORMAT  ``json`` (default) or ``console`` for local development
"""

import contextvars
import logging
import logging.config
import os

import structlog

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="no-request-id")


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def _renderer(log_format: str):
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_logging() -> None:
    """Route structlog and stdlib loggers (uvicorn, sqlalchemy) to stdout."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    renderer = _renderer(os.getenv("LOG_FORMAT", "json").lower())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": renderer,
                    "foreign_pre_chain": [
                        structlog.stdlib.add_log_level,
                        structlog.processors.TimeStamper(fmt="iso", utc=True),
                    ],
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "structlog",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"handlers": ["stdout"], "level": logging.getLevelName(level)},
            "loggers": {
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger bound to the current request id."""
    return structlog.get_logger(name).bind(request_id=get_request_id())
