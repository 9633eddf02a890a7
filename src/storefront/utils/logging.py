"""Logging for the storefront.

Records flow through the standard library root logger so uvicorn, Protean
and the storefront share handlers; structlog builds the event dict and picks
the renderer per environment (JSON in production and staging, the rich
console everywhere else).

Request handlers bind ``request_id`` with ``add_context`` and release it with
``clear_context``. Payment secrets and bearer tokens never reach a handler.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LEVELS_BY_ENVIRONMENT = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
STRUCTURED_ENVIRONMENTS = ("production", "staging")

# Third-party loggers that are chatty below WARNING
QUIET_LOGGERS = ("urllib3", "asyncio", "stripe", "protean", "httpx")

REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset({"client_secret", "authorization", "token", "password", "stripe_signature", "api_key"})

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def get_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level(environment: str | None = None) -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the environment."""
    env = environment or get_environment()
    return os.getenv("LOG_LEVEL", LEVELS_BY_ENVIRONMENT.get(env, "INFO")).upper()


def redact_secrets(logger, method_name, event_dict):
    """structlog processor: mask values logged under sensitive keys."""
    for key in event_dict.keys() & SENSITIVE_KEYS:
        event_dict[key] = REDACTED
    return event_dict


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(level: str | None = None, log_dir: str | None = None, log_file_prefix: str = "storefront") -> None:
    """Route the root logger to stdout, plus rotating files when a log directory is set.

    ``log_dir`` falls back to ``LOG_DIR``. Errors are also copied to
    ``<prefix>_error.log``.
    """
    log_level = level or get_log_level()
    log_dir = log_dir or os.getenv("LOG_DIR")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    handlers[0].setLevel(log_level)

    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_file(directory / f"{log_file_prefix}.log", log_level))
        handlers.append(_rotating_file(directory / f"{log_file_prefix}_error.log", logging.ERROR))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = handlers

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer(environment: str):
    if environment in STRUCTURED_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
    )


def setup_structlog(environment: str | None = None) -> None:
    env = environment or get_environment()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            _renderer(env),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(level: str | None = None, log_dir: str | None = None, log_file_prefix: str = "storefront") -> None:
    setup_stdlib_logging(level=level, log_dir=log_dir, log_file_prefix=log_file_prefix)
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Bind values to every log line emitted from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
