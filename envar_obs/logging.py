"""
Structured Logging (structlog).

Loader and binder warnings are emitted as snake_case events with
key/value context (path, key, field) on loggers under the "envar"
namespace. Importing envar configures nothing; applications that want
envar's own output call setup_logging().
"""

import logging
import sys

import structlog

from envar_config.settings import Settings

LOGGER_NAMESPACE = "envar"


def _namespace_handler(level: str) -> logging.Handler:
    """Attach one stderr handler to the envar logger, replacing earlier ones."""
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(namespace.handlers):
        if getattr(handler, "_envar_handler", False):
            namespace.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler._envar_handler = True
    namespace.addHandler(handler)
    namespace.setLevel(level)
    namespace.propagate = False
    return handler


def setup_logging(settings: Settings | None = None) -> None:
    """
    Route envar's structlog events to stderr.

    Output format: JSON or text (ENVAR_LOG_FORMAT)
    Level: ENVAR_LOG_LEVEL, applied to the "envar" logger only, so the
    host application's root logger is left alone.
    """
    settings = settings or Settings()
    _namespace_handler(settings.LOG_LEVEL.upper())

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get configured logger."""
    return structlog.get_logger(name)
