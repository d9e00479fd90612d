"""
Logging Configuration for the Sales Visualization Platform

structlog events and stdlib records (uvicorn, aiokafka, SQLAlchemy) are
rendered by one handler on stdout, as JSON lines or as colored console
output depending on ``LOG_FORMAT``.
"""

import logging
import sys
from typing import Dict, List, Optional

import structlog
from structlog.stdlib import ProcessorFormatter
from structlog.typing import Processor

from salesviz.config.settings import Settings, get_settings

# Library loggers and the most verbose level they may log at; None follows
# the application level.
LIBRARY_LOGGERS: Dict[str, Optional[int]] = {
    "uvicorn": None,
    "uvicorn.error": None,
    "uvicorn.access": logging.WARNING,
    "aiokafka": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        # Salesperson and customer names are Japanese; keep them readable
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _library_level(name: str, level: int, settings: Settings) -> int:
    if name == "sqlalchemy.engine" and settings.database.echo:
        return logging.INFO
    ceiling = LIBRARY_LOGGERS[name]
    if ceiling is None:
        return level
    return max(level, ceiling)


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Safe to call more than once; the stdout handler is replaced, not added.

    Args:
        log_level: Override ``LOG_LEVEL`` (DEBUG, INFO, WARNING, ERROR)
        log_format: Override ``LOG_FORMAT`` (json or text)
    """
    settings = get_settings()
    level_name = (log_level or settings.monitoring.log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    log_format = log_format or settings.monitoring.log_format

    shared = _shared_processors()
    structlog.configure(
        processors=shared + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in LIBRARY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers = []
        library_logger.propagate = True
        library_logger.setLevel(_library_level(name, level, settings))

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level_name,
        format=log_format,
        environment=settings.app_env,
    )
