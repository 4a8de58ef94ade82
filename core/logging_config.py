"""
Structlog configuration.
"""
import logging
import json
import structlog
from structlog.processors import TimeStamper, add_log_level, JSONRenderer
from structlog.dev import ConsoleRenderer
from structlog.contextvars import merge_contextvars
from structlog.stdlib import ProcessorFormatter
from typing import Any, List

from core.config import settings


def get_renderer() -> Any:
    """Console renderer in DEBUG, JSON lines otherwise."""
    if settings.DEBUG:
        return ConsoleRenderer(colors=True)

    def _dumps(obj, default=None, **kwargs):
        return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)
    return JSONRenderer(serializer=_dumps)


def _resolve_level() -> int:
    if settings.LOG_LEVEL:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if settings.DEBUG else logging.INFO


def configure_logging() -> None:
    """Configure structlog and bridge stdlib logging into the same chain.

    Only the library's own logger ("sidecar") gets a handler, so embedding
    applications keep control of the root logger.
    """
    shared_pre_chain: List[Any] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_pre_chain,
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = ProcessorFormatter(
        foreign_pre_chain=shared_pre_chain,
        processors=[
            ProcessorFormatter.remove_processors_meta,
            get_renderer(),
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    lib_logger = logging.getLogger("sidecar")
    lib_logger.handlers.clear()
    lib_logger.addHandler(handler)
    lib_logger.setLevel(_resolve_level())
    lib_logger.propagate = False


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger under the "sidecar" namespace."""
    if not name.startswith("sidecar"):
        name = f"sidecar.{name}"
    return structlog.get_logger(name)


configure_logging()
