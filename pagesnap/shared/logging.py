"""
Logging setup with request context.

Records emitted while a request is in flight carry its request_id and client.
"""

import logging
import sys
from contextvars import ContextVar

from .types import RequestContext

ROOT_LOGGER = "pagesnap"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(request_id)s %(client)s] %(name)s: %(message)s"

_request_context: ContextVar[RequestContext | None] = ContextVar(
    "pagesnap_request_context", default=None
)


class RequestContextFilter(logging.Filter):
    """Stamp the current request_id and client address onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_request_context()
        record.request_id = ctx.request_id if ctx else "-"
        record.client = (ctx.client if ctx else None) or "-"
        return True


def setup_logging(level: str = "INFO") -> None:
    """Configure the pagesnap logger tree. Safe to call more than once."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())

    if not any(getattr(h, "_pagesnap", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestContextFilter())
        handler._pagesnap = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the pagesnap namespace."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_request_context(ctx: RequestContext) -> None:
    _request_context.set(ctx)


def get_request_context() -> RequestContext | None:
    return _request_context.get()


def clear_request_context() -> None:
    _request_context.set(None)
