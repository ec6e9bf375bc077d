"""Correlation context for tracing a trip session through the logs."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

current_correlation_id: ContextVar[str | None] = ContextVar(
    "correlation_id", default=None
)
current_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)


class CorrelationFilter(logging.Filter):
    """Logging filter that adds correlation IDs to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = current_correlation_id.get() or "-"
        record.session_id = current_session_id.get() or "-"
        return True


@contextmanager
def with_session(session_id: str) -> Iterator[None]:
    """Context manager binding a trip session ID to every log line in the block."""
    token = current_session_id.set(session_id)
    try:
        yield
    finally:
        current_session_id.reset(token)


@contextmanager
def with_correlation(correlation_id: str) -> Iterator[None]:
    """Context manager to set correlation ID for a block of code.

    Usage:
        with with_correlation(request_id):
            logger.info("Fetching route")  # Will include correlation_id in log
            await provider.fetch_route(...)
    """
    token = current_correlation_id.set(correlation_id)
    try:
        yield
    finally:
        current_correlation_id.reset(token)
