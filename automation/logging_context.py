"""Correlation id for tracing one booking through the logs.

Usage:
    from automation.logging_context import configure_logging, set_booking_id

    configure_logging("INFO")
    set_booking_id("a1b2c3d4")
    logger.info("Loading form")  # -> ... [a1b2c3d4] automation.tasks INFO: Loading form
"""

from __future__ import annotations

import logging
from contextvars import ContextVar

_booking_id: ContextVar[str] = ContextVar("booking_id", default="-")

LOG_FORMAT = "%(asctime)s [%(booking_id)s] %(name)s %(levelname)s: %(message)s"


def set_booking_id(booking_id: str) -> None:
    """Set the correlation id for the current async context."""
    _booking_id.set(booking_id)


def get_booking_id() -> str:
    return _booking_id.get()


class BookingIdFilter(logging.Filter):
    """Injects booking_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.booking_id = _booking_id.get()  # type: ignore[attr-defined]
        return True


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, BookingIdFilter) for f in handler.filters):
            handler.addFilter(BookingIdFilter())
