from __future__ import annotations

"""
Headless browser automation that fills and submits the salon booking form.

Modules exported here are safe to import from application code.
"""

from .browser import HeadlessBrowser
from .config import BookingSettings, load_booking_settings
from .errors import (
    BookingAutomationError,
    ElementNotFoundError,
    NoCandidateError,
    ValidationError,
)
from .models import (
    BookingRequest,
    BookingResult,
    BookingTaskState,
    CustomerInfo,
    StepReport,
    StepStatus,
    TimePreference,
)
from .tasks import BookingSequencer, book_appointment

__all__ = [
    "HeadlessBrowser",
    "BookingSettings",
    "load_booking_settings",
    "BookingAutomationError",
    "ElementNotFoundError",
    "NoCandidateError",
    "ValidationError",
    "BookingRequest",
    "BookingResult",
    "BookingTaskState",
    "CustomerInfo",
    "StepReport",
    "StepStatus",
    "TimePreference",
    "BookingSequencer",
    "book_appointment",
]
