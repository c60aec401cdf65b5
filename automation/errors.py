from __future__ import annotations

from typing import Iterable, List


class BookingAutomationError(RuntimeError):
    """Raised when the automated booking sequence cannot be completed."""


class ElementNotFoundError(BookingAutomationError):
    """An expected control is absent from the booking page."""


class NoCandidateError(BookingAutomationError):
    """Nothing on the page can be picked for a mandatory choice."""


class ValidationError(ValueError):
    """Booking request fields are missing or malformed.

    ``errors`` always holds every problem found, not just the first one.
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid booking request")
