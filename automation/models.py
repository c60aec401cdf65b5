from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import List, Optional

DEFAULT_EMPLOYEE = "First Available"


class TimePreference(Enum):
    """Options of the form's time-of-day dropdown, in on-screen order."""

    ANY_TIME = ("Any time", 0)
    MORNING = ("Morning (before noon)", 1)
    AFTERNOON = ("Afternoon (noon - 5pm)", 2)
    EVENING = ("Evening (after 5pm)", 3)

    def __init__(self, label: str, index: int) -> None:
        self.label = label
        self.index = index

    @classmethod
    def from_label(cls, value: Optional[str]) -> "TimePreference":
        if isinstance(value, TimePreference):
            return value
        needle = (value or "").strip().lower()
        for option in cls:
            if needle in (option.label.lower(), option.name.lower(), option.name.split("_")[0].lower()):
                return option
        return cls.ANY_TIME


@dataclass(frozen=True, slots=True)
class CustomerInfo:
    first_name: str
    last_name: str
    email: str
    phone: str
    notes: str = ""


@dataclass(frozen=True, slots=True)
class BookingRequest:
    """Everything one run of the booking form needs."""

    url: str
    date: str
    service: str
    customer: CustomerInfo
    employee: str = DEFAULT_EMPLOYEE
    time_preference: TimePreference = TimePreference.ANY_TIME
    specific_time: Optional[str] = None
    time_slot_index: int = 0
    headless: bool = True
    slow_mo: int = 300

    def missing_fields(self) -> List[str]:
        checks = (
            ("url", self.url),
            ("date", self.date),
            ("service", self.service),
            ("employee", self.employee),
            ("firstName", self.customer.first_name),
            ("lastName", self.customer.last_name),
            ("email", self.customer.email),
            ("phone", self.customer.phone),
        )
        return [f"Missing field: {name}" for name, value in checks if not value]

    def with_overrides(self, **changes) -> "BookingRequest":
        return replace(self, **changes)


class BookingTaskState(Enum):
    COMPLETED = auto()
    FAILED = auto()


class StepStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass(slots=True)
class StepReport:
    name: str
    status: StepStatus
    detail: str = ""


@dataclass(slots=True)
class BookingResult:
    state: BookingTaskState
    message: str
    slot: Optional[str] = None
    failed_step: Optional[str] = None
    steps: List[StepReport] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is BookingTaskState.COMPLETED
