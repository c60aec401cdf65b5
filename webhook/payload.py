"""
Validation and mapping of inbound booking payloads.

Two payload shapes exist; a deployment accepts exactly one of them.

flat::

    {"date": "02-02-2026", "time": "02:00 PM", "service": "Curly Cut",
     "employee": "First Available", "firstName": "John", "lastName": "Doe",
     "email": "user@example.com", "phone": "+15199804247"}

nested::

    {"date": "02/02/2026", "timePreference": "Any time", "service": "Curly Cut",
     "employee": "First Available",
     "customerInfo": {"firstName": "John", "lastName": "Doe",
                      "email": "user@example.com", "phone": "5199804247",
                      "notes": "First visit"}}
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List

from automation import BookingRequest, BookingSettings, CustomerInfo
from automation.models import DEFAULT_EMPLOYEE, TimePreference

FLAT_REQUIRED_FIELDS = (
    "date",
    "time",
    "email",
    "phone",
    "service",
    "employee",
    "firstName",
    "lastName",
)
FLAT_OPTIONAL_FIELDS = ("notes",)
NESTED_REQUIRED_FIELDS = ("date", "service")
NESTED_OPTIONAL_FIELDS = ("timePreference", "employee")
NESTED_CUSTOMER_FIELDS = ("firstName", "lastName", "email", "phone")

_NON_DIGITS = re.compile(r"\D")


def normalize_date_to_dd_mm_yyyy(value: Any) -> Any:
    """
    Turn ``D-M-Y``, ``D.M.Y`` or ``D/M/Y`` into zero-padded ``DD/MM/YYYY``.

    Anything without exactly three non-empty segments is returned unchanged.
    """
    if not isinstance(value, str):
        return value
    parts = value.replace(".", "-").replace("/", "-").split("-")
    if len(parts) != 3 or not all(parts):
        return value
    day, month, year = parts
    return f"{day.zfill(2)}/{month.zfill(2)}/{year}"


def normalize_phone(value: Any) -> Any:
    """Keep digits only; fall back to the original when nothing is left."""
    if not isinstance(value, str):
        return value
    digits = _NON_DIGITS.sub("", value)
    return digits or value


def _missing(body: Dict[str, Any], fields, prefix: str = "") -> List[str]:
    errors = []
    for name in fields:
        value = body.get(name)
        if not value:
            errors.append(f"Missing field: {prefix}{name}")
        elif not isinstance(value, str):
            errors.append(f"Invalid field: {prefix}{name} must be a string")
    return errors


def _not_strings(body: Dict[str, Any], fields, prefix: str = "") -> List[str]:
    """Optional fields may be absent or null, but never a non-string value."""
    return [
        f"Invalid field: {prefix}{name} must be a string"
        for name in fields
        if body.get(name) is not None and not isinstance(body[name], str)
    ]


def validate_flat_payload(body: Dict[str, Any]) -> List[str]:
    return _missing(body, FLAT_REQUIRED_FIELDS) + _not_strings(body, FLAT_OPTIONAL_FIELDS)


def validate_nested_payload(body: Dict[str, Any]) -> List[str]:
    errors = _missing(body, NESTED_REQUIRED_FIELDS)
    errors.extend(_not_strings(body, NESTED_OPTIONAL_FIELDS))
    customer = body.get("customerInfo")
    if customer is None:
        errors.append("Missing field: customerInfo")
    elif not isinstance(customer, dict):
        errors.append("Invalid field: customerInfo must be an object")
    else:
        errors.extend(_missing(customer, NESTED_CUSTOMER_FIELDS, prefix="customerInfo."))
        errors.extend(_not_strings(customer, ("notes",), prefix="customerInfo."))
    return errors


def _browser_overrides(body: Dict[str, Any]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if isinstance(body.get("headless"), bool):
        overrides["headless"] = body["headless"]
    slow_mo = body.get("slowMo")
    if isinstance(slow_mo, (int, float)) and not isinstance(slow_mo, bool) and slow_mo >= 0:
        overrides["slow_mo"] = int(slow_mo)
    return overrides


def map_flat_payload(body: Dict[str, Any], settings: BookingSettings) -> BookingRequest:
    request = settings.build_request(
        date=normalize_date_to_dd_mm_yyyy(body["date"]),
        time_preference=TimePreference.ANY_TIME.label,
        service=body["service"],
        employee=body.get("employee") or DEFAULT_EMPLOYEE,
        specific_time=body.get("time"),
        time_slot_index=0,
        customer=CustomerInfo(
            first_name=body["firstName"],
            last_name=body["lastName"],
            email=body["email"],
            phone=normalize_phone(body["phone"]),
            notes=body.get("notes") or "",
        ),
    )
    return request.with_overrides(**_browser_overrides(body))


def map_nested_payload(body: Dict[str, Any], settings: BookingSettings) -> BookingRequest:
    customer = body["customerInfo"]
    slot_index = body.get("timeSlotIndex")
    request = settings.build_request(
        date=body["date"],
        time_preference=body.get("timePreference"),
        service=body["service"],
        employee=body.get("employee") or DEFAULT_EMPLOYEE,
        time_slot_index=slot_index if isinstance(slot_index, int) and not isinstance(slot_index, bool) else 0,
        customer=CustomerInfo(
            first_name=customer["firstName"],
            last_name=customer["lastName"],
            email=customer["email"],
            phone=customer["phone"],
            notes=customer.get("notes") or "",
        ),
    )
    return request.with_overrides(**_browser_overrides(body))


PAYLOAD_SHAPES: Dict[
    str,
    tuple[
        Callable[[Dict[str, Any]], List[str]],
        Callable[[Dict[str, Any], BookingSettings], BookingRequest],
    ],
] = {
    "flat": (validate_flat_payload, map_flat_payload),
    "nested": (validate_nested_payload, map_nested_payload),
}
