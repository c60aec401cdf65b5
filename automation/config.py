"""
Process-wide booking defaults read from the environment.

Values are parsed once at startup into a frozen ``BookingSettings`` which is
then handed to every booking run; per-request overrides never touch it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .models import DEFAULT_EMPLOYEE, BookingRequest, CustomerInfo, TimePreference

DEFAULT_BOOKING_URL = (
    "https://plugin.mysalononline.com/External/BookingPlugin/"
    "?sid=0&guid=2916c169-4ac8-4384-8161-c996c086627b"
)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def _safe_int(env: Mapping[str, str], name: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = env.get(name, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from None


def _safe_float(env: Mapping[str, str], name: str, default: str) -> float:
    raw = env.get(name, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid float for {name}: {raw!r}") from None


def _safe_bool(env: Mapping[str, str], name: str, default: str) -> bool:
    raw = env.get(name, default).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw!r}")


@dataclass(frozen=True, slots=True)
class BookingSettings:
    """Browser and timing defaults shared by every booking."""

    url: str = DEFAULT_BOOKING_URL
    headless: bool = True
    slow_mo: int = 300
    settle_delay_ms: int = 3_000
    post_submit_delay_ms: int = 20_000
    navigation_timeout: float = 30.0
    viewport_width: int = 1280
    viewport_height: int = 900

    def build_request(
        self,
        *,
        date: str,
        service: str,
        customer: CustomerInfo,
        employee: str = DEFAULT_EMPLOYEE,
        time_preference: Optional[str] = None,
        specific_time: Optional[str] = None,
        time_slot_index: int = 0,
        headless: Optional[bool] = None,
        slow_mo: Optional[int] = None,
    ) -> BookingRequest:
        """Create a request seeded from these defaults."""
        return BookingRequest(
            url=self.url,
            date=date,
            service=service,
            customer=customer,
            employee=employee or DEFAULT_EMPLOYEE,
            time_preference=TimePreference.from_label(time_preference),
            specific_time=specific_time or None,
            time_slot_index=time_slot_index,
            headless=self.headless if headless is None else headless,
            slow_mo=self.slow_mo if slow_mo is None else slow_mo,
        )


def _validate_settings(settings: BookingSettings) -> None:
    if not settings.url.startswith(("http://", "https://")):
        raise ValueError(f"BOOKING_URL must be an http(s) URL, got {settings.url!r}")
    for name, value in (
        ("SLOW_MO", settings.slow_mo),
        ("SETTLE_DELAY_MS", settings.settle_delay_ms),
        ("POST_SUBMIT_DELAY_MS", settings.post_submit_delay_ms),
    ):
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")
    if settings.navigation_timeout <= 0:
        raise ValueError(
            f"NAVIGATION_TIMEOUT must be > 0, got {settings.navigation_timeout}"
        )
    if settings.viewport_width < 1 or settings.viewport_height < 1:
        raise ValueError(
            "VIEWPORT_WIDTH and VIEWPORT_HEIGHT must be >= 1, "
            f"got {settings.viewport_width}x{settings.viewport_height}"
        )


def load_booking_settings(env: Optional[Mapping[str, str]] = None) -> BookingSettings:
    """Read and validate booking defaults from ``env`` (``os.environ`` by default)."""
    if env is None:
        env = os.environ
    settings = BookingSettings(
        url=env.get("BOOKING_URL", DEFAULT_BOOKING_URL),
        headless=_safe_bool(env, "HEADLESS", "true"),
        slow_mo=_safe_int(env, "SLOW_MO", "300"),
        settle_delay_ms=_safe_int(env, "SETTLE_DELAY_MS", "3000"),
        post_submit_delay_ms=_safe_int(env, "POST_SUBMIT_DELAY_MS", "20000"),
        navigation_timeout=_safe_float(env, "NAVIGATION_TIMEOUT", "30"),
        viewport_width=_safe_int(env, "VIEWPORT_WIDTH", "1280"),
        viewport_height=_safe_int(env, "VIEWPORT_HEIGHT", "900"),
    )
    _validate_settings(settings)
    return settings
