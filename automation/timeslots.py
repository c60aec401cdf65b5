from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

_TIME_PATTERN = re.compile(r"(?<!\d)(\d{1,2}):(\d{2})\s*([AP]M)\b", re.IGNORECASE)
_PERIOD_SPACING = re.compile(r"(\d)\s*([AP])\s*M\b", re.IGNORECASE)
_LEADING_ZERO_HOUR = re.compile(r"\b0(\d):")


@dataclass(frozen=True, slots=True)
class TimeSlotCandidate:
    """One appointment time shown on the page."""

    text: str
    minutes: Optional[int]
    element: Any = None

    @classmethod
    def from_text(cls, text: str, element: Any = None) -> "TimeSlotCandidate":
        cleaned = " ".join((text or "").split())
        return cls(text=cleaned, minutes=time_to_minutes(cleaned), element=element)


def time_to_minutes(text: Optional[str]) -> Optional[int]:
    """
    Convert ``"h:mm AM"`` style text into minutes since midnight.

    ``12:xx AM`` is the first hour of the day and ``12:xx PM`` is noon.
    Returns ``None`` for anything that does not look like a 12-hour time.
    """
    if not text:
        return None
    match = _TIME_PATTERN.search(text)
    if match is None:
        return None
    hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if not 1 <= hour <= 12 or minute > 59:
        return None
    if period == "AM":
        hour = 0 if hour == 12 else hour
    elif hour != 12:
        hour += 12
    return hour * 60 + minute


def normalize_time_text(text: Optional[str]) -> str:
    collapsed = " ".join((text or "").split()).upper()
    collapsed = _PERIOD_SPACING.sub(r"\1 \2M", collapsed)
    return _LEADING_ZERO_HOUR.sub(r"\1:", collapsed).strip()


def _match_exact_text(candidates: Sequence[TimeSlotCandidate], wanted: str) -> Optional[TimeSlotCandidate]:
    target = normalize_time_text(wanted)
    for candidate in candidates:
        if normalize_time_text(candidate.text) == target:
            return candidate
    return None


def _match_hour_and_period(candidates: Sequence[TimeSlotCandidate], wanted: str) -> Optional[TimeSlotCandidate]:
    target = time_to_minutes(wanted)
    if target is None:
        return None
    for candidate in candidates:
        if candidate.minutes is not None and candidate.minutes // 60 == target // 60:
            return candidate
    return None


def _match_closest(candidates: Sequence[TimeSlotCandidate], wanted: str) -> Optional[TimeSlotCandidate]:
    target = time_to_minutes(wanted)
    if target is None:
        return None
    best: Optional[TimeSlotCandidate] = None
    best_distance: Optional[int] = None
    for candidate in candidates:
        if candidate.minutes is None:
            continue
        distance = abs(candidate.minutes - target)
        if best_distance is None or distance < best_distance:
            best, best_distance = candidate, distance
    return best


# Tried in order; the first strategy that returns a candidate wins.
SLOT_MATCH_STRATEGIES: Tuple[
    Tuple[str, Callable[[Sequence[TimeSlotCandidate], str], Optional[TimeSlotCandidate]]], ...
] = (
    ("exact-text", _match_exact_text),
    ("hour-and-period", _match_hour_and_period),
    ("closest-time", _match_closest),
)


def choose_slot(
    candidates: Sequence[TimeSlotCandidate],
    specific_time: Optional[str] = None,
    index: int = 0,
) -> Tuple[Optional[TimeSlotCandidate], str]:
    """
    Pick the slot to click and report which rule picked it.

    With ``specific_time`` the match strategies are tried in order; when none
    applies (e.g. the requested time does not parse) selection falls back to
    ``index``, which is clamped to the available range.
    """
    if not candidates:
        return None, "none"
    # Substring selectors also catch labels like "Name"; once any candidate
    # reads as a clock time, the rest are not slots.
    timed = [candidate for candidate in candidates if candidate.minutes is not None]
    if timed:
        candidates = timed
    if specific_time:
        for name, strategy in SLOT_MATCH_STRATEGIES:
            chosen = strategy(candidates, specific_time)
            if chosen is not None:
                return chosen, name
    position = min(max(index, 0), len(candidates) - 1)
    return candidates[position], "index"


def looks_like_time(text: Optional[str]) -> bool:
    if not text or "Show Available" in text:
        return False
    return ":" in text or "AM" in text or "PM" in text


def service_option_index(options: Sequence[str], wanted: str) -> Optional[int]:
    """Position of the suggestion whose trimmed text equals ``wanted`` ignoring case."""
    target = (wanted or "").strip().lower()
    for idx, text in enumerate(options):
        if (text or "").strip().lower() == target:
            return idx
    return None


# Ordered: "first" must be checked before "last" so "firstName" never lands in
# the last-name box, while identifiers mentioning both go to last name.
NAME_FIELD_RULES: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    ("first_name", lambda ident: "first" in ident and "last" not in ident),
    ("last_name", lambda ident: "last" in ident),
)


def classify_name_field(name: Optional[str], element_id: Optional[str], placeholder: Optional[str]) -> Optional[str]:
    identifier = f"{name or ''}{element_id or ''}{placeholder or ''}".lower()
    for field_name, rule in NAME_FIELD_RULES:
        if rule(identifier):
            return field_name
    return None
