"""Tests for time parsing, slot choice and form field matching."""

import pytest

from automation.timeslots import (
    SLOT_MATCH_STRATEGIES,
    TimeSlotCandidate,
    choose_slot,
    classify_name_field,
    looks_like_time,
    normalize_time_text,
    service_option_index,
    time_to_minutes,
)


def _slots(*texts):
    return [TimeSlotCandidate.from_text(text, element=text) for text in texts]


class TestTimeToMinutes:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("12:00 AM", 0),
            ("12:00 PM", 720),
            ("01:00 PM", 780),
            ("11:59 PM", 1439),
            ("9:05 am", 545),
            ("2:30PM", 870),
        ],
    )
    def test_converts_twelve_hour_times(self, text, expected):
        assert time_to_minutes(text) == expected

    @pytest.mark.parametrize("text", ["", None, "14:00", "noon", "2 PM", "13:00 PM", "10:75 AM"])
    def test_rejects_non_times(self, text):
        assert time_to_minutes(text) is None

    def test_finds_time_inside_label(self):
        assert time_to_minutes("Book 10:30 AM with Sam") == 630

    @pytest.mark.parametrize("text", ["112:00 PM", "Room 310:15 AM"])
    def test_hour_not_cut_from_longer_number(self, text):
        assert time_to_minutes(text) is None


class TestNormalizeTimeText:
    def test_collapses_whitespace(self):
        assert normalize_time_text("  10:00   AM ") == "10:00 AM"

    def test_adds_space_before_period(self):
        assert normalize_time_text("2:00pm") == "2:00 PM"

    def test_drops_leading_zero(self):
        assert normalize_time_text("02:00 PM") == normalize_time_text("2:00 PM")

    def test_keeps_two_digit_hours(self):
        assert normalize_time_text("10:00 am") == "10:00 AM"


class TestChooseSlot:
    def test_closest_by_minutes(self):
        # 10:00, 11:00 and 12:30 against 11:40: distances 100, 40 and 50.
        candidates = _slots("10:00 AM", "11:00 AM", "12:30 PM")
        assert [c.minutes for c in candidates] == [600, 660, 750]

        closest = dict(SLOT_MATCH_STRATEGIES)["closest-time"]
        assert closest(candidates, "11:40 AM").minutes == 660

    def test_same_hour_before_closest(self):
        candidates = _slots("11:05 AM", "11:50 AM")
        chosen, rule = choose_slot(candidates, specific_time="11:45 AM")
        assert chosen.text == "11:05 AM"
        assert rule == "hour-and-period"

    def test_closest_when_no_hour_matches(self):
        candidates = _slots("10:00 AM", "11:00 AM", "12:30 PM")
        chosen, rule = choose_slot(candidates, specific_time="1:40 PM")
        assert chosen.text == "12:30 PM"
        assert rule == "closest-time"

    def test_closest_tie_keeps_first(self):
        candidates = _slots("10:00 AM", "12:00 PM")
        chosen, _ = choose_slot(candidates, specific_time="11:00 AM")
        assert chosen.text == "10:00 AM"

    def test_exact_match_wins(self):
        candidates = _slots("2:30 PM", "02:00 PM")
        chosen, rule = choose_slot(candidates, specific_time="2:00pm")
        assert chosen.text == "02:00 PM"
        assert rule == "exact-text"

    def test_hour_and_period_distinguishes_am_pm(self):
        candidates = _slots("2:15 AM", "2:45 PM")
        chosen, rule = choose_slot(candidates, specific_time="2:00 PM")
        assert chosen.text == "2:45 PM"
        assert rule == "hour-and-period"

    def test_index_without_specific_time(self):
        candidates = _slots("10:00 AM", "11:00 AM", "12:30 PM")
        assert choose_slot(candidates, index=1)[0].text == "11:00 AM"

    def test_index_clamped(self):
        candidates = _slots("10:00 AM", "11:00 AM")
        assert choose_slot(candidates, index=7)[0].text == "11:00 AM"
        assert choose_slot(candidates, index=-3)[0].text == "10:00 AM"

    def test_unparseable_request_falls_back_to_index(self):
        candidates = _slots("10:00 AM", "11:00 AM")
        chosen, rule = choose_slot(candidates, specific_time="soon", index=1)
        assert chosen.text == "11:00 AM"
        assert rule == "index"

    def test_empty(self):
        assert choose_slot([], specific_time="10:00 AM") == (None, "none")

    def test_index_skips_labels_that_are_not_times(self):
        candidates = _slots("Name", "10:00 AM", "Camera", "11:00 AM")
        assert choose_slot(candidates, index=0)[0].text == "10:00 AM"
        assert choose_slot(candidates, index=1)[0].text == "11:00 AM"

    def test_unparsed_candidates_kept_when_nothing_parses(self):
        candidates = _slots("12:00", "13:00")
        assert choose_slot(candidates, index=1)[0].text == "13:00"


class TestServiceOptionIndex:
    def test_trimmed_case_insensitive(self):
        assert service_option_index(["Curly Cut Deluxe", "  CURLY cut "], "Curly Cut") == 1

    def test_no_match(self):
        assert service_option_index(["Trim", "Colour"], "Curly Cut") is None


class TestClassifyNameField:
    @pytest.mark.parametrize(
        "name,element_id,placeholder,expected",
        [
            ("clientFirstName", None, None, "first_name"),
            (None, "txtLast", None, "last_name"),
            (None, None, "First and last name", "last_name"),
            ("address", "addr", "Street", None),
            ("", "", "", None),
        ],
    )
    def test_routes_by_identifier(self, name, element_id, placeholder, expected):
        assert classify_name_field(name, element_id, placeholder) == expected


class TestLooksLikeTime:
    def test_accepts_clock_text(self):
        assert looks_like_time("9:30")
        assert looks_like_time("Morning AM")

    def test_rejects_show_times_button(self):
        assert not looks_like_time("Show Available Times: 12")
        assert not looks_like_time(None)
