"""Tests for booking request values and defaults."""

import dataclasses

import pytest

from automation import BookingSettings, CustomerInfo, TimePreference


class TestTimePreference:
    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Any time", TimePreference.ANY_TIME),
            ("morning (before noon)", TimePreference.MORNING),
            ("afternoon", TimePreference.AFTERNOON),
            ("EVENING", TimePreference.EVENING),
            ("any", TimePreference.ANY_TIME),
            (None, TimePreference.ANY_TIME),
            ("midnight", TimePreference.ANY_TIME),
        ],
    )
    def test_from_label(self, label, expected):
        assert TimePreference.from_label(label) is expected

    def test_option_indexes(self):
        assert [option.index for option in TimePreference] == [0, 1, 2, 3]


class TestBookingRequest:
    def _request(self, settings, **overrides):
        customer = CustomerInfo("John", "Doe", "john@example.com", "5551234567")
        request = settings.build_request(date="03/02/2026", service="Curly Cut", customer=customer)
        return request.with_overrides(**overrides)

    def test_build_request_uses_defaults(self):
        settings = BookingSettings(headless=False, slow_mo=120)
        request = self._request(settings)

        assert request.url == settings.url
        assert request.headless is False
        assert request.slow_mo == 120
        assert request.employee == "First Available"
        assert request.time_preference is TimePreference.ANY_TIME
        assert request.specific_time is None
        assert request.missing_fields() == []

    def test_overrides_return_fresh_copy(self):
        request = self._request(BookingSettings())
        changed = request.with_overrides(service="Trim", headless=False)

        assert changed.service == "Trim"
        assert changed.headless is False
        assert request.service == "Curly Cut"
        assert request.headless is True

    def test_requests_are_immutable(self):
        request = self._request(BookingSettings())
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.service = "Trim"  # type: ignore[misc]

    def test_missing_fields_lists_everything(self):
        request = self._request(
            BookingSettings(),
            date="",
            service="",
            customer=CustomerInfo("", "", "", ""),
        )
        assert request.missing_fields() == [
            "Missing field: date",
            "Missing field: service",
            "Missing field: firstName",
            "Missing field: lastName",
            "Missing field: email",
            "Missing field: phone",
        ]
